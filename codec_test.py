import random

import pytest

from alphabet import DEFAULT_CONTEXT, SYMBOLS, context_from_text, text_to_symbols
from codec import (
    CodecError,
    ConditionalHuffmanCodec,
    Decoder,
    Encoder,
    InputTooShortError,
    InvalidDecodeInputError,
    InvalidEncodeInputError,
    MalformedBitstreamError,
)
from experiments import gen_markov

SENTENCE = "the cat sat on the mat"


class TestEncoder:
    def test_first_three_symbols_use_default_context(self, cat_store):
        default = cat_store.lookup(DEFAULT_CONTEXT)
        expected = "".join(default.codeword(s) for s in text_to_symbols("the"))
        assert Encoder(cat_store).encode_text("the") == expected

    def test_later_symbols_use_preceding_three(self, cat_store):
        steps = list(Encoder(cat_store).steps(text_to_symbols("the cat")))
        contexts = [context for context, _, _ in steps]
        assert contexts[:3] == [DEFAULT_CONTEXT] * 3
        assert contexts[3] == context_from_text("the")
        assert contexts[4] == context_from_text("he ")
        assert contexts[5] == context_from_text("e c")
        assert contexts[6] == context_from_text(" ca")
        assert steps[4][2] == cat_store.lookup(context_from_text("he ")).codeword(SYMBOLS.index("c"))

    def test_output_is_concatenation(self, cat_store):
        encoder = Encoder(cat_store)
        symbols = text_to_symbols(SENTENCE)
        assert encoder.encode(symbols) == "".join(code for _, _, code in encoder.steps(symbols))

    @pytest.mark.parametrize("text", ["", "a", "ab"])
    def test_too_short(self, cat_store, text):
        with pytest.raises(InputTooShortError):
            Encoder(cat_store).encode_text(text)
        with pytest.raises(InputTooShortError):
            Encoder(cat_store).encode(text_to_symbols(text))

    @pytest.mark.parametrize("text", ["The cat", "abc1", "tab\there", "café"])
    def test_invalid_characters(self, cat_store, text):
        with pytest.raises(InvalidEncodeInputError):
            Encoder(cat_store).encode_text(text)

    def test_errors_share_a_base(self):
        assert issubclass(InputTooShortError, CodecError)
        assert issubclass(MalformedBitstreamError, ValueError)


class TestDecoder:
    def test_round_trip_sentence(self, cat_store):
        codec = ConditionalHuffmanCodec(cat_store)
        assert codec.decode(codec.encode(SENTENCE)) == SENTENCE

    def test_round_trip_random_text(self, cat_store):
        rng = random.Random(7)
        codec = ConditionalHuffmanCodec(cat_store)
        for length in (3, 4, 10, 200):
            text = "".join(rng.choice(SYMBOLS) for _ in range(length))
            assert codec.decode(codec.encode(text)) == text

    def test_re_encoding_reproduces_bits(self, cat_store):
        encoded = Encoder(cat_store).encode_text(SENTENCE)
        decoded = Decoder(cat_store).decode(encoded)
        assert Encoder(cat_store).encode(decoded) == encoded

    def test_empty_bitstream_decodes_to_nothing(self, cat_store):
        assert Decoder(cat_store).decode("") == []

    def test_truncated_encoding_is_malformed(self, cat_store):
        steps = list(Encoder(cat_store).steps(text_to_symbols(SENTENCE)))
        # cut one bit into the codeword of the fifth symbol
        prefix = "".join(code for _, _, code in steps[:4])
        assert len(steps[4][2]) > 1
        with pytest.raises(MalformedBitstreamError):
            Decoder(cat_store).decode(prefix + steps[4][2][:1])

    def test_dropping_last_bit_is_malformed(self, cat_store):
        encoded = Encoder(cat_store).encode_text(SENTENCE)
        with pytest.raises(MalformedBitstreamError):
            Decoder(cat_store).decode(encoded[:-1])

    @pytest.mark.parametrize("bits", ["", "0120", "01 1", "abc"])
    def test_invalid_bits(self, cat_store, bits):
        with pytest.raises(InvalidDecodeInputError):
            Decoder(cat_store).decode_text(bits)

    def test_any_complete_codeword_run_decodes(self, cat_store):
        # a single default-context codeword is syntactically fine, it just decodes to one symbol
        code = cat_store.lookup(DEFAULT_CONTEXT).codeword(SYMBOLS.index("q"))
        assert Decoder(cat_store).decode_text(code) == "q"


class TestCompression:
    def test_context_structure_beats_fixed_width(self, markov_store):
        text = gen_markov(5_000, seed=99)
        encoded = Encoder(markov_store).encode_text(text)
        assert len(encoded) / len(text) < 5.0
        assert Decoder(markov_store).decode_text(encoded) == text
