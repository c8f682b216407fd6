"""
Conditional Huffman encoder and decoder.

The first CONTEXT_LENGTH symbols of a message are coded with the table of
DEFAULT_CONTEXT; every later symbol is coded with the table of the three symbols
that precede it. The decoder rebuilds the same context from what it has already
emitted, so both sides consult the same table at every position.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Sequence, Tuple

from alphabet import CONTEXT_LENGTH, DEFAULT_CONTEXT, Context, symbols_to_text, text_to_symbols

_ENCODE_INPUT = re.compile(r"[a-z ]*")
_DECODE_INPUT = re.compile(r"[01]+")


class CodecError(ValueError):
    pass


class InvalidEncodeInputError(CodecError):
    pass


class InvalidDecodeInputError(CodecError):
    pass


class InputTooShortError(CodecError):
    pass


class MalformedBitstreamError(CodecError):
    pass


def validate_encode_input(text: str) -> None:
    if not _ENCODE_INPUT.fullmatch(text):
        raise InvalidEncodeInputError(f"only lowercase letters and spaces can be encoded, got {text!r}")
    if len(text) < CONTEXT_LENGTH:
        raise InputTooShortError(f"need at least {CONTEXT_LENGTH} characters to encode, got {len(text)}")


def validate_decode_input(bits: str) -> None:
    if not _DECODE_INPUT.fullmatch(bits):
        raise InvalidDecodeInputError(f"only a non-empty string of 0s and 1s can be decoded, got {bits!r}")


def context_at(symbols: Sequence[int], position: int) -> Context:
    """Context used to code symbols[position]."""
    if position < CONTEXT_LENGTH:
        return DEFAULT_CONTEXT
    a, b, c = symbols[position - CONTEXT_LENGTH:position]
    return (a, b, c)


class Encoder:
    def __init__(self, store):
        self.store = store

    def steps(self, symbols: Sequence[int]) -> Iterator[Tuple[Context, int, str]]:
        """Yield (context, symbol, codeword) for every position of the message."""
        if len(symbols) < CONTEXT_LENGTH:
            raise InputTooShortError(f"need at least {CONTEXT_LENGTH} symbols to encode, got {len(symbols)}")
        for position, symbol in enumerate(symbols):
            context = context_at(symbols, position)
            yield context, symbol, self.store.lookup(context).codeword(symbol)

    def encode(self, symbols: Sequence[int]) -> str:
        return "".join(code for _, _, code in self.steps(symbols))

    def encode_text(self, text: str) -> str:
        validate_encode_input(text)
        return self.encode(text_to_symbols(text))


class Decoder:
    def __init__(self, store):
        self.store = store

    def decode(self, bits: str) -> List[int]:
        decoded: List[int] = []
        start = 0  # first bit of the current candidate
        cursor = 0
        while cursor < len(bits):
            table = self.store.lookup(context_at(decoded, len(decoded)))
            symbol = None
            # the tables are prefix-free, so the first match is the only one
            while symbol is None:
                if cursor >= len(bits):
                    raise MalformedBitstreamError(
                        f"input ended inside a codeword: {bits[start:]!r} after {len(decoded)} symbols"
                    )
                cursor += 1
                symbol = table.symbol_for(bits[start:cursor])
            decoded.append(symbol)
            start = cursor
        return decoded

    def decode_text(self, bits: str) -> str:
        validate_decode_input(bits)
        return symbols_to_text(self.decode(bits))


class ConditionalHuffmanCodec:
    """Encoder and decoder sharing one trained store."""

    def __init__(self, store):
        self.store = store
        self.encoder = Encoder(store)
        self.decoder = Decoder(store)

    def encode(self, text: str) -> str:
        return self.encoder.encode_text(text)

    def decode(self, bits: str) -> str:
        return self.decoder.decode_text(bits)
