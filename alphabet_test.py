import pytest

from alphabet import (
    ALPHABET_SIZE,
    DEFAULT_CONTEXT,
    all_contexts,
    char_to_symbol,
    context_count,
    context_from_text,
    context_to_text,
    symbols_to_text,
    text_to_symbols,
)


def test_symbol_indices():
    assert ALPHABET_SIZE == 27
    assert char_to_symbol(" ") == 0
    assert char_to_symbol("a") == 1
    assert char_to_symbol("z") == 26
    with pytest.raises(KeyError):
        char_to_symbol("A")


def test_text_conversion():
    assert text_to_symbols("a z") == [1, 0, 26]
    assert symbols_to_text([20, 8, 5]) == "the"


def test_context_space_is_complete_and_ordered():
    contexts = list(all_contexts())
    assert len(contexts) == context_count() == 19683
    assert len(set(contexts)) == len(contexts)
    assert contexts[0] == DEFAULT_CONTEXT
    assert contexts == sorted(contexts)
    assert contexts == list(all_contexts())


def test_context_text():
    assert context_from_text("   ") == DEFAULT_CONTEXT
    assert context_to_text(context_from_text("he ")) == "he "
    with pytest.raises(ValueError):
        context_from_text("ab")
