"""
Fixed 27-symbol alphabet and the space of 3-symbol contexts over it.

Symbol 0 is the space, symbols 1..26 are the letters a..z.
"""

from __future__ import annotations

import itertools
from typing import Iterable, Iterator, List, Tuple

SYMBOLS = " abcdefghijklmnopqrstuvwxyz"
ALPHABET_SIZE = len(SYMBOLS)  # 27
CONTEXT_LENGTH = 3

Context = Tuple[int, int, int]

DEFAULT_CONTEXT: Context = (0, 0, 0)  # three spaces, codes the first symbols of a message

_CHAR_TO_SYMBOL = {ch: i for i, ch in enumerate(SYMBOLS)}


def is_symbol_char(ch: str) -> bool:
    return ch in _CHAR_TO_SYMBOL


def char_to_symbol(ch: str) -> int:
    return _CHAR_TO_SYMBOL[ch]  # KeyError for anything outside the alphabet


def symbol_to_char(symbol: int) -> str:
    return SYMBOLS[symbol]


def text_to_symbols(text: str) -> List[int]:
    return [_CHAR_TO_SYMBOL[ch] for ch in text]


def symbols_to_text(symbols: Iterable[int]) -> str:
    return "".join(SYMBOLS[s] for s in symbols)


def all_contexts() -> Iterator[Context]:
    """Every context triple, in lexicographic order of symbol index."""
    return itertools.product(range(ALPHABET_SIZE), repeat=CONTEXT_LENGTH)


def context_count() -> int:
    return ALPHABET_SIZE ** CONTEXT_LENGTH


def context_from_text(text: str) -> Context:
    if len(text) != CONTEXT_LENGTH:
        raise ValueError(f"context needs {CONTEXT_LENGTH} characters, got {text!r}")
    a, b, c = text_to_symbols(text)
    return (a, b, c)


def context_to_text(context: Context) -> str:
    return symbols_to_text(context)
