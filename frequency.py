"""
Follow-symbol frequencies per 3-symbol context.

The model slides a window of CONTEXT_LENGTH symbols over a corpus and counts
which symbol follows each window. The vectors handed out for tree building are
smoothed so that every symbol has a codeword in every context.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from alphabet import ALPHABET_SIZE, CONTEXT_LENGTH, Context, all_contexts, is_symbol_char, char_to_symbol

# count' = count * SMOOTHING_SCALE + SMOOTHING_OFFSET
SMOOTHING_SCALE = 10
SMOOTHING_OFFSET = 1


def smooth(vector: List[int]) -> List[int]:
    return [count * SMOOTHING_SCALE + SMOOTHING_OFFSET for count in vector]


class FrequencyModel:
    def __init__(self):
        self.counts: Dict[Context, List[int]] = {context: [0] * ALPHABET_SIZE for context in all_contexts()}
        self.transitions = 0  # number of (context, next symbol) pairs counted

    def accumulate(self, symbols: Iterable[int]) -> Dict[Context, List[int]]:
        """
        Count every (s1, s2, s3) -> s4 transition in the stream and return the
        smoothed vectors for all contexts.

        Reading stops at the end of the stream or at the first value that is not
        a symbol index. Calling it again adds to the existing counts; the window
        does not carry over between calls.
        """
        window: List[int] = []
        for symbol in symbols:
            if not 0 <= symbol < ALPHABET_SIZE:
                break
            if len(window) == CONTEXT_LENGTH:
                self.counts[(window[0], window[1], window[2])][symbol] += 1
                self.transitions += 1
                window.pop(0)
            window.append(symbol)
        return self.smoothed()

    def accumulate_text(self, text: str) -> Dict[Context, List[int]]:
        return self.accumulate(_symbols_until_invalid(text))

    def smoothed(self) -> Dict[Context, List[int]]:
        return {context: smooth(vector) for context, vector in self.counts.items()}

    def observed_contexts(self) -> int:
        return sum(1 for vector in self.counts.values() if any(vector))


def _symbols_until_invalid(text: str):
    for ch in text:
        if not is_symbol_char(ch):
            return
        yield char_to_symbol(ch)


def accumulate(symbols: Iterable[int]) -> Dict[Context, List[int]]:
    return FrequencyModel().accumulate(symbols)
