"""
Per-context code tables.

CodeTableStore builds the table of every context up front, optionally spread
over a process pool since the builds share nothing. LazyCodeTableStore builds a
table the first time its context is looked up and keeps it.
"""

from __future__ import annotations

import multiprocessing
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from alphabet import Context, all_contexts, context_count
from frequency import FrequencyModel
from huffman import CodeTable, build_code_table


class CodeTableStore:
    def __init__(self, tables: Mapping[Context, CodeTable]):
        if len(tables) != context_count():
            raise ValueError(f"expected {context_count()} code tables, got {len(tables)}")
        self._tables = MappingProxyType(dict(tables))

    @classmethod
    def build(cls, vectors: Mapping[Context, List[int]], workers: int = 1) -> "CodeTableStore":
        contexts = list(all_contexts())
        ordered = [vectors[context] for context in contexts]
        if workers > 1:
            with multiprocessing.Pool(workers) as pool:
                tables = pool.map(build_code_table, ordered, chunksize=max(1, len(ordered) // (workers * 8)))
        else:
            tables = [build_code_table(vector) for vector in ordered]
        return cls(dict(zip(contexts, tables)))

    def lookup(self, context: Context) -> CodeTable:
        try:
            return self._tables[context]
        except KeyError:
            raise KeyError(f"{context!r} is not a context over the alphabet") from None

    def items(self):
        return self._tables.items()

    def __len__(self):
        return len(self._tables)

    def __eq__(self, other):
        if not isinstance(other, CodeTableStore):
            return NotImplemented
        return dict(self._tables) == dict(other._tables)


class LazyCodeTableStore:
    def __init__(self, vectors: Mapping[Context, List[int]]):
        self._vectors = vectors
        self._tables: Dict[Context, CodeTable] = {}

    def lookup(self, context: Context) -> CodeTable:
        table = self._tables.get(context)
        if table is None:
            vector = self._vectors.get(context)
            if vector is None:
                raise KeyError(f"{context!r} is not a context over the alphabet")
            table = build_code_table(vector)
            self._tables[context] = table
        return table

    def built_count(self) -> int:
        return len(self._tables)


def train(text: str, workers: int = 1, lazy: bool = False, model: Optional[FrequencyModel] = None):
    """Accumulate a cleaned corpus and return a store ready for encoding and decoding."""
    model = model if model is not None else FrequencyModel()
    vectors = model.accumulate_text(text)
    if lazy:
        return LazyCodeTableStore(vectors)
    return CodeTableStore.build(vectors, workers=workers)
