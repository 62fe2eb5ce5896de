"""A fixed-size transposition table for caching search results by Zobrist key."""

from __future__ import annotations

import enum
from dataclasses import dataclass

# Bytes taken by one entry: a 64-bit key, a depth byte, a bound byte and a 16-bit score,
# padded to 8-byte alignment.
ENTRY_SIZE = 16


class TTBound(enum.Enum):
    EXACT = enum.auto()  # every move was searched; the score is exact
    UPPER = enum.auto()  # no move improved alpha
    LOWER = enum.auto()  # a move was good enough to cause a beta cutoff


@dataclass(frozen=True)
class TTEntry:
    key: int
    depth: int
    bound: TTBound
    score: int


class TranspositionTable:
    """Direct-mapped table of search results; deeper results replace shallower ones."""

    def __init__(self, size_mb: int) -> None:
        size = (size_mb * 1_000_000) // ENTRY_SIZE
        if size <= 0:
            raise ValueError(f"Table of {size_mb} MB holds no entries")
        self.size = size
        self._table: list[TTEntry | None] = [None] * size

    def store(self, key: int, depth: int, bound: TTBound, score: int) -> None:
        """Store a result unless the slot already holds one searched at least as deep."""
        index = key % self.size
        current = self._table[index]
        if current is None or depth > current.depth:
            self._table[index] = TTEntry(key, depth, bound, score)

    def retrieve(self, key: int) -> TTEntry | None:
        """The entry stored for exactly ``key``, or None."""
        entry = self._table[key % self.size]
        if entry is not None and entry.key == key:
            return entry
        return None