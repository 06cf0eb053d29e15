"""
app/ingestion/batch.py

Ordered, threshold-aware document accumulator.
"""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")


class BatchAccumulator(Generic[T]):
    """
    Holds documents until the caller decides to flush.

    Flush timing belongs to the caller: check `should_flush()` after every
    `add()`, and drain once more at end of stream when not empty.
    """

    def __init__(self, threshold: int) -> None:
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        self._threshold = threshold
        self._items: list[T] = []

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> int:
        self._items.append(item)
        return len(self._items)

    def should_flush(self) -> bool:
        return len(self._items) == self._threshold

    def drain(self) -> list[T]:
        drained = self._items
        self._items = []
        return drained
