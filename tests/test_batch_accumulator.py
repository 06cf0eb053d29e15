from __future__ import annotations

import pytest

from app.ingestion.batch import BatchAccumulator


def test_add_returns_new_size() -> None:
    batch: BatchAccumulator[str] = BatchAccumulator(3)

    assert batch.add("a") == 1
    assert batch.add("b") == 2
    assert len(batch) == 2


def test_should_flush_only_at_threshold() -> None:
    batch: BatchAccumulator[str] = BatchAccumulator(3)

    batch.add("a")
    batch.add("b")
    assert not batch.should_flush()

    batch.add("c")
    assert batch.should_flush()


def test_drain_preserves_order_and_resets() -> None:
    batch: BatchAccumulator[int] = BatchAccumulator(5)
    for value in (3, 1, 2):
        batch.add(value)

    assert batch.drain() == [3, 1, 2]
    assert batch.is_empty
    assert batch.drain() == []


def test_no_implicit_flush_past_threshold() -> None:
    batch: BatchAccumulator[int] = BatchAccumulator(1)
    batch.add(1)
    batch.add(2)

    assert len(batch) == 2
    assert not batch.should_flush()


@pytest.mark.parametrize("threshold", [0, -1])
def test_threshold_must_be_positive(threshold: int) -> None:
    with pytest.raises(ValueError):
        BatchAccumulator(threshold)
