import math

import pytest

from batching import build_batches, partition_ids
from models import BatchStatus


@pytest.mark.parametrize(
    "ids, expected",
    [
        ([1], [[1]]),
        ([1, 2, 3], [[1, 2, 3]]),
        ([1, 2, 3, 4, 5], [[1, 2, 3], [4, 5]]),
        ([1, 2, 3, 4, 5, 6, 7], [[1, 2, 3], [4, 5, 6], [7]]),
    ],
)
def test_partition_ids_chunks_in_order(ids, expected):
    assert partition_ids(ids) == expected


@pytest.mark.parametrize("length", [1, 2, 3, 4, 8, 9, 10, 31])
def test_partition_is_exhaustive_and_order_preserving(length):
    ids = list(range(1000, 1000 + length))
    chunks = partition_ids(ids)

    assert [i for chunk in chunks for i in chunk] == ids
    assert len(chunks) == math.ceil(length / 3)
    assert all(1 <= len(chunk) <= 3 for chunk in chunks)


def test_partition_keeps_duplicate_ids():
    assert partition_ids([5, 5, 5, 5]) == [[5, 5, 5], [5]]


def test_partition_honours_custom_batch_size():
    assert partition_ids([1, 2, 3, 4, 5], batch_size=2) == [[1, 2], [3, 4], [5]]


def test_partition_rejects_non_positive_batch_size():
    with pytest.raises(ValueError):
        partition_ids([1, 2], batch_size=0)


def test_build_batches_starts_pending_with_unique_ids():
    batches = build_batches([1, 2, 3, 4, 5])

    assert [b.ids for b in batches] == [[1, 2, 3], [4, 5]]
    assert all(b.status is BatchStatus.YET_TO_START for b in batches)
    assert len({b.batch_id for b in batches}) == 2
