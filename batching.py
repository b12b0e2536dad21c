from typing import List, Sequence

from config import BATCH_SIZE
from models import Batch


def partition_ids(ids: Sequence[int], batch_size: int = BATCH_SIZE) -> List[List[int]]:
    """Split ``ids`` into consecutive chunks of ``batch_size``; the last holds the remainder."""
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    return [list(ids[i:i + batch_size]) for i in range(0, len(ids), batch_size)]


def build_batches(ids: Sequence[int], batch_size: int = BATCH_SIZE) -> List[Batch]:
    return [Batch(ids=chunk) for chunk in partition_ids(ids, batch_size)]
