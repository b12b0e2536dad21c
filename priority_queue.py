"""
Admission queue of ingestions that still have batches to drain.

Ordered by priority weight (highest first), then admission time, then
admission sequence. Entries leave the queue only once fully drained, so the
head is always the ingestion the worker should draw its next batch from.
"""

import heapq
from typing import List, Optional, Set, Tuple

from exceptions import InvariantViolation
from models import Ingestion


class AdmissionQueue:
    def __init__(self) -> None:
        self._heap: List[Tuple[Tuple[int, float, int], Ingestion]] = []
        self._members: Set[str] = set()

    def enqueue(self, ingestion: Ingestion) -> None:
        if ingestion.ingestion_id in self._members:
            raise InvariantViolation(f"ingestion {ingestion.ingestion_id} is already queued")
        heapq.heappush(self._heap, (ingestion.sort_key, ingestion))
        self._members.add(ingestion.ingestion_id)

    def peek_head(self) -> Optional[Ingestion]:
        """Return the highest-priority ingestion, or None when empty."""
        if not self._heap:
            return None
        return self._heap[0][1]

    def dequeue_head(self) -> Ingestion:
        """Remove the head. It must be fully drained."""
        if not self._heap:
            raise IndexError("dequeue from an empty admission queue")
        head = self._heap[0][1]
        if not head.is_drained():
            raise InvariantViolation(
                f"ingestion {head.ingestion_id} dequeued with undrained batches"
            )
        heapq.heappop(self._heap)
        self._members.discard(head.ingestion_id)
        return head

    def clear(self) -> None:
        self._heap.clear()
        self._members.clear()

    def empty(self) -> bool:
        return not self._heap

    def qsize(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, ingestion_id: object) -> bool:
        return ingestion_id in self._members
