import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from exceptions import InvariantViolation


# --- Enums ---
class Priority(str, Enum):
    """Defines the priority levels for ingestion requests."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def weight(self) -> int:
        return PRIORITY_WEIGHTS[self]


PRIORITY_WEIGHTS = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class BatchStatus(str, Enum):
    """Defines the possible statuses for individual batches."""
    YET_TO_START = "yet_to_start"
    TRIGGERED = "triggered"
    COMPLETED = "completed"


class IngestionOverallStatus(str, Enum):
    """Defines the overall status of an ingestion, derived from its batches."""
    YET_TO_START = "yet_to_start"
    TRIGGERED = "triggered"
    COMPLETED = "completed"


_NEXT_STATUS = {
    BatchStatus.YET_TO_START: BatchStatus.TRIGGERED,
    BatchStatus.TRIGGERED: BatchStatus.COMPLETED,
}


def new_id() -> str:
    return str(uuid.uuid4())


# --- Scheduler state ---
@dataclass
class Batch:
    """A run of at most ``batch_size`` consecutive ids; the unit of dispatch."""

    ids: List[int]
    batch_id: str = field(default_factory=new_id)
    status: BatchStatus = BatchStatus.YET_TO_START
    started_at: Optional[float] = None
    completed_at: Optional[float] = None

    def _advance(self, target: BatchStatus) -> None:
        if _NEXT_STATUS.get(self.status) is not target:
            raise InvariantViolation(
                f"batch {self.batch_id} cannot move from {self.status.value} to {target.value}"
            )
        self.status = target

    def mark_triggered(self, now: float) -> None:
        self._advance(BatchStatus.TRIGGERED)
        self.started_at = now

    def mark_completed(self, now: float) -> None:
        self._advance(BatchStatus.COMPLETED)
        self.completed_at = now


@dataclass
class Ingestion:
    """One admitted request: its priority, admission order and batches."""

    priority: Priority
    created_at: float
    sequence: int
    batches: List[Batch]
    ingestion_id: str = field(default_factory=new_id)

    @property
    def sort_key(self):
        return (-self.priority.weight, self.created_at, self.sequence)

    def next_pending_batch(self) -> Optional[Batch]:
        for batch in self.batches:
            if batch.status is BatchStatus.YET_TO_START:
                return batch
        return None

    def is_drained(self) -> bool:
        return all(batch.status is BatchStatus.COMPLETED for batch in self.batches)


# --- Request / Response Models ---
class IngestionRequest(BaseModel):
    ids: List[int] = Field(..., description="Ids to ingest, processed in order.")
    priority: Priority

    @field_validator("ids", mode="before")
    @classmethod
    def reject_non_numeric_ids(cls, ids):
        # Lax int parsing would turn "1" and true into ids; only JSON numbers count.
        if isinstance(ids, list):
            for id_ in ids:
                if isinstance(id_, (bool, str)):
                    raise ValueError(f"ID {id_!r} is not an integer")
        return ids


class IngestionResponse(BaseModel):
    ingestion_id: str


class BatchSnapshot(BaseModel):
    batch_id: str
    ids: List[int]
    status: BatchStatus


class IngestionStatusResponse(BaseModel):
    ingestion_id: str
    status: IngestionOverallStatus
    batches: List[BatchSnapshot]
