from typing import Iterable

from models import (
    Batch,
    BatchSnapshot,
    BatchStatus,
    Ingestion,
    IngestionOverallStatus,
    IngestionStatusResponse,
)


def derive_overall_status(batches: Iterable[Batch]) -> IngestionOverallStatus:
    """Compute an ingestion's status from its batches.

    A batch in flight makes the whole ingestion ``triggered``; only when every
    batch is done is it ``completed``. Anything else, including a mix of
    completed and not-yet-started batches with nothing in flight, reports
    ``yet_to_start``.
    """
    statuses = [batch.status for batch in batches]
    if any(status is BatchStatus.TRIGGERED for status in statuses):
        return IngestionOverallStatus.TRIGGERED
    if all(status is BatchStatus.COMPLETED for status in statuses):
        return IngestionOverallStatus.COMPLETED
    return IngestionOverallStatus.YET_TO_START


def snapshot(ingestion: Ingestion) -> IngestionStatusResponse:
    """Build a fresh, detached view of ``ingestion`` for clients."""
    return IngestionStatusResponse(
        ingestion_id=ingestion.ingestion_id,
        status=derive_overall_status(ingestion.batches),
        batches=[
            BatchSnapshot(batch_id=batch.batch_id, ids=list(batch.ids), status=batch.status)
            for batch in ingestion.batches
        ],
    )
