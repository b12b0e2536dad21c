class IngestionError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class IngestionNotFound(IngestionError):
    """No ingestion with the requested id was ever admitted."""

    def __init__(self, ingestion_id: str) -> None:
        self.ingestion_id = ingestion_id
        super().__init__("Ingestion ID not found")


class InvariantViolation(IngestionError):
    """Internal scheduling state is inconsistent; a programming error."""


class SchedulerFaulted(IngestionError):
    """The batch worker died on an internal fault and accepts no new work."""
