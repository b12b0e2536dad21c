from typing import Dict, Iterator

from exceptions import IngestionNotFound, InvariantViolation
from models import Ingestion


class IngestionStore:
    """Every admitted ingestion, keyed by id; the source of truth for status reads.

    Entries are kept for the life of the process, including after they drain.
    """

    def __init__(self) -> None:
        self._ingestions: Dict[str, Ingestion] = {}

    def add(self, ingestion: Ingestion) -> None:
        if ingestion.ingestion_id in self._ingestions:
            raise InvariantViolation(f"ingestion {ingestion.ingestion_id} already stored")
        self._ingestions[ingestion.ingestion_id] = ingestion

    def get(self, ingestion_id: str) -> Ingestion:
        try:
            return self._ingestions[ingestion_id]
        except KeyError:
            raise IngestionNotFound(ingestion_id) from None

    def clear(self) -> None:
        """Drop everything. Only used when resetting the process state."""
        self._ingestions.clear()

    def __contains__(self, ingestion_id: object) -> bool:
        return ingestion_id in self._ingestions

    def __len__(self) -> int:
        return len(self._ingestions)

    def __iter__(self) -> Iterator[Ingestion]:
        return iter(list(self._ingestions.values()))
