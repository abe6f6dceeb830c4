# =============================================================================
# Execution Record Store
# =============================================================================
# Persists one record per migration name in the ``migrations`` collection.
# Records are upserted by name: a retry overwrites the previous attempt.
# =============================================================================

from datetime import datetime, timezone
from typing import Callable, Optional

from .models import ExecutionRecord, ExecutionStatus
from .store import DocumentStore

__all__ = ["ExecutionRecordStore", "utc_now"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionRecordStore:
    """
    Durable audit trail of migration attempts.

    Args:
        store: Document store holding the ``migrations`` collection
        clock: Callable returning the current UTC time (injectable for tests)
    """

    COLLECTION = "migrations"
    NAME_INDEX = "name_unique"

    _ORDER = [("executed_at", 1), ("sequence", 1)]

    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._clock = clock

    def ensure_collection(self) -> None:
        """Ensure the unique index on ``name`` exists."""
        self._store.ensure_unique_index(self.COLLECTION, ["name"], self.NAME_INDEX)

    def get(self, name: str) -> Optional[ExecutionRecord]:
        document = self._store.find_one(self.COLLECTION, {"name": name})
        if not document:
            return None
        return ExecutionRecord(**document)

    def _next_sequence(self) -> int:
        """
        One past the highest sequence written so far.

        executed_at is stored at millisecond precision, so units applied in
        the same millisecond share a timestamp; the sequence keeps their
        write order. Relies on the single-writer assumption.
        """
        for document in self._store.scan(self.COLLECTION, sort=[("sequence", -1)]):
            return document.get("sequence", 0) + 1
        return 1

    def has_been_executed(self, name: str) -> bool:
        """True only if the latest attempt of ``name`` completed."""
        record = self.get(name)
        return record is not None and record.status == ExecutionStatus.COMPLETED

    def record_success(self, name: str, execution_time_ms: int) -> ExecutionRecord:
        record = ExecutionRecord(
            name=name,
            executed_at=self._clock(),
            execution_time_ms=execution_time_ms,
            sequence=self._next_sequence(),
            status=ExecutionStatus.COMPLETED,
        )
        self._store.upsert(self.COLLECTION, {"name": name}, record.to_document())
        return record

    def record_failure(self, name: str, execution_time_ms: int, error: str) -> ExecutionRecord:
        record = ExecutionRecord(
            name=name,
            executed_at=self._clock(),
            execution_time_ms=execution_time_ms,
            sequence=self._next_sequence(),
            status=ExecutionStatus.FAILED,
            error=error,
        )
        self._store.upsert(self.COLLECTION, {"name": name}, record.to_document())
        return record

    def mark_rolled_back(self, name: str) -> bool:
        """
        Flip an existing record to ``rolled_back``.

        executed_at and execution_time_ms keep describing the apply attempt.
        """
        return self._store.update(
            self.COLLECTION,
            {"name": name},
            {
                "status": ExecutionStatus.ROLLED_BACK.value,
                "rolled_back_at": self._clock(),
            },
        )

    def completed(self) -> list[ExecutionRecord]:
        """Completed records in write order (oldest first)."""
        return [
            ExecutionRecord(**self._strip(doc))
            for doc in self._store.scan(
                self.COLLECTION,
                {"status": ExecutionStatus.COMPLETED.value},
                sort=self._ORDER,
            )
        ]

    def all(self) -> list[ExecutionRecord]:
        """Every record in write order (oldest first)."""
        return [
            ExecutionRecord(**self._strip(doc))
            for doc in self._store.scan(self.COLLECTION, sort=self._ORDER)
        ]

    @staticmethod
    def _strip(doc: dict) -> dict:
        stripped = dict(doc)
        stripped.pop("_id", None)
        return stripped
