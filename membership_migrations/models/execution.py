# =============================================================================
# Execution Record Models
# =============================================================================
# Defines the ExecutionRecord model for tracking migration attempts in MongoDB
# and the aggregate status report built from those records.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


__all__ = ["ExecutionRecord", "ExecutionStatus", "MigrationStatusReport"]


class ExecutionStatus(str, Enum):
    """Outcome of the latest attempt of a migration."""

    COMPLETED = "completed"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


class ExecutionRecord(BaseModel):
    """
    Execution record document stored in the ``migrations`` collection.

    There is at most one record per migration name. A retry overwrites the
    record in place, so the record always reflects the latest attempt.
    Rollback flips the status to ``rolled_back``; records are never deleted.

    Attributes:
        name: Unique migration name (idempotence key)
        executed_at: When the latest apply attempt started recording (UTC)
        execution_time_ms: Wall-clock duration of the latest apply attempt
        sequence: Position of the latest attempt among all record writes
        status: completed / failed / rolled_back
        error: Error message, present only when status is failed
        rolled_back_at: When the migration was rolled back, if it was
    """

    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, description="Unique migration name")
    executed_at: datetime = Field(..., description="Timestamp of the latest attempt")
    execution_time_ms: int = Field(..., ge=0, description="Duration of the latest attempt")
    sequence: int = Field(
        0, ge=0, description="Write order of the latest attempt, breaks executed_at ties"
    )
    status: ExecutionStatus = Field(..., description="Outcome of the latest attempt")
    error: Optional[str] = Field(None, description="Error message if failed")
    rolled_back_at: Optional[datetime] = Field(
        None, description="Rollback timestamp if rolled back"
    )

    @model_validator(mode="after")
    def validate_error_only_when_failed(self) -> "ExecutionRecord":
        if self.error is not None and self.status != ExecutionStatus.FAILED:
            raise ValueError(
                f"error is only allowed on failed records, got status '{self.status}'"
            )
        return self

    def to_document(self) -> dict:
        """Serialize for MongoDB, dropping unset optional fields."""
        return self.model_dump(exclude_none=True)


class MigrationStatusReport(BaseModel):
    """
    Aggregate view over all execution records.

    Attributes:
        total: Number of records
        completed: Records with status completed
        failed: Records with status failed
        rolled_back: Records with status rolled_back
        migrations: All records ordered by executed_at, then sequence
    """

    total: int = 0
    completed: int = 0
    failed: int = 0
    rolled_back: int = 0
    migrations: list[ExecutionRecord] = Field(default_factory=list)

    @classmethod
    def from_records(cls, records: list[ExecutionRecord]) -> "MigrationStatusReport":
        def count(status: ExecutionStatus) -> int:
            return sum(1 for r in records if r.status == status)

        return cls(
            total=len(records),
            completed=count(ExecutionStatus.COMPLETED),
            failed=count(ExecutionStatus.FAILED),
            rolled_back=count(ExecutionStatus.ROLLED_BACK),
            migrations=list(records),
        )
