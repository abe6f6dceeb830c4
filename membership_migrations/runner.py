"""
Migration Runner - applies, rolls back and reports migrations.

Migrations run strictly one at a time in list order. The list order is part
of the deployed contract and must not change after release: there is no
dependency graph, so a later unit may rely on every earlier unit.

Single-writer assumption: only one runner may operate on a given store at a
time. Two concurrent runners can both see a unit as pending and both apply
it, which is tolerable only because units are idempotent.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .base import MigrationUnit, RevertResult
from .errors import MigrationExecutionError, UnknownMigrationError
from .models import MigrationStatusReport
from .records import ExecutionRecordStore

__all__ = ["MigrationRunner", "RollbackResult", "RollbackStatus"]

logger = logging.getLogger(__name__)


class RollbackStatus(str, Enum):
    """Outcome of a rollback call."""

    ROLLED_BACK = "rolled_back"
    PARTIALLY_ROLLED_BACK = "partially_rolled_back"
    NO_MIGRATIONS_TO_ROLL_BACK = "no_migrations_to_roll_back"


@dataclass(frozen=True)
class RollbackResult:
    """
    Result of ``rollback_last_migration``.

    ``NO_MIGRATIONS_TO_ROLL_BACK`` is an expected steady state, so it is
    returned rather than raised.
    """

    status: RollbackStatus
    migration_name: Optional[str] = None
    revert: Optional[RevertResult] = None
    execution_time_ms: int = 0

    @classmethod
    def nothing_to_roll_back(cls) -> "RollbackResult":
        return cls(status=RollbackStatus.NO_MIGRATIONS_TO_ROLL_BACK)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class MigrationRunner:
    """
    Executes and tracks migrations against an execution record store.

    Args:
        records: Store of execution records (one per migration name)
    """

    def __init__(self, records: ExecutionRecordStore):
        self._records = records

    @property
    def records(self) -> ExecutionRecordStore:
        return self._records

    def has_been_executed(self, name: str) -> bool:
        """Read-only probe: has ``name`` completed (and not been rolled back)?"""
        return self._records.has_been_executed(name)

    def run_migrations(self, units: Sequence[MigrationUnit]) -> list[str]:
        """
        Apply every pending unit in list order.

        Completed units are skipped. Failed and rolled-back units are
        attempted again. The first failing unit aborts the run after its
        failure has been recorded; later units are not attempted.

        Args:
            units: Ordered migration units

        Returns:
            Names of the units applied by this call

        Raises:
            MigrationExecutionError: If a unit's apply() raised
        """
        logger.info(f"Checking {len(units)} migrations...")
        applied = []

        for unit in units:
            if self.has_been_executed(unit.name):
                logger.debug(f"Migration {unit.name} already executed, skipping")
                continue

            self._execute(unit)
            applied.append(unit.name)

        logger.info(f"All migrations completed successfully ({len(applied)} applied)")
        return applied

    def _execute(self, unit: MigrationUnit) -> None:
        logger.info(f"Running migration: {unit.name}")
        start = time.monotonic()

        try:
            unit.apply()
        except Exception as e:
            duration_ms = _elapsed_ms(start)
            self._records.record_failure(unit.name, duration_ms, str(e) or type(e).__name__)
            logger.error(f"Migration {unit.name} failed after {duration_ms}ms: {e}")
            raise MigrationExecutionError(unit.name, e) from e

        duration_ms = _elapsed_ms(start)
        self._records.record_success(unit.name, duration_ms)
        logger.info(f"Migration {unit.name} completed in {duration_ms}ms")

    def rollback_last_migration(self, units: Sequence[MigrationUnit]) -> RollbackResult:
        """
        Revert the most recently executed completed migration.

        The target is chosen by executed_at, then by write sequence for units
        stamped in the same millisecond, not by list position. The two differ
        when units were reordered between releases; recency reflects what
        actually happened to the store.

        Args:
            units: Current migration list, used to resolve the target by name

        Returns:
            RollbackResult describing what was reverted

        Raises:
            UnknownMigrationError: If the target is missing from ``units``
            Exception: Whatever revert() raised; the record stays completed
        """
        executed = self._records.completed()
        if not executed:
            logger.warning("No migrations to rollback")
            return RollbackResult.nothing_to_roll_back()

        target_name = executed[-1].name
        unit = next((u for u in units if u.name == target_name), None)
        if unit is None:
            raise UnknownMigrationError(target_name)

        logger.info(f"Rolling back migration: {unit.name}")
        start = time.monotonic()

        try:
            revert = unit.revert() or RevertResult.full()
        except Exception as e:
            logger.error(f"Rollback of {unit.name} failed: {e}")
            raise

        duration_ms = _elapsed_ms(start)
        self._records.mark_rolled_back(unit.name)

        if revert.complete:
            logger.info(f"Migration {unit.name} rolled back in {duration_ms}ms")
            status = RollbackStatus.ROLLED_BACK
        else:
            logger.warning(
                f"Migration {unit.name} rolled back in {duration_ms}ms with data loss: "
                f"{revert.message} (unrestored: {', '.join(revert.unrestored)})"
            )
            status = RollbackStatus.PARTIALLY_ROLLED_BACK

        return RollbackResult(
            status=status,
            migration_name=unit.name,
            revert=revert,
            execution_time_ms=duration_ms,
        )

    def get_status(self) -> MigrationStatusReport:
        """Aggregate counts by status plus all records in write order."""
        return MigrationStatusReport.from_records(self._records.all())
