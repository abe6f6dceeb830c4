"""
Unit tests for MigrationRunner.

Exercises run, rollback and status against an in-memory MongoDB.
"""

import pytest

from membership_migrations import (
    ExecutionRecordStore,
    MigrationExecutionError,
    MigrationRunner,
    RollbackStatus,
    UnknownMigrationError,
)
from membership_migrations.models import ExecutionStatus


class TestRunMigrations:
    """Test applying pending migrations."""

    def test_run_on_empty_store_completes_all(self, runner, make_unit):
        """Test that two units on an empty store both complete."""
        units = [make_unit("001-create-indexes"), make_unit("002-add-approval-order")]

        applied = runner.run_migrations(units)

        assert applied == ["001-create-indexes", "002-add-approval-order"]
        status = runner.get_status()
        assert (status.total, status.completed, status.failed, status.rolled_back) == (2, 2, 0, 0)
        assert [r.name for r in status.migrations] == applied

    def test_second_run_applies_nothing(self, runner, records, abc_units):
        """Test that re-running calls no apply() and leaves records unchanged."""
        runner.run_migrations(abc_units)
        before = [r.model_dump() for r in records.all()]

        applied = runner.run_migrations(abc_units)

        assert applied == []
        assert [u.apply_calls for u in abc_units] == [1, 1, 1]
        assert [r.model_dump() for r in records.all()] == before

    def test_failure_stops_run_and_is_recorded(self, runner, records, make_unit):
        """Test that a failing unit is recorded and later units are not attempted."""
        a, b, c = make_unit("001-a"), make_unit("002-b", fail_apply=True), make_unit("003-c")

        with pytest.raises(MigrationExecutionError) as exc_info:
            runner.run_migrations([a, b, c])

        assert exc_info.value.migration_name == "002-b"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert records.get("001-a").status == ExecutionStatus.COMPLETED
        failed = records.get("002-b")
        assert failed.status == ExecutionStatus.FAILED
        assert failed.error == "002-b exploded"
        assert records.get("003-c") is None
        assert c.apply_calls == 0

    def test_fixed_failure_resumes_from_failed_unit(self, runner, records, make_unit):
        """Test that a later run resumes at the unit that failed."""
        a, b, c = make_unit("001-a"), make_unit("002-b", fail_apply=True), make_unit("003-c")
        with pytest.raises(MigrationExecutionError):
            runner.run_migrations([a, b, c])

        b.fail_apply = False
        applied = runner.run_migrations([a, b, c])

        assert applied == ["002-b", "003-c"]
        assert (a.apply_calls, b.apply_calls, c.apply_calls) == (1, 2, 1)
        assert all(r.status == ExecutionStatus.COMPLETED for r in records.all())
        # The retry overwrote the failed record instead of adding one
        assert records.get("002-b").error is None
        assert runner.get_status().total == 3

    def test_failed_unit_is_retried_on_every_run(self, runner, make_unit):
        """Test that a failed unit is attempted again on each run."""
        broken = make_unit("001-broken", fail_apply=True)

        for _ in range(3):
            with pytest.raises(MigrationExecutionError):
                runner.run_migrations([broken])

        assert broken.apply_calls == 3
        assert runner.get_status().failed == 1

    def test_has_been_executed(self, runner, make_unit):
        unit = make_unit("001-a")
        assert not runner.has_been_executed("001-a")

        runner.run_migrations([unit])

        assert runner.has_been_executed("001-a")
        assert not runner.has_been_executed("999-missing")


class TestRollback:
    """Test rolling back the most recent migration."""

    def test_rollback_reverts_last_only(self, runner, abc_units):
        """Test that rollback reverts exactly the most recent unit."""
        runner.run_migrations(abc_units)

        result = runner.rollback_last_migration(abc_units)

        assert result.status == RollbackStatus.ROLLED_BACK
        assert result.migration_name == "003-c"
        assert [u.revert_calls for u in abc_units] == [0, 0, 1]
        status = runner.get_status()
        assert (status.total, status.completed, status.rolled_back) == (3, 2, 1)

    def test_repeated_rollback_walks_backwards(self, runner, records, abc_units):
        """Test that consecutive rollbacks walk back one unit at a time."""
        runner.run_migrations(abc_units)

        first = runner.rollback_last_migration(abc_units)
        second = runner.rollback_last_migration(abc_units)

        assert (first.migration_name, second.migration_name) == ("003-c", "002-b")
        assert records.get("001-a").status == ExecutionStatus.COMPLETED
        assert records.get("002-b").status == ExecutionStatus.ROLLED_BACK
        assert records.get("002-b").rolled_back_at is not None

    def test_rollback_with_nothing_executed_is_a_noop(self, runner, abc_units):
        """Test that rollback on an empty store reports nothing to roll back."""
        result = runner.rollback_last_migration(abc_units)

        assert result.status == RollbackStatus.NO_MIGRATIONS_TO_ROLL_BACK
        assert result.migration_name is None
        assert all(u.revert_calls == 0 for u in abc_units)

    def test_rollback_unknown_migration_leaves_record(self, runner, records, abc_units):
        """Test that a target missing from the list raises and keeps its record."""
        runner.run_migrations(abc_units)

        with pytest.raises(UnknownMigrationError, match="003-c"):
            runner.rollback_last_migration(abc_units[:2])

        assert records.get("003-c").status == ExecutionStatus.COMPLETED
        assert all(u.revert_calls == 0 for u in abc_units)

    def test_failed_revert_keeps_record_completed(self, runner, records, make_unit):
        """Test that a revert error propagates and the record stays completed."""
        unit = make_unit("001-a", revert_error=RuntimeError("cannot undo"))
        runner.run_migrations([unit])

        with pytest.raises(RuntimeError, match="cannot undo"):
            runner.rollback_last_migration([unit])

        assert records.get("001-a").status == ExecutionStatus.COMPLETED

    def test_rollback_targets_most_recent_execution_not_list_tail(self, runner, make_unit):
        """Test that rollback follows execution recency rather than list position."""
        a, b = make_unit("001-a"), make_unit("003-b")
        runner.run_migrations([a, b])

        # A later release inserts a unit before the tail of the list
        late = make_unit("002-late")
        runner.run_migrations([a, late, b])
        result = runner.rollback_last_migration([a, late, b])

        assert result.migration_name == "002-late"
        assert late.revert_calls == 1
        assert b.revert_calls == 0

    def test_partial_revert_is_reported(self, runner, make_unit, partial_revert):
        """Test that a lossy revert surfaces as a partial rollback."""
        unit = make_unit("025-remove-stage", revert_result=partial_revert)
        runner.run_migrations([unit])

        result = runner.rollback_last_migration([unit])

        assert result.status == RollbackStatus.PARTIALLY_ROLLED_BACK
        assert result.revert.unrestored == ("board",)
        assert runner.get_status().rolled_back == 1

    def test_rolled_back_migration_is_applied_again(self, runner, records, abc_units):
        """Test that a rolled-back unit is pending again on the next run."""
        runner.run_migrations(abc_units)
        runner.rollback_last_migration(abc_units)

        applied = runner.run_migrations(abc_units)

        assert applied == ["003-c"]
        record = records.get("003-c")
        assert record.status == ExecutionStatus.COMPLETED
        assert record.rolled_back_at is None


class TestSameMillisecond:
    """Test units that finish within the same clock tick."""

    @pytest.fixture
    def frozen_runner(self, store, fixed_clock):
        records = ExecutionRecordStore(store, clock=fixed_clock)
        records.ensure_collection()
        return MigrationRunner(records)

    def test_rollback_picks_last_applied_unit(self, frozen_runner, make_unit):
        """Test that rollback reverts the later unit when timestamps tie."""
        hotfix, followup = make_unit("hotfix-z"), make_unit("followup-a")
        frozen_runner.run_migrations([hotfix, followup])

        result = frozen_runner.rollback_last_migration([hotfix, followup])

        assert result.migration_name == "followup-a"
        assert (hotfix.revert_calls, followup.revert_calls) == (0, 1)

    def test_rollback_walks_back_through_tied_units(self, frozen_runner, make_unit):
        """Test that repeated rollbacks follow apply order in reverse."""
        names = ["z-unit", "y-unit", "x-unit", "w-unit"]
        units = [make_unit(name) for name in names]
        frozen_runner.run_migrations(units)

        reverted = [frozen_runner.rollback_last_migration(units).migration_name for _ in units]

        assert reverted == list(reversed(names))

    def test_status_lists_tied_units_in_apply_order(self, frozen_runner, make_unit):
        """Test that the status history keeps apply order when timestamps tie."""
        names = ["z-unit", "q-unit", "m-unit"]
        frozen_runner.run_migrations([make_unit(name) for name in names])

        assert [r.name for r in frozen_runner.get_status().migrations] == names


class TestStatus:
    """Test the status report."""

    def test_status_on_empty_store(self, runner):
        status = runner.get_status()
        assert status.total == 0
        assert status.migrations == []

    def test_status_orders_by_execution_time(self, runner, make_unit):
        """Test that status lists records by execution time, not by name."""
        runner.run_migrations([make_unit("002-b")])
        runner.run_migrations([make_unit("001-a")])

        names = [r.name for r in runner.get_status().migrations]

        assert names == ["002-b", "001-a"]

    def test_status_counts_failures(self, runner, make_unit):
        """Test that failed attempts are counted and keep their error."""
        with pytest.raises(MigrationExecutionError):
            runner.run_migrations([make_unit("001-a"), make_unit("002-b", fail_apply=True)])

        status = runner.get_status()

        assert (status.total, status.completed, status.failed) == (2, 1, 1)
        assert status.migrations[-1].error == "002-b exploded"
