"""
Shared pytest fixtures for the migration engine tests.

Provides an in-memory MongoDB (mongomock), a deterministic clock and a
spy migration unit factory.
"""

from datetime import datetime, timedelta, timezone

import mongomock
import pytest

from membership_migrations import (
    ExecutionRecordStore,
    MigrationRunner,
    MigrationUnit,
    MongoDocumentStore,
    RevertResult,
)
from membership_migrations.workflow import WorkflowStageTable


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def mongomock_client():
    """In-memory MongoDB client for tests."""
    return mongomock.MongoClient()


@pytest.fixture
def db(mongomock_client):
    return mongomock_client["membership_test"]


@pytest.fixture
def store(db):
    return MongoDocumentStore(db)


@pytest.fixture
def stage_table(store):
    table = WorkflowStageTable(store)
    table.ensure_indexes()
    return table


# =============================================================================
# Runner Fixtures
# =============================================================================

class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start=datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def fixed_clock():
    """Clock that never advances, like several units finishing in one millisecond."""
    instant = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def records(store, clock):
    record_store = ExecutionRecordStore(store, clock=clock)
    record_store.ensure_collection()
    return record_store


@pytest.fixture
def runner(records):
    return MigrationRunner(records)


# =============================================================================
# Spy Migration Units
# =============================================================================

class RecordingMigration(MigrationUnit):
    """Migration unit that counts calls and can be told to fail."""

    def __init__(self, name, fail_apply=False, revert_error=None, revert_result=None):
        self.name = name
        self.fail_apply = fail_apply
        self.revert_error = revert_error
        self.revert_result = revert_result
        self.apply_calls = 0
        self.revert_calls = 0

    def apply(self) -> None:
        self.apply_calls += 1
        if self.fail_apply:
            raise RuntimeError(f"{self.name} exploded")

    def revert(self):
        self.revert_calls += 1
        if self.revert_error is not None:
            raise self.revert_error
        return self.revert_result


@pytest.fixture
def make_unit():
    """Factory for RecordingMigration spies."""

    def _make(name, **kwargs) -> RecordingMigration:
        return RecordingMigration(name, **kwargs)

    return _make


@pytest.fixture
def abc_units(make_unit):
    return [make_unit("001-a"), make_unit("002-b"), make_unit("003-c")]


@pytest.fixture
def partial_revert():
    return RevertResult.partial(["board"], "board history cannot be restored")
