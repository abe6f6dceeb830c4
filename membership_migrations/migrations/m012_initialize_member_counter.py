"""
Migration 012: Initialize member counter

Creates the ``member_id`` sequence in the ``counters`` collection, seeded
from the number of existing members. An existing counter is never reset.
"""

import logging

from ..base import MigrationUnit, RevertResult
from ..idempotence import ensure_document
from ..store import DocumentStore

logger = logging.getLogger(__name__)


class InitializeMemberCounterMigration(MigrationUnit):
    name = "012-initialize-member-counter"

    COUNTERS = "counters"
    MEMBERS = "members"
    COUNTER_KEY = {"name": "member_id"}

    def __init__(self, store: DocumentStore):
        self.store = store

    def apply(self) -> None:
        seed = self.store.count(self.MEMBERS)
        created = ensure_document(self.store, self.COUNTERS, self.COUNTER_KEY, {"seq": seed})
        if created:
            logger.info(f"Initialized member counter at {seed}")
        else:
            logger.info("Member counter already exists, leaving it untouched")

    def revert(self) -> RevertResult:
        self.store.delete(self.COUNTERS, self.COUNTER_KEY)
        return RevertResult.full()
