"""
Migration 002: Add order to approval and rejection history

Stamps an ``order`` on every embedded history entry so approvals can be
checked for sequence: committee (1) → board (2) → ceo (3). Admin
rejections sit outside the chain and get order 0, as do unknown stages
(logged as warnings).
"""

import logging

from ..base import MigrationUnit, RevertResult
from ..models import ADMIN_REJECTION_STAGE
from ..store import DocumentStore

logger = logging.getLogger(__name__)

# Chain numbering at the time this migration was written. FROZEN.
STAGE_ORDERS_V002 = {"committee": 1, "board": 2, "ceo": 3}

HISTORY_FIELDS = (
    ("approval_history", "approval_stage"),
    ("rejection_history", "rejection_stage"),
)


def order_for_stage(stage: str, member_id: str) -> int:
    if stage in STAGE_ORDERS_V002:
        return STAGE_ORDERS_V002[stage]
    if stage != ADMIN_REJECTION_STAGE:
        logger.warning(f"Unknown approval stage: {stage} for member {member_id}")
    return 0


class AddApprovalOrderMigration(MigrationUnit):
    name = "002-add-approval-order"

    COLLECTION = "members"

    def __init__(self, store: DocumentStore):
        self.store = store

    def apply(self) -> None:
        updated = 0
        for member in list(self.store.scan(self.COLLECTION)):
            member_id = member.get("member_id", str(member.get("_id")))
            updates = {}
            for field, stage_key in HISTORY_FIELDS:
                entries = member.get(field) or []
                stamped = [
                    {**entry, "order": order_for_stage(entry.get(stage_key), member_id)}
                    for entry in entries
                ]
                if stamped != entries:
                    updates[field] = stamped
            if updates:
                self.store.update(self.COLLECTION, {"_id": member["_id"]}, updates)
                updated += 1

        logger.info(f"Added order field to approval/rejection history for {updated} members")

    def revert(self) -> RevertResult:
        for member in list(self.store.scan(self.COLLECTION)):
            updates = {}
            for field, _ in HISTORY_FIELDS:
                entries = member.get(field) or []
                if any("order" in entry for entry in entries):
                    updates[field] = [
                        {k: v for k, v in entry.items() if k != "order"} for entry in entries
                    ]
            if updates:
                self.store.update(self.COLLECTION, {"_id": member["_id"]}, updates)

        logger.info("Removed order field from approval and rejection history")
        return RevertResult.full()
