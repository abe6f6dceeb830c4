"""
Migration 001: Database Indexes

Creates the indexes the membership ledger relies on:
- members: unique member_id, status, category, company name, created_at desc
- users: unique email, unique username, roles
- migrations / workflow_transitions: unique natural keys

Indexes are created only when an index with the same name is absent.
"""

from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from ..base import MigrationUnit, RevertResult
from ..idempotence import drop_index_if_exists, ensure_index

# =============================================================================
# FROZEN INDEX DEFINITIONS - DO NOT MODIFY
# To change an index: create a new migration
# =============================================================================

INDEXES_V001 = {
    "members": [
        ("idx_member_id", [("member_id", ASCENDING)], {"unique": True}),
        ("idx_member_status", [("status", ASCENDING)], {}),
        ("idx_member_category", [("category", ASCENDING)], {}),
        ("idx_company_name", [("company_information.company_name", ASCENDING)], {}),
        ("idx_member_created", [("created_at", DESCENDING)], {}),
    ],
    "users": [
        ("idx_user_email", [("email", ASCENDING)], {"unique": True}),
        ("idx_user_username", [("username", ASCENDING)], {"unique": True}),
        ("idx_user_roles", [("roles", ASCENDING)], {}),
    ],
    "migrations": [
        ("name_unique", [("name", ASCENDING)], {"unique": True}),
    ],
    "workflow_transitions": [
        (
            "workflow_type_current_stage_unique",
            [("workflow_type", ASCENDING), ("current_stage", ASCENDING)],
            {"unique": True},
        ),
    ],
}

# The runner and stage table rely on these, so revert leaves them in place.
_SYSTEM_COLLECTIONS = {"migrations", "workflow_transitions"}


class DatabaseIndexesMigration(MigrationUnit):
    name = "001-database-indexes"

    def __init__(self, db: Database):
        self.db = db

    def apply(self) -> None:
        for collection_name, indexes in INDEXES_V001.items():
            collection = self.db[collection_name]
            for index_name, keys, options in indexes:
                ensure_index(collection, keys, index_name, **options)

    def revert(self) -> RevertResult:
        for collection_name, indexes in INDEXES_V001.items():
            if collection_name in _SYSTEM_COLLECTIONS:
                continue
            if collection_name not in self.db.list_collection_names():
                continue
            for index_name, _, _ in indexes:
                drop_index_if_exists(self.db[collection_name], index_name)
        return RevertResult.full()
