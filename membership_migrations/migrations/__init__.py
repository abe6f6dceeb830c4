# =============================================================================
# Membership Ledger Migrations
# =============================================================================
# The ordered list of migration units applied to the membership ledger.
# Never reorder or rename a released migration; append new ones at the end.
# =============================================================================

from pymongo.database import Database

from ..base import MigrationUnit
from ..registry import MigrationRegistry
from ..store import MongoDocumentStore
from ..workflow import WorkflowStageTable
from .m001_database_indexes import DatabaseIndexesMigration
from .m002_add_approval_order import AddApprovalOrderMigration
from .m012_initialize_member_counter import InitializeMemberCounterMigration
from .m015_workflow_transitions import WorkflowTransitionsMigration
from .m025_remove_board_approval_stage import RemoveBoardApprovalStageMigration

__all__ = [
    "build_default_migrations",
    "DatabaseIndexesMigration",
    "AddApprovalOrderMigration",
    "InitializeMemberCounterMigration",
    "WorkflowTransitionsMigration",
    "RemoveBoardApprovalStageMigration",
]


def build_default_migrations(db: Database) -> tuple[MigrationUnit, ...]:
    """
    Build the ordered migration list for a connected database.

    Args:
        db: PyMongo Database instance (already connected)

    Returns:
        Immutable ordered sequence of migration units
    """
    store = MongoDocumentStore(db)
    stage_table = WorkflowStageTable(store)

    return (
        MigrationRegistry()
        # 1. Create database indexes
        .register(DatabaseIndexesMigration(db))
        # 2. Add order field to approval/rejection history
        .register(AddApprovalOrderMigration(store))
        # 3. Initialize member counter
        .register(InitializeMemberCounterMigration(store))
        # 4. Seed workflow transitions (committee → board → ceo)
        .register(WorkflowTransitionsMigration(stage_table))
        # 5. Remove board stage from transitions and history
        .register(RemoveBoardApprovalStageMigration(store, stage_table))
        .build()
    )
