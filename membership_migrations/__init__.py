# =============================================================================
# Membership Ledger Migrations
# =============================================================================
# Versioned migration engine for the membership MongoDB ledger.
# See individual sub-packages for detailed documentation.
# =============================================================================

"""
Membership ledger migration engine.

Sub-packages:
- models: Pydantic data models and settings
- workflow: Approval workflow stage table and stage migrations
- migrations: The ordered list of concrete migration units
"""

__version__ = "0.1.0"

from .base import MigrationUnit, RevertResult
from .errors import (
    MigrationError,
    MigrationExecutionError,
    UnknownMigrationError,
    WorkflowChainError,
)
from .records import ExecutionRecordStore
from .registry import MigrationRegistry
from .runner import MigrationRunner, RollbackResult, RollbackStatus
from .store import DocumentStore, MongoDocumentStore

__all__ = [
    "MigrationUnit",
    "RevertResult",
    "MigrationError",
    "MigrationExecutionError",
    "UnknownMigrationError",
    "WorkflowChainError",
    "ExecutionRecordStore",
    "MigrationRegistry",
    "MigrationRunner",
    "RollbackResult",
    "RollbackStatus",
    "DocumentStore",
    "MongoDocumentStore",
]
