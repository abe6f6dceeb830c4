# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and settings for the membership migration engine.
# =============================================================================

"""
Data models for the migration engine.

This library provides:
- ExecutionRecord: Durable outcome of a migration attempt
- MigrationStatusReport: Aggregate view over execution records
- Workflow models: Stage transitions and per-member stage history
- Configuration models
"""

# Execution models
from .execution import (
    ExecutionRecord,
    ExecutionStatus,
    MigrationStatusReport,
)

# Workflow models
from .workflow import (
    ADMIN_REJECTION_STAGE,
    ApprovalHistoryEntry,
    RejectionHistoryEntry,
    WorkflowStageTransition,
    WorkflowType,
)

# Configuration models
from .config import (
    MigrationSettings,
    MongoSettings,
)

__all__ = [
    # Execution models
    "ExecutionRecord",
    "ExecutionStatus",
    "MigrationStatusReport",
    # Workflow models
    "ADMIN_REJECTION_STAGE",
    "ApprovalHistoryEntry",
    "RejectionHistoryEntry",
    "WorkflowStageTransition",
    "WorkflowType",
    # Configuration models
    "MigrationSettings",
    "MongoSettings",
]
