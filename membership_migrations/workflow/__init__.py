"""
Approval workflow stage table and stage-chain migrations.

- WorkflowStageTable: persisted ordered chain of stage transitions
- StageMigration: migration unit that changes the chain and rewrites the
  stage history recorded on entities
- validate_chain / validate_approval_sequence: ordering checks
"""

from .migrator import HistoryField, HistoryRewrite, StageMigration, rewrite_history
from .stage_table import ChainChange, WorkflowStageTable
from .validation import ValidationResult, validate_approval_sequence, validate_chain

__all__ = [
    "HistoryField",
    "HistoryRewrite",
    "StageMigration",
    "rewrite_history",
    "ChainChange",
    "WorkflowStageTable",
    "ValidationResult",
    "validate_approval_sequence",
    "validate_chain",
]
