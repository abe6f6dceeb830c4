# =============================================================================
# Workflow Models Module
# =============================================================================
# Defines models for the approval workflow:
# - WorkflowType: Named business workflows
# - WorkflowStageTransition: One row of the persisted stage table
# - ApprovalHistoryEntry / RejectionHistoryEntry: Per-member stage history
# =============================================================================

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "WorkflowType",
    "WorkflowStageTransition",
    "ApprovalHistoryEntry",
    "RejectionHistoryEntry",
    "ADMIN_REJECTION_STAGE",
]

# Rejections issued by an administrator sit outside the approval chain.
ADMIN_REJECTION_STAGE = "admin"


class WorkflowType(str, Enum):
    """Business workflows that carry an ordered stage table."""

    MEMBER_ONBOARDING = "member_onboarding"


class WorkflowStageTransition(BaseModel):
    """
    A single transition in a workflow's stage table.

    Keyed by (workflow_type, current_stage). For a given workflow the rows
    form one linear chain from the initial stage to the terminal stage, with
    ``order`` contiguous from 1.

    Attributes:
        workflow_type: Workflow this transition belongs to
        current_stage: Status an entity is in while awaiting this approval
        next_stage: Status the entity moves to once approved
        order: Position of this approval in the chain (1-based)
        approval_stage: Label recorded on history entries (e.g. "committee")
        phase: Optional phase identifier used by workflow handlers
        is_active: Whether the transition is currently in use
        description: Human-readable description
    """

    model_config = ConfigDict(use_enum_values=True)

    workflow_type: WorkflowType = Field(..., description="Workflow identifier")
    current_stage: str = Field(..., min_length=1, description="Stage awaiting approval")
    next_stage: str = Field(..., min_length=1, description="Stage after approval")
    order: int = Field(..., ge=1, description="Position in the approval chain")
    approval_stage: str = Field(..., min_length=1, description="Approval stage label")
    phase: Optional[str] = Field(None, description="Workflow phase identifier")
    is_active: bool = Field(True, description="Whether the transition is active")
    description: str = Field("", description="Human-readable description")

    @property
    def key(self) -> dict:
        return {"workflow_type": self.workflow_type, "current_stage": self.current_stage}

    def to_document(self) -> dict:
        return self.model_dump()


class ApprovalHistoryEntry(BaseModel):
    """Approval recorded on a member at a given stage."""

    approval_stage: str = Field(..., description="Stage label at time of approval")
    order: int = Field(..., ge=0, description="Chain position at time of approval")
    approved_by: str = Field(..., description="Approver username or email")
    approver_email: str = Field(..., description="Approver email")
    comments: Optional[str] = Field(None, description="Approver comments")
    approved_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Approval timestamp",
    )


class RejectionHistoryEntry(BaseModel):
    """Rejection recorded on a member at a given stage (or by an admin)."""

    rejection_stage: str = Field(..., description="Stage label at time of rejection")
    order: int = Field(..., ge=0, description="Chain position, 0 for admin rejections")
    rejected_by: str = Field(..., description="Rejector username or email")
    rejector_email: str = Field(..., description="Rejector email")
    reason: str = Field(..., max_length=2000, description="Rejection reason")
    rejected_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Rejection timestamp",
    )

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason cannot be empty")
        return v.strip()
