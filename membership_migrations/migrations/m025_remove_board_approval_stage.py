"""
Migration 025: Remove the board approval stage

Member onboarding becomes Committee (1) → CEO (2) → Payment:
- the board transition is deleted and committee leads straight to CEO
- CEO moves from order 3 to order 2
- board entries are removed from every member's approval and rejection
  history, and CEO entries are renumbered to order 2

Rollback restores the three-stage chain and CEO order 3, but the deleted
board history entries cannot be brought back.
"""

from ..models import WorkflowStageTransition, WorkflowType
from ..workflow import StageMigration
from .m015_workflow_transitions import ONBOARDING_CHAIN_V015

# =============================================================================
# FROZEN CHAIN - DO NOT MODIFY
# =============================================================================

ONBOARDING_CHAIN_V025 = [
    WorkflowStageTransition(
        workflow_type=WorkflowType.MEMBER_ONBOARDING,
        current_stage="pending_committee_approval",
        next_stage="pending_ceo_approval",
        phase="COMMITTEE_APPROVAL",
        approval_stage="committee",
        order=1,
        description="Committee reviews and approves the membership application",
    ),
    WorkflowStageTransition(
        workflow_type=WorkflowType.MEMBER_ONBOARDING,
        current_stage="pending_ceo_approval",
        next_stage="approved_pending_payment",
        phase="CEO_APPROVAL",
        approval_stage="ceo",
        order=2,
        description="CEO provides final approval before payment",
    ),
]


class RemoveBoardApprovalStageMigration(StageMigration):
    name = "025-remove-board-approval-stage"

    def previous_chain(self) -> list[WorkflowStageTransition]:
        return list(ONBOARDING_CHAIN_V015)

    def target_chain(self) -> list[WorkflowStageTransition]:
        return list(ONBOARDING_CHAIN_V025)
