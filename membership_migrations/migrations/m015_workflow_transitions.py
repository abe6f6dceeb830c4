"""
Migration 015: Seed member onboarding workflow transitions

Populates ``workflow_transitions`` with the original approval flow for
member onboarding: Committee → Board → CEO → Payment.
"""

import logging

from ..base import MigrationUnit, RevertResult
from ..idempotence import upsert_documents
from ..models import WorkflowStageTransition, WorkflowType
from ..workflow import WorkflowStageTable

logger = logging.getLogger(__name__)

# =============================================================================
# FROZEN CHAIN - DO NOT MODIFY
# Later changes to the chain are separate migrations (see 025)
# =============================================================================

ONBOARDING_CHAIN_V015 = [
    WorkflowStageTransition(
        workflow_type=WorkflowType.MEMBER_ONBOARDING,
        current_stage="pending_committee_approval",
        next_stage="pending_board_approval",
        phase="COMMITTEE_APPROVAL",
        approval_stage="committee",
        order=1,
        description="Committee reviews and approves the membership application",
    ),
    WorkflowStageTransition(
        workflow_type=WorkflowType.MEMBER_ONBOARDING,
        current_stage="pending_board_approval",
        next_stage="pending_ceo_approval",
        phase="BOARD_APPROVAL",
        approval_stage="board",
        order=2,
        description="Board reviews and approves after committee approval",
    ),
    WorkflowStageTransition(
        workflow_type=WorkflowType.MEMBER_ONBOARDING,
        current_stage="pending_ceo_approval",
        next_stage="approved_pending_payment",
        phase="CEO_APPROVAL",
        approval_stage="ceo",
        order=3,
        description="CEO provides final approval before payment",
    ),
]


class WorkflowTransitionsMigration(MigrationUnit):
    name = "015-workflow-transitions"

    def __init__(self, stage_table: WorkflowStageTable):
        self.stage_table = stage_table

    def apply(self) -> None:
        self.stage_table.ensure_indexes()
        summary = upsert_documents(
            self.stage_table.store,
            WorkflowStageTable.COLLECTION,
            ["workflow_type", "current_stage"],
            [t.to_document() for t in ONBOARDING_CHAIN_V015],
        )
        logger.info(
            f"Workflow transitions seeded - Inserted: {summary.inserted}, "
            f"Modified: {summary.replaced}"
        )

    def revert(self) -> RevertResult:
        for transition in self.stage_table.get_chain(WorkflowType.MEMBER_ONBOARDING):
            self.stage_table.remove_transition(transition.workflow_type, transition.current_stage)
        logger.info("Workflow transitions removed for member onboarding")
        return RevertResult.full()
