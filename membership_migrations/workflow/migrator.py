# =============================================================================
# Workflow Stage Migrator
# =============================================================================
# Migration units that change a workflow's stage chain and rewrite the stage
# history already recorded on entities so it matches the new numbering.
# =============================================================================

import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional, Sequence

from ..base import MigrationUnit, RevertResult
from ..models import WorkflowStageTransition, WorkflowType
from ..store import DocumentStore
from .stage_table import WorkflowStageTable

__all__ = ["HistoryField", "HistoryRewrite", "StageMigration", "rewrite_history"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryField:
    """An embedded stage-history array and the key holding each entry's stage."""

    field: str
    stage_key: str


@dataclass
class HistoryRewrite:
    """Counters describing one history rewrite pass."""

    scanned: int = 0
    updated: int = 0
    entries_removed: int = 0
    entries_renumbered: int = 0


def rewrite_history(
    entries: Sequence[dict],
    stage_key: str,
    orders: dict[str, int],
    removed_stages: frozenset[str],
) -> tuple[list[dict], int, int]:
    """
    Rewrite one history array for a new stage numbering.

    Entries for ``removed_stages`` are dropped. Entries whose stage is in
    ``orders`` get that order. Anything else (admin rejections, unknown
    labels) is kept as recorded.

    Returns:
        (new entries, number removed, number renumbered)
    """
    rewritten = []
    removed = renumbered = 0
    for entry in entries:
        stage = entry.get(stage_key)
        if stage in removed_stages:
            removed += 1
            continue
        if stage in orders and entry.get("order") != orders[stage]:
            entry = {**entry, "order": orders[stage]}
            renumbered += 1
        rewritten.append(entry)
    return rewritten, removed, renumbered


class StageMigration(MigrationUnit):
    """
    Migration unit that moves a workflow from one stage chain to another.

    Subclasses provide the chain before (``previous_chain``) and after
    (``target_chain``) the change. apply():

    1. validates and writes the target chain to the stage table
    2. scans every entity in ``entity_collection``
    3. drops history entries of stages that left the chain and renumbers
       retained entries to the target order of their stage
    4. writes only entities whose history changed

    revert() runs the same steps towards ``previous_chain``. History entries
    deleted by apply() are gone, so revert() of a stage removal is lossy and
    says so in its RevertResult.
    """

    workflow_type: ClassVar[WorkflowType] = WorkflowType.MEMBER_ONBOARDING
    entity_collection: ClassVar[str] = "members"
    entity_id_field: ClassVar[str] = "member_id"
    history_fields: ClassVar[tuple[HistoryField, ...]] = (
        HistoryField("approval_history", "approval_stage"),
        HistoryField("rejection_history", "rejection_stage"),
    )

    def __init__(self, store: DocumentStore, stage_table: Optional[WorkflowStageTable] = None):
        self.store = store
        self.stage_table = stage_table or WorkflowStageTable(store)
        self.last_rewrite: Optional[HistoryRewrite] = None

    @abstractmethod
    def previous_chain(self) -> list[WorkflowStageTransition]:
        """Stage chain before this migration."""
        pass

    @abstractmethod
    def target_chain(self) -> list[WorkflowStageTransition]:
        """Stage chain after this migration."""
        pass

    @staticmethod
    def _stages(chain: Sequence[WorkflowStageTransition]) -> set[str]:
        return {t.approval_stage for t in chain}

    def removed_stages(self) -> frozenset[str]:
        """Stages present before this migration and absent after it."""
        return frozenset(self._stages(self.previous_chain()) - self._stages(self.target_chain()))

    def added_stages(self) -> frozenset[str]:
        return frozenset(self._stages(self.target_chain()) - self._stages(self.previous_chain()))

    def apply(self) -> None:
        logger.info(f"{self.name}: migrating {self.workflow_type.value} stage chain")
        self.stage_table.replace_chain(self.workflow_type, self.target_chain())
        self._rewrite_entities(self.target_chain(), self.removed_stages())

    def revert(self) -> RevertResult:
        logger.info(f"{self.name}: restoring previous {self.workflow_type.value} stage chain")
        self.stage_table.replace_chain(self.workflow_type, self.previous_chain())
        self._rewrite_entities(self.previous_chain(), self.added_stages())

        lost = sorted(self.removed_stages())
        if lost:
            return RevertResult.partial(
                lost,
                f"history entries for stage(s) {', '.join(lost)} were deleted by apply() "
                f"and cannot be reconstructed",
            )
        return RevertResult.full()

    def _rewrite_entities(
        self,
        chain: Sequence[WorkflowStageTransition],
        drop_stages: frozenset[str],
    ) -> HistoryRewrite:
        orders = {t.approval_stage: t.order for t in chain}
        summary = HistoryRewrite()

        # Materialised so writes do not disturb the open cursor
        for entity in list(self.store.scan(self.entity_collection)):
            summary.scanned += 1
            updates = {}

            for history in self.history_fields:
                entries = entity.get(history.field) or []
                if not entries:
                    continue
                rewritten, removed, renumbered = rewrite_history(
                    entries, history.stage_key, orders, drop_stages
                )
                if removed or renumbered:
                    updates[history.field] = rewritten
                    summary.entries_removed += removed
                    summary.entries_renumbered += renumbered

            if updates:
                self.store.update(self.entity_collection, {"_id": entity["_id"]}, updates)
                summary.updated += 1

        logger.info(
            f"{self.name}: scanned {summary.scanned} {self.entity_collection}, "
            f"updated {summary.updated} (removed {summary.entries_removed} entries, "
            f"renumbered {summary.entries_renumbered})"
        )
        self.last_rewrite = summary
        return summary
