"""Workflow Stage Table - persisted ordered chain of stage transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Sequence

from ..errors import WorkflowChainError
from ..models import WorkflowStageTransition, WorkflowType
from ..store import DocumentStore
from .validation import validate_chain

__all__ = ["ChainChange", "WorkflowStageTable"]

logger = logging.getLogger(__name__)


@dataclass
class ChainChange:
    """Rows touched by ``replace_chain``."""

    upserted: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)


def _workflow_key(workflow_type: WorkflowType | str) -> str:
    return workflow_type.value if isinstance(workflow_type, WorkflowType) else workflow_type


class WorkflowStageTable:
    """
    Stage transitions stored in the ``workflow_transitions`` collection.

    Rows are keyed by (workflow_type, current_stage). Reads return rows of a
    workflow ordered by ``order``.
    """

    COLLECTION: ClassVar[str] = "workflow_transitions"
    KEY_INDEX: ClassVar[str] = "workflow_type_current_stage_unique"

    def __init__(self, store: DocumentStore):
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store

    def ensure_indexes(self) -> None:
        self._store.ensure_unique_index(
            self.COLLECTION, ["workflow_type", "current_stage"], self.KEY_INDEX
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_chain(self, workflow_type: WorkflowType | str) -> list[WorkflowStageTransition]:
        """Return every transition of ``workflow_type`` ordered by ``order``."""
        documents = self._store.scan(
            self.COLLECTION,
            {"workflow_type": _workflow_key(workflow_type)},
            sort=[("order", 1)],
        )
        transitions = []
        for doc in documents:
            doc = dict(doc)
            doc.pop("_id", None)
            transitions.append(WorkflowStageTransition(**doc))
        return transitions

    def get_transition(
        self, workflow_type: WorkflowType | str, current_stage: str
    ) -> Optional[WorkflowStageTransition]:
        document = self._store.find_one(
            self.COLLECTION,
            {"workflow_type": _workflow_key(workflow_type), "current_stage": current_stage},
        )
        if not document:
            return None
        return WorkflowStageTransition(**document)

    def get_transition_by_order(
        self, workflow_type: WorkflowType | str, order: int
    ) -> Optional[WorkflowStageTransition]:
        document = self._store.find_one(
            self.COLLECTION,
            {"workflow_type": _workflow_key(workflow_type), "order": order},
        )
        if not document:
            return None
        return WorkflowStageTransition(**document)

    def stage_orders(self, workflow_type: WorkflowType | str) -> dict[str, int]:
        """Map approval_stage label → order for the current chain."""
        return {t.approval_stage: t.order for t in self.get_chain(workflow_type)}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_transition(self, transition: WorkflowStageTransition) -> bool:
        """
        Insert or replace a transition by its key.

        Returns:
            True if the row was inserted
        """
        return self._store.upsert(self.COLLECTION, transition.key, transition.to_document())

    def remove_transition(self, workflow_type: WorkflowType | str, current_stage: str) -> bool:
        deleted = self._store.delete(
            self.COLLECTION,
            {"workflow_type": _workflow_key(workflow_type), "current_stage": current_stage},
        )
        return deleted > 0

    def replace_chain(
        self,
        workflow_type: WorkflowType | str,
        transitions: Sequence[WorkflowStageTransition],
    ) -> ChainChange:
        """
        Make the stored chain of ``workflow_type`` equal to ``transitions``.

        The new chain is validated before anything is written. Rows of the
        workflow whose current_stage is not in the new chain are removed.
        Re-running with the same chain changes nothing.

        Raises:
            WorkflowChainError: If ``transitions`` is not a valid linear chain
                or belongs to another workflow
        """
        key = _workflow_key(workflow_type)
        problems = validate_chain(transitions)
        foreign = sorted({t.workflow_type for t in transitions if t.workflow_type != key})
        if foreign:
            problems.append(f"transitions belong to {', '.join(foreign)}")
        if problems:
            raise WorkflowChainError(key, problems)

        change = ChainChange()
        wanted = {t.current_stage for t in transitions}

        for existing in self.get_chain(key):
            if existing.current_stage not in wanted:
                self.remove_transition(key, existing.current_stage)
                change.removed.append(existing.current_stage)

        for transition in sorted(transitions, key=lambda t: t.order):
            current = self.get_transition(key, transition.current_stage)
            if current is None or current.to_document() != transition.to_document():
                self.upsert_transition(transition)
                change.upserted.append(transition.current_stage)

        logger.info(
            f"Stage chain for {key}: upserted {len(change.upserted)}, removed {len(change.removed)}"
        )
        return change
