# =============================================================================
# Workflow Validation
# =============================================================================
# Checks that a stage chain is one contiguous linear path, and that an
# approval is being recorded without skipping earlier stages.
# =============================================================================

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from ..models import WorkflowStageTransition

__all__ = [
    "ValidationResult",
    "validate_chain",
    "validate_approval_sequence",
    "MULTI_APPROVAL_STAGES",
]

# Stages where several approvers each record their own approval.
MULTI_APPROVAL_STAGES = frozenset({"committee"})


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)


def validate_chain(transitions: Sequence[WorkflowStageTransition]) -> list[str]:
    """
    Validate that transitions form a single linear chain.

    Rules:
    - at least one transition, all for the same workflow
    - current_stage and approval_stage are unique
    - order values are exactly 1..n
    - each transition's next_stage is the following transition's current_stage

    Args:
        transitions: Transitions of one workflow, in any order

    Returns:
        List of problems (empty when the chain is valid)
    """
    if not transitions:
        return ["chain has no transitions"]

    problems = []

    workflow_types = {t.workflow_type for t in transitions}
    if len(workflow_types) > 1:
        problems.append(f"chain mixes workflow types: {', '.join(sorted(map(str, workflow_types)))}")

    for attr in ("current_stage", "approval_stage"):
        values = [getattr(t, attr) for t in transitions]
        duplicates = sorted({v for v in values if values.count(v) > 1})
        if duplicates:
            problems.append(f"duplicate {attr}: {', '.join(duplicates)}")

    ordered = sorted(transitions, key=lambda t: t.order)
    orders = [t.order for t in ordered]
    expected = list(range(1, len(ordered) + 1))
    if orders != expected:
        problems.append(f"orders must be contiguous from 1, got {orders}")

    for current, following in zip(ordered, ordered[1:]):
        if current.next_stage != following.current_stage:
            problems.append(
                f"{current.current_stage} (order {current.order}) leads to "
                f"{current.next_stage}, expected {following.current_stage}"
            )

    terminal = ordered[-1].next_stage
    if terminal in {t.current_stage for t in ordered}:
        problems.append(f"terminal stage {terminal} loops back into the chain")

    return problems


def _acted_at(entries: Iterable[Mapping], order: int) -> bool:
    return any(entry.get("order") == order for entry in entries)


def validate_approval_sequence(
    chain: Sequence[WorkflowStageTransition],
    approval_stage: str,
    approval_history: Sequence[Mapping],
    rejection_history: Sequence[Mapping] = (),
    approver_email: Optional[str] = None,
) -> ValidationResult:
    """
    Validate that an approval at ``approval_stage`` does not skip a stage.

    Every earlier stage must have been completed, by an approval or by a
    rejection. Multi-approval stages (committee) accept one approval per
    approver; any other stage accepts a single approval.

    Args:
        chain: Current stage table for the workflow
        approval_stage: Stage being approved (e.g. "ceo")
        approval_history: Member's recorded approvals (documents with "order")
        rejection_history: Member's recorded rejections
        approver_email: Email of the user approving now

    Returns:
        ValidationResult
    """
    by_stage = {t.approval_stage: t for t in chain}
    transition = by_stage.get(approval_stage)
    if transition is None:
        return ValidationResult.invalid(f"Unknown approval stage: {approval_stage}")

    by_order = {t.order: t for t in chain}
    for order in range(1, transition.order):
        if not _acted_at(approval_history, order) and not _acted_at(rejection_history, order):
            stage_name = by_order[order].approval_stage if order in by_order else "Unknown"
            return ValidationResult.invalid(
                f"Invalid approval order: {stage_name} stage (order {order}) "
                f"has not been completed yet"
            )

    if approval_stage in MULTI_APPROVAL_STAGES:
        already = any(
            entry.get("order") == transition.order
            and approver_email is not None
            and entry.get("approver_email") == approver_email
            for entry in approval_history
        )
        if already:
            return ValidationResult.invalid(
                f"You have already provided feedback for this application at the "
                f"{approval_stage} stage"
            )
    elif _acted_at(approval_history, transition.order):
        return ValidationResult.invalid(
            f"Invalid approval order: {approval_stage} approval has already been completed"
        )

    return ValidationResult.ok()
