# =============================================================================
# Migration Unit Contract
# =============================================================================
# Abstract base class for all migration units and the revert result type.
# =============================================================================

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional

__all__ = ["MigrationUnit", "RevertResult"]


@dataclass(frozen=True)
class RevertResult:
    """
    Outcome of a revert() call.

    A revert that cannot restore everything apply() changed (for example
    history entries that apply() deleted) reports the items it could not
    restore instead of approximating them.

    Attributes:
        complete: True when the store is back in its pre-apply state
        unrestored: Identifiers of data the revert could not restore
        message: Human-readable explanation of what was lost
    """

    complete: bool = True
    unrestored: tuple[str, ...] = ()
    message: str = ""

    @classmethod
    def full(cls) -> "RevertResult":
        return cls()

    @classmethod
    def partial(cls, unrestored, message: str) -> "RevertResult":
        return cls(complete=False, unrestored=tuple(unrestored), message=message)


class MigrationUnit(ABC):
    """
    Base class for all migration units.

    A migration unit is a named, self-contained change to persisted state.
    Its position in the migration list defines when it is applied; later
    units may assume every earlier unit has been applied.

    Contract:
        apply() MUST be safe to run against a store that is already fully or
        partially in the target state. The runner writes the execution record
        after apply() returns, so a crash between the two leads to apply()
        running again on the next start. Use upserts keyed on natural keys and
        existence checks (see ``membership_migrations.idempotence``) and keep
        side effects confined to the store.

        revert() is best-effort. When it cannot fully undo apply() it returns
        ``RevertResult.partial(...)`` naming what was not restored.
    """

    name: ClassVar[str]

    @abstractmethod
    def apply(self) -> None:
        """Perform the forward change."""
        pass

    @abstractmethod
    def revert(self) -> Optional[RevertResult]:
        """
        Perform the inverse change.

        Returns:
            RevertResult describing how complete the revert was. ``None`` is
            treated as a complete revert.
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
