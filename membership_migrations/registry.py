# =============================================================================
# Migration Registry
# =============================================================================
# Builds the immutable, ordered sequence of migration units.
# =============================================================================

import logging
import re
from typing import Optional

from .base import MigrationUnit

__all__ = ["MigrationRegistry"]

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^(\d{3})-[a-z0-9][a-z0-9-]*$")


class MigrationRegistry:
    """
    Collects migration units in application order.

    Names follow the ``NNN-description`` convention; the numeric prefix should
    grow along the list. Registration order, not the prefix, is what the
    runner uses, so the registry only warns about prefix problems but refuses
    duplicate names outright (the name is the idempotence key).

    Example:
        >>> units = (
        ...     MigrationRegistry()
        ...     .register(DatabaseIndexesMigration(db))
        ...     .register(AddApprovalOrderMigration(store))
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._units: list[MigrationUnit] = []
        self._names: set[str] = set()
        self._last_prefix: Optional[int] = None

    def register(self, unit: MigrationUnit) -> "MigrationRegistry":
        """
        Append a unit to the end of the list.

        Raises:
            ValueError: If the unit has no name or the name is already registered
        """
        name = getattr(unit, "name", None)
        if not isinstance(name, str) or not name:
            raise ValueError(f"Migration {type(unit).__name__} must define a non-empty name")

        if name in self._names:
            raise ValueError(f"Duplicate migration name '{name}'")

        match = NAME_PATTERN.match(name)
        if not match:
            logger.warning(f"Migration '{name}' does not follow the NNN-description naming convention")
        else:
            prefix = int(match.group(1))
            if self._last_prefix is not None and prefix < self._last_prefix:
                logger.warning(
                    f"Migration '{name}' is registered after a migration with a higher prefix "
                    f"({self._last_prefix:03d}); list order is what the runner uses"
                )
            self._last_prefix = prefix

        self._names.add(name)
        self._units.append(unit)
        return self

    def build(self) -> tuple[MigrationUnit, ...]:
        """Return the registered units as an immutable ordered sequence."""
        return tuple(self._units)

    def __len__(self) -> int:
        return len(self._units)
