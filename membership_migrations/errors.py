"""Exceptions raised by the migration engine."""

__all__ = [
    "MigrationError",
    "MigrationExecutionError",
    "UnknownMigrationError",
    "WorkflowChainError",
]


class MigrationError(Exception):
    """Base class for migration engine errors."""


class MigrationExecutionError(MigrationError):
    """
    A migration unit's apply() raised.

    The failure has already been recorded as ``failed`` in the execution
    record store when this is raised. The original exception is available
    as ``__cause__``.
    """

    def __init__(self, migration_name: str, error: BaseException):
        self.migration_name = migration_name
        self.error = error
        super().__init__(f"Migration {migration_name} failed: {error}")


class UnknownMigrationError(MigrationError):
    """Rollback target is not present in the supplied migration list."""

    def __init__(self, migration_name: str):
        self.migration_name = migration_name
        super().__init__(f"Migration {migration_name} not found in migration list")


class WorkflowChainError(MigrationError, ValueError):
    """A workflow stage chain is not a single contiguous linear path."""

    def __init__(self, workflow_type: str, problems: list[str]):
        self.workflow_type = workflow_type
        self.problems = list(problems)
        joined = "; ".join(self.problems)
        super().__init__(f"Invalid stage chain for {workflow_type}: {joined}")
