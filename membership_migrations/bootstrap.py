"""Startup hook: apply pending migrations when the application boots."""

import logging
from typing import Optional

from pymongo.database import Database

from .migrations import build_default_migrations
from .models import MigrationSettings
from .records import ExecutionRecordStore
from .runner import MigrationRunner
from .store import MongoDocumentStore

__all__ = ["build_runner", "run_startup_migrations"]

logger = logging.getLogger(__name__)


def build_runner(db: Database) -> MigrationRunner:
    """Create a runner whose execution records live in ``db``."""
    records = ExecutionRecordStore(MongoDocumentStore(db))
    records.ensure_collection()
    return MigrationRunner(records)


def run_startup_migrations(
    db: Database, settings: Optional[MigrationSettings] = None
) -> Optional[list[str]]:
    """
    Apply pending migrations unless RUN_MIGRATIONS_ON_STARTUP is false.

    A failing migration propagates as MigrationExecutionError so the hosting
    process can abort startup.

    Returns:
        Names applied by this call, or None when startup migrations are disabled
    """
    settings = settings or MigrationSettings()
    if not settings.run_on_startup:
        logger.info("Automatic migrations disabled (RUN_MIGRATIONS_ON_STARTUP=false)")
        return None

    logger.info("Running database migrations on startup...")
    return build_runner(db).run_migrations(build_default_migrations(db))
