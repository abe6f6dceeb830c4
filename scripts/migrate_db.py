# =============================================================================
# MongoDB Migration CLI
# =============================================================================
# Operator entry point for the membership ledger migrations:
#   python scripts/migrate_db.py            Run pending migrations
#   python scripts/migrate_db.py rollback   Roll back the last migration
#   python scripts/migrate_db.py status     Show migration status
# =============================================================================

import argparse
import logging
import sys
import traceback
from typing import Optional, Sequence

from pymongo import MongoClient

from membership_migrations.bootstrap import build_runner
from membership_migrations.migrations import build_default_migrations
from membership_migrations.models import ExecutionStatus, MigrationStatusReport, MongoSettings
from membership_migrations.runner import RollbackStatus

STATUS_ICONS = {
    ExecutionStatus.COMPLETED.value: "✓",
    ExecutionStatus.FAILED.value: "✗",
    ExecutionStatus.ROLLED_BACK.value: "↺",
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Membership ledger migrations")
    parser.add_argument(
        "command",
        nargs="?",
        default="up",
        choices=["up", "rollback", "down", "status"],
        help="up: run pending migrations (default); rollback/down: revert the last one; "
        "status: show execution records",
    )
    parser.add_argument("--db", default=None, help="Database name (overrides MONGO_DATABASE)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def print_status(status: MigrationStatusReport) -> None:
    print(f"Total migrations: {status.total}")
    print(f"Completed: {status.completed}")
    print(f"Failed: {status.failed}")
    print(f"Rolled back: {status.rolled_back}")

    if status.migrations:
        print("\nMigration history:")
        for record in status.migrations:
            icon = STATUS_ICONS.get(record.status, "?")
            line = f"  {icon} {record.name} ({record.status}) - {record.executed_at:%Y-%m-%d %H:%M:%S}"
            if record.error:
                line += f" - {record.error}"
            print(line)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main migration CLI entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = MongoSettings()
        client = MongoClient(
            settings.connection_string,
            serverSelectionTimeoutMS=10000,
        )

        try:
            db = client[args.db or settings.database]
            runner = build_runner(db)
            migrations = build_default_migrations(db)

            if args.command == "up":
                print("Running pending migrations...")
                applied = runner.run_migrations(migrations)
                print(f"Migrations completed successfully ({len(applied)} applied)")

            elif args.command in ("rollback", "down"):
                print("Rolling back last migration...")
                result = runner.rollback_last_migration(migrations)
                if result.status == RollbackStatus.NO_MIGRATIONS_TO_ROLL_BACK:
                    print("No migrations to roll back")
                elif result.status == RollbackStatus.PARTIALLY_ROLLED_BACK:
                    print(f"Rolled back {result.migration_name} with data loss: {result.revert.message}")
                else:
                    print(f"Rolled back {result.migration_name}")

            else:
                print_status(runner.get_status())

            return 0

        finally:
            client.close()

    except Exception as e:
        print(f"Migration failed: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
