"""
Job to migrate legacy session inventories to structured rows.

Migrates every stored game session, or a single one with --session-id.
Can be run as a standalone script or called from a scheduler.
"""

import argparse
import asyncio
import logging

from zombitrack.db.database import async_session_factory, init_db
from zombitrack.db.operations import get_game_session
from zombitrack.models.failure import BatchMigrationFailed, ValidationFailed
from zombitrack.models.inventory import BatchMigrationReport
from zombitrack.services.inventory_migration import InventoryMigrationService

logger = logging.getLogger(__name__)


async def run_migration() -> BatchMigrationReport:
    """
    Migrate every stored game session.

    Returns:
        Counters for the pass. Failed sessions are counted, not raised.
    """
    async with async_session_factory() as session:
        service = InventoryMigrationService(session)
        try:
            report = await service.migrate_all_sessions()
        except BatchMigrationFailed as e:
            logger.error("%s", e.message)
            report = e.report or BatchMigrationReport(
                failed=e.failed_count, failed_session_ids=e.failed_session_ids
            )

    logger.info(
        "Migration complete: %d migrated, %d skipped, %d failed",
        report.migrated,
        report.skipped,
        report.failed,
    )
    return report


async def run_single(session_id: str, validate_only: bool = False) -> bool:
    """
    Migrate or validate one game session.

    Returns:
        True on success (or a valid session), False otherwise
    """
    async with async_session_factory() as session:
        game_session = await get_game_session(session, session_id)
        if game_session is None:
            logger.error("Game session %s not found", session_id)
            return False

        service = InventoryMigrationService(session)

        if validate_only:
            outcome = service.validate_migration(game_session)
            for error in outcome.errors:
                logger.error("  - %s", error)
            logger.info(
                "Session %s: %s (%d items, %d legacy entries)",
                session_id,
                "valid" if outcome.is_valid else "invalid",
                outcome.item_count,
                outcome.source_count,
            )
            return outcome.is_valid

        try:
            status = await service.migrate_session_with_validation(game_session)
        except ValidationFailed as e:
            for error in e.errors:
                logger.error("  - %s", error)
            return False

    logger.info("Session %s: %s", session_id, status.value)
    return True


async def run(args: argparse.Namespace) -> int:
    await init_db()

    if args.session_id:
        ok = await run_single(args.session_id, validate_only=args.validate_only)
        return 0 if ok else 1

    report = await run_migration()
    return 1 if report.failed else 0


def main() -> None:
    """CLI entry point for running the inventory migration."""
    parser = argparse.ArgumentParser(description="Migrate legacy session inventories")
    parser.add_argument("--session-id", help="Migrate only this game session")
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="With --session-id, validate without migrating",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
