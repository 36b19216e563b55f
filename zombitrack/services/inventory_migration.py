"""
Legacy inventory migration service.

Converts the inventory strings stored on a game session into structured
WeaponInventoryItemDB rows, validates the result and rolls back on failure.

INVARIANTS:
1. A session that already holds structured items is never migrated again
2. Slot indices per slot type are contiguous from 0
3. Every item has a card instance, and every instance a definition
4. Resolution can only drop legacy entries, never add them
5. Legacy strings are never modified; they stay the source of truth
6. A failed session is left exactly as it was before the call
"""

import logging
from collections import Counter

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zombitrack.db.operations import get_game_session, has_inventory, list_session_ids
from zombitrack.models.db import GameSessionDB, WeaponCardInstanceDB, WeaponInventoryItemDB
from zombitrack.models.failure import BatchMigrationFailed, MigrationError, ValidationFailed
from zombitrack.models.inventory import (
    BatchMigrationReport,
    MigrationOutcome,
    MigrationStatus,
    ParseResult,
    ResolutionMiss,
    SlotType,
)
from zombitrack.parsers.inventory_string import parse_inventory_string
from zombitrack.services.catalog_resolver import CatalogResolver, FreshInstanceResolver

_module_logger = logging.getLogger(__name__)


class InventoryMigrationService:
    """
    Migrates, validates and rolls back structured inventory per game session.

    All work goes through one AsyncSession; use the service from a single
    task at a time.
    """

    def __init__(
        self,
        session: AsyncSession,
        resolver: CatalogResolver | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._resolver = resolver or FreshInstanceResolver(session)
        self._logger = logger or _module_logger
        # Instances materialized per game session and not yet committed
        self._uncommitted_instances: dict[str, list[WeaponCardInstanceDB]] = {}

    # --- Migration ---

    async def migrate_session_with_validation(self, game_session: GameSessionDB) -> MigrationStatus:
        """
        Migrate one session, validate it, then commit or roll back.

        Returns:
            MIGRATED on success, ALREADY_MIGRATED or EMPTY when skipped

        Raises:
            ValidationFailed: If validation fails (session rolled back first)
            SQLAlchemyError: If the commit fails
        """
        active, backpack = self._parse_legacy(game_session)
        skip = self._skip_status(game_session, active, backpack)
        if skip is not None:
            self._logger.info(
                "Skipping session %s (%s): %s",
                game_session.id,
                game_session.character_name,
                skip.value,
            )
            return skip

        self._logger.info("Migrating session %s (%s)", game_session.id, game_session.character_name)

        await self._build_items(game_session, active, backpack)

        outcome = self.validate_migration(game_session)
        if not outcome.is_valid:
            self._logger.error(
                "inventory_migration_validation_failed",
                extra={"session_id": game_session.id, "errors": list(outcome.errors)},
            )
            await self.rollback_migration(game_session)
            raise ValidationFailed(list(outcome.errors), session_id=game_session.id)

        try:
            await self._session.commit()
        finally:
            self._uncommitted_instances.pop(game_session.id, None)

        self._logger.info(
            "Session %s migrated: %d items from %d legacy entries",
            game_session.id,
            outcome.item_count,
            outcome.source_count,
        )
        return MigrationStatus.MIGRATED

    async def migrate_session(self, game_session: GameSessionDB) -> list[ResolutionMiss]:
        """
        Build structured items from both legacy strings, without validating.

        Every parsed identifier is processed; catalog misses are logged and
        dropped, and slot indices count only resolved items.

        Returns:
            The identifiers that had no catalog definition
        """
        active, backpack = self._parse_legacy(game_session)
        if self._skip_status(game_session, active, backpack) is not None:
            return []

        return await self._build_items(game_session, active, backpack)

    async def _build_items(
        self, game_session: GameSessionDB, active: ParseResult, backpack: ParseResult
    ) -> list[ResolutionMiss]:
        misses: list[ResolutionMiss] = []
        created = self._uncommitted_instances.setdefault(game_session.id, [])

        for slot_type, parsed in ((SlotType.ACTIVE, active), (SlotType.BACKPACK, backpack)):
            slot_index = 0
            for identifier in parsed.identifiers:
                instance = await self._resolver.resolve(identifier)
                if instance is None:
                    self._logger.warning(
                        "inventory_weapon_not_found",
                        extra={
                            "session_id": game_session.id,
                            "weapon": str(identifier),
                            "slot_type": slot_type.value,
                        },
                    )
                    misses.append(ResolutionMiss(identifier=identifier, slot_type=slot_type))
                    continue

                created.append(instance)
                item = WeaponInventoryItemDB.for_slot(
                    slot_type=slot_type.value,
                    slot_index=slot_index,
                    card_instance=instance,
                    session_id=game_session.id,
                )
                self._session.add(item)
                game_session.inventory_items.append(item)
                slot_index += 1

        return misses

    # --- Validation ---

    def validate_migration(self, game_session: GameSessionDB) -> MigrationOutcome:
        """
        Check a session's structured items against its legacy strings.

        Re-parses the legacy strings rather than trusting migration state.
        Collects every violated rule. Does not modify anything.
        """
        errors: list[str] = []

        active_source = len(parse_inventory_string(game_session.active_weapons))
        backpack_source = len(parse_inventory_string(game_session.inactive_weapons))

        items = list(game_session.inventory_items)
        active_items = [item for item in items if item.slot_type == SlotType.ACTIVE.value]
        backpack_items = [item for item in items if item.slot_type == SlotType.BACKPACK.value]

        # 1. Counts: resolution may drop entries, never add them
        if len(active_items) > active_source:
            errors.append(f"Too many active items: {len(active_items)} > {active_source}")
        if len(backpack_items) > backpack_source:
            errors.append(f"Too many backpack items: {len(backpack_items)} > {backpack_source}")

        # 2. Slot indices are 0..n-1
        active_indices = sorted(item.slot_index for item in active_items)
        if active_indices != list(range(len(active_items))):
            errors.append(f"Active slot indices not sequential: {active_indices}")

        backpack_indices = sorted(item.slot_index for item in backpack_items)
        if backpack_indices != list(range(len(backpack_items))):
            errors.append(f"Backpack slot indices not sequential: {backpack_indices}")

        # 3. Relationships
        for item in items:
            instance = item.card_instance
            if instance is None:
                errors.append(f"Item {item.id} missing card instance")
                continue
            if instance.definition is None:
                errors.append(f"Card instance {instance.serial} missing definition")

        # 4. Unique item ids
        id_counts = Counter(item.id for item in items)
        if any(count > 1 for count in id_counts.values()):
            errors.append("Duplicate inventory item IDs found")

        return MigrationOutcome(
            is_valid=not errors,
            errors=tuple(errors),
            item_count=len(items),
            source_count=active_source + backpack_source,
        )

    # --- Rollback ---

    async def rollback_migration(self, game_session: GameSessionDB) -> None:
        """
        Remove every structured item from the session.

        Card instances created by an uncommitted migration of this session
        are discarded too. Legacy strings are left untouched. No-op when the
        session holds no items.
        """
        items = list(game_session.inventory_items)
        instances = self._uncommitted_instances.pop(game_session.id, [])
        if not items and not instances:
            return

        for item in items:
            await self._discard(item)
        game_session.inventory_items.clear()

        for instance in instances:
            await self._discard(instance)

        await self._session.flush()

        self._logger.warning(
            "inventory_migration_rolled_back",
            extra={"session_id": game_session.id, "items_removed": len(items)},
        )

    async def _discard(self, obj: WeaponInventoryItemDB | WeaponCardInstanceDB) -> None:
        state = inspect(obj)
        if state.pending:
            self._session.expunge(obj)
        elif state.persistent:
            await self._session.delete(obj)

    # --- Batch Migration ---

    async def migrate_all_sessions(self) -> BatchMigrationReport:
        """
        Migrate every stored session, continuing past failures.

        Returns:
            Counters for migrated, skipped and failed sessions

        Raises:
            BatchMigrationFailed: After the full pass, if any session failed
            SQLAlchemyError: If the session list cannot be read
        """
        report = BatchMigrationReport()

        for session_id in await list_session_ids(self._session):
            game_session = await get_game_session(self._session, session_id)
            if game_session is None:
                continue

            try:
                status = await self.migrate_session_with_validation(game_session)
            except MigrationError as e:
                self._logger.error("Failed to migrate session %s: %s", session_id, e.message)
                report.failed += 1
                report.failed_session_ids.append(session_id)
                continue
            except SQLAlchemyError as e:
                self._logger.error("Database error migrating session %s: %s", session_id, e)
                await self._session.rollback()
                self._uncommitted_instances.pop(session_id, None)
                report.failed += 1
                report.failed_session_ids.append(session_id)
                continue
            except Exception:
                self._logger.exception("Unexpected error migrating session %s", session_id)
                await self._session.rollback()
                self._uncommitted_instances.pop(session_id, None)
                report.failed += 1
                report.failed_session_ids.append(session_id)
                continue

            if status.was_skipped:
                report.skipped += 1
            else:
                report.migrated += 1

        self._logger.info(
            "inventory_migration_batch_complete",
            extra={
                "migrated": report.migrated,
                "skipped": report.skipped,
                "failed": report.failed,
            },
        )

        if report.failed > 0:
            raise BatchMigrationFailed(report.failed, report.failed_session_ids, report=report)

        return report

    # --- Helpers ---

    @staticmethod
    def _parse_legacy(game_session: GameSessionDB) -> tuple[ParseResult, ParseResult]:
        return (
            parse_inventory_string(game_session.active_weapons),
            parse_inventory_string(game_session.inactive_weapons),
        )

    @staticmethod
    def _skip_status(
        game_session: GameSessionDB, active: ParseResult, backpack: ParseResult
    ) -> MigrationStatus | None:
        if has_inventory(game_session):
            return MigrationStatus.ALREADY_MIGRATED
        if not active.identifiers and not backpack.identifiers:
            return MigrationStatus.EMPTY
        return None
