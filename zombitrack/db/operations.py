"""
Database CRUD operations.

Provides async functions for reading and writing game sessions, the weapon
catalog, and structured inventory rows.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zombitrack.config import SLOT_ACTIVE, SLOT_BACKPACK
from zombitrack.models.db import (
    GameSessionDB,
    WeaponDefinitionDB,
    WeaponInventoryItemDB,
    new_id,
)

# --- Game Session Operations ---


async def create_game_session(
    session: AsyncSession,
    character_name: str,
    active_weapons: str = "",
    inactive_weapons: str = "",
) -> GameSessionDB:
    """Create a game session carrying legacy inventory strings."""
    game_session = GameSessionDB(
        id=new_id(),
        character_name=character_name,
        active_weapons=active_weapons,
        inactive_weapons=inactive_weapons,
        inventory_items=[],
    )
    session.add(game_session)
    await session.flush()
    return game_session


async def get_game_session(session: AsyncSession, session_id: str) -> GameSessionDB | None:
    """
    Get a game session by id, with its inventory loaded.

    Returns None if no session exists with this id.
    """
    result = await session.execute(
        select(GameSessionDB)
        .where(GameSessionDB.id == session_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def fetch_all_sessions(session: AsyncSession) -> list[GameSessionDB]:
    """Get every stored game session, oldest first."""
    result = await session.execute(
        select(GameSessionDB).order_by(GameSessionDB.created_at, GameSessionDB.id)
    )
    return list(result.scalars().all())


async def list_session_ids(session: AsyncSession) -> list[str]:
    """Get the ids of every stored game session, oldest first."""
    result = await session.execute(
        select(GameSessionDB.id).order_by(GameSessionDB.created_at, GameSessionDB.id)
    )
    return list(result.scalars().all())


# --- Weapon Catalog Operations ---


async def fetch_catalog_definition(
    session: AsyncSession, name: str, set_name: str
) -> WeaponDefinitionDB | None:
    """
    Get the catalog definition for a weapon name and set.

    Returns None if the catalog has no such weapon. When the same weapon
    exists in several deck types, the first by deck type wins.
    """
    result = await session.execute(
        select(WeaponDefinitionDB)
        .where(
            WeaponDefinitionDB.name == name,
            WeaponDefinitionDB.set_name == set_name,
        )
        .order_by(WeaponDefinitionDB.deck_type)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def upsert_weapon_definition(
    session: AsyncSession,
    name: str,
    set_name: str,
    deck_type: str,
    category: str = "Melee",
    default_count: int = 1,
    **stats: Any,
) -> WeaponDefinitionDB:
    """
    Insert or update a catalog definition.

    If a definition with the same deck type, name and set exists, updates it.
    Otherwise creates a new record. Extra keyword arguments set stat columns.
    """
    definition_id = WeaponDefinitionDB.make_id(deck_type, name, set_name)
    existing = await session.get(WeaponDefinitionDB, definition_id)

    if existing:
        existing.category = category
        existing.default_count = default_count
        for key, value in stats.items():
            setattr(existing, key, value)
        await session.flush()
        return existing

    definition = WeaponDefinitionDB(
        id=definition_id,
        name=name,
        set_name=set_name,
        deck_type=deck_type,
        category=category,
        default_count=default_count,
        **stats,
    )
    session.add(definition)
    await session.flush()
    return definition


# --- Inventory Queries ---


def get_active_items(game_session: GameSessionDB) -> list[WeaponInventoryItemDB]:
    """Active (equipped) items ordered by slot."""
    return sorted(
        (item for item in game_session.inventory_items if item.slot_type == SLOT_ACTIVE),
        key=lambda item: item.slot_index,
    )


def get_backpack_items(game_session: GameSessionDB) -> list[WeaponInventoryItemDB]:
    """Backpack items ordered by slot."""
    return sorted(
        (item for item in game_session.inventory_items if item.slot_type == SLOT_BACKPACK),
        key=lambda item: item.slot_index,
    )


def has_inventory(game_session: GameSessionDB) -> bool:
    """True once the session holds structured inventory rows."""
    return bool(game_session.inventory_items)
