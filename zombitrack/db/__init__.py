from zombitrack.db.database import get_session, init_db
from zombitrack.db.operations import (
    create_game_session,
    fetch_all_sessions,
    fetch_catalog_definition,
    get_active_items,
    get_backpack_items,
    get_game_session,
    has_inventory,
    list_session_ids,
    upsert_weapon_definition,
)

__all__ = [
    "create_game_session",
    "fetch_all_sessions",
    "fetch_catalog_definition",
    "get_active_items",
    "get_backpack_items",
    "get_game_session",
    "get_session",
    "has_inventory",
    "init_db",
    "list_session_ids",
    "upsert_weapon_definition",
]
