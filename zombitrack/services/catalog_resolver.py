"""
Catalog resolution for legacy weapon identifiers.

Maps a parsed WeaponIdentifier to a catalog definition and materializes a
card instance for the inventory slot it came from.

INVARIANTS:
1. The catalog is read, never written
2. A missing definition is a value (None), not an exception
3. New instances are registered with the session but not committed
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from zombitrack.config import DEFAULT_COPY_INDEX
from zombitrack.db.operations import fetch_catalog_definition
from zombitrack.models.db import WeaponCardInstanceDB
from zombitrack.models.inventory import WeaponIdentifier


class CatalogResolver(Protocol):
    """Turns an identifier into a card instance, or None when unknown."""

    async def resolve(self, identifier: WeaponIdentifier) -> WeaponCardInstanceDB | None: ...


class FreshInstanceResolver:
    """
    Creates a new card instance for every resolved slot.

    Repeated resolutions of the same definition are not pooled; each call
    yields its own instance with copy index 1.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def resolve(self, identifier: WeaponIdentifier) -> WeaponCardInstanceDB | None:
        definition = await fetch_catalog_definition(
            self._session, identifier.name, identifier.set_name
        )
        if definition is None:
            return None

        instance = WeaponCardInstanceDB.from_definition(definition, DEFAULT_COPY_INDEX)
        self._session.add(instance)
        return instance
