"""
ZombiTrack services.

Business logic for migrating legacy session inventories.
"""

from zombitrack.services.catalog_resolver import CatalogResolver, FreshInstanceResolver
from zombitrack.services.inventory_migration import InventoryMigrationService

__all__ = [
    "CatalogResolver",
    "FreshInstanceResolver",
    "InventoryMigrationService",
]
