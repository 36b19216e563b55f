from zombitrack.parsers.inventory_string import (
    format_inventory_string,
    parse_inventory_identifiers,
    parse_inventory_string,
)

__all__ = [
    "format_inventory_string",
    "parse_inventory_identifiers",
    "parse_inventory_string",
]
