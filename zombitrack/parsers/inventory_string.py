"""
Parser for the legacy inventory string format.

Legacy format:
    <name>|<set>; <name>|<set>; ...

Example:
    Pistol|Core; Chainsaw|Fort Hendrix; Fire Axe|Core

Entry order is slot order. Malformed entries are skipped with a warning;
parsing never fails.
"""

import logging

from zombitrack.models.inventory import ParseResult, ParseWarning, WeaponIdentifier

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = ";"
FIELD_SEPARATOR = "|"

# Canonical separator used when writing legacy strings
JOIN_SEPARATOR = "; "


def parse_inventory_string(text: str) -> ParseResult:
    """
    Parse a legacy inventory string into weapon identifiers.

    Args:
        text: Raw legacy string from a game session

    Returns:
        ParseResult with identifiers in source order and one ParseWarning
        per skipped entry. Empty result if input is empty/whitespace.

    Handles:
        - Surrounding whitespace on both sides of "|"
        - Blank entries (e.g. trailing ";"), skipped silently
        - Entries without exactly one "|", or with an empty name or set
    """
    if not text or not text.strip():
        return ParseResult()

    identifiers: list[WeaponIdentifier] = []
    warnings: list[ParseWarning] = []

    for raw_entry in text.split(ENTRY_SEPARATOR):
        entry = raw_entry.strip()

        if not entry:
            continue

        parts = entry.split(FIELD_SEPARATOR)
        if len(parts) != 2:
            warnings.append(ParseWarning(entry=entry, reason="expected exactly one '|'"))
            continue

        name, set_name = (part.strip() for part in parts)
        if not name or not set_name:
            warnings.append(ParseWarning(entry=entry, reason="empty name or set"))
            continue

        identifiers.append(WeaponIdentifier(name=name, set_name=set_name))

    for warning in warnings:
        logger.warning(
            "inventory_entry_malformed",
            extra={"entry": warning.entry, "reason": warning.reason},
        )

    return ParseResult(identifiers=tuple(identifiers), warnings=tuple(warnings))


def parse_inventory_identifiers(text: str) -> list[WeaponIdentifier]:
    """Convenience function: parse and drop the warnings."""
    return list(parse_inventory_string(text).identifiers)


def format_inventory_string(identifiers: list[WeaponIdentifier]) -> str:
    """
    Join identifiers back into the legacy format.

    Inverse of parse_inventory_identifiers for well-formed input.
    """
    return JOIN_SEPARATOR.join(
        f"{identifier.name}{FIELD_SEPARATOR}{identifier.set_name}" for identifier in identifiers
    )
