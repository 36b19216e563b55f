"""
Inventory migration value types.

INVARIANTS:
- WeaponIdentifier is UNTRUSTED legacy data until resolved against the catalog
- All models are frozen (immutable after construction)
- MigrationOutcome is transient; it is never persisted
"""

from dataclasses import dataclass, field
from enum import Enum

from zombitrack.config import SLOT_ACTIVE, SLOT_BACKPACK


class SlotType(str, Enum):
    """Inventory slot a legacy string feeds."""

    ACTIVE = SLOT_ACTIVE
    BACKPACK = SLOT_BACKPACK


class MigrationStatus(str, Enum):
    """What a single-session migration call did."""

    MIGRATED = "migrated"
    ALREADY_MIGRATED = "already_migrated"
    EMPTY = "empty"

    @property
    def was_skipped(self) -> bool:
        return self is not MigrationStatus.MIGRATED


@dataclass(frozen=True, slots=True)
class WeaponIdentifier:
    """
    A weapon reference parsed from a legacy inventory string.

    Attributes:
        name: Weapon name ("Fire Axe")
        set_name: Expansion the weapon belongs to ("Core", "Fort Hendrix")
    """

    name: str
    set_name: str

    def __str__(self) -> str:
        return f"{self.name}|{self.set_name}"


@dataclass(frozen=True, slots=True)
class ParseWarning:
    """A legacy entry that was skipped because it is malformed."""

    entry: str
    reason: str


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Identifiers in source order plus the entries that were dropped."""

    identifiers: tuple[WeaponIdentifier, ...] = ()
    warnings: tuple[ParseWarning, ...] = ()

    def __len__(self) -> int:
        return len(self.identifiers)


@dataclass(frozen=True, slots=True)
class ResolutionMiss:
    """A parsed identifier with no matching catalog definition."""

    identifier: WeaponIdentifier
    slot_type: SlotType


@dataclass(frozen=True, slots=True)
class MigrationOutcome:
    """
    Result of validating a session's structured inventory.

    Attributes:
        is_valid: True when no rule was violated
        errors: Every violated rule, in check order
        item_count: Structured items attached to the session
        source_count: Identifiers parsed from both legacy strings
            (informational; catalog misses make item_count smaller)
    """

    is_valid: bool
    errors: tuple[str, ...]
    item_count: int
    source_count: int


@dataclass
class BatchMigrationReport:
    """Counters for one pass over every stored session."""

    migrated: int = 0
    skipped: int = 0
    failed: int = 0
    failed_session_ids: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.migrated + self.skipped + self.failed
