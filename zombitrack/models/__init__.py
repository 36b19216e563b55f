from zombitrack.models.db import (
    Base,
    GameSessionDB,
    WeaponCardInstanceDB,
    WeaponDefinitionDB,
    WeaponInventoryItemDB,
)
from zombitrack.models.failure import (
    BatchMigrationFailed,
    FailureDetail,
    FailureKind,
    KnownError,
    MigrationError,
    ValidationFailed,
)
from zombitrack.models.inventory import (
    BatchMigrationReport,
    MigrationOutcome,
    MigrationStatus,
    ParseResult,
    ParseWarning,
    ResolutionMiss,
    SlotType,
    WeaponIdentifier,
)

__all__ = [
    "Base",
    "BatchMigrationFailed",
    "BatchMigrationReport",
    "FailureDetail",
    "FailureKind",
    "GameSessionDB",
    "KnownError",
    "MigrationError",
    "MigrationOutcome",
    "MigrationStatus",
    "ParseResult",
    "ParseWarning",
    "ResolutionMiss",
    "SlotType",
    "ValidationFailed",
    "WeaponCardInstanceDB",
    "WeaponDefinitionDB",
    "WeaponIdentifier",
    "WeaponInventoryItemDB",
]
