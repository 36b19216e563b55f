"""
Inventory migration admin endpoints.

Run, inspect and undo the legacy inventory migration for game sessions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from zombitrack.db import get_active_items, get_backpack_items, get_game_session
from zombitrack.db.database import get_session
from zombitrack.models.db import GameSessionDB, WeaponInventoryItemDB
from zombitrack.models.failure import BatchMigrationFailed, FailureDetail, ValidationFailed
from zombitrack.models.inventory import BatchMigrationReport, MigrationStatus
from zombitrack.services.inventory_migration import InventoryMigrationService

router = APIRouter(prefix="/migration", tags=["migration"])


class InventoryItemResponse(BaseModel):
    """One structured inventory slot."""

    id: str
    slot_type: str
    slot_index: int
    is_equipped: bool
    serial: str | None = None
    weapon: str | None = None
    set_name: str | None = None


class SessionInventoryResponse(BaseModel):
    """Legacy strings and structured inventory of a game session."""

    session_id: str
    character_name: str
    active_weapons: str
    inactive_weapons: str
    active: list[InventoryItemResponse] = Field(default_factory=list)
    backpack: list[InventoryItemResponse] = Field(default_factory=list)


class MigrateSessionResponse(BaseModel):
    """Response model for a single-session migration."""

    session_id: str
    status: MigrationStatus
    item_count: int


class ValidationResponse(BaseModel):
    """Response model for a read-only validation run."""

    session_id: str
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    item_count: int
    source_count: int = Field(
        ...,
        description="Entries parsed from the legacy strings (catalog misses lower item_count)",
    )


class RollbackResponse(BaseModel):
    """Response model for a rollback."""

    session_id: str
    items_removed: int


class BatchResponse(BaseModel):
    """Response model for a batch migration run."""

    migrated: int
    skipped: int
    failed: int
    failed_session_ids: list[str] = Field(default_factory=list)
    failure: FailureDetail | None = None


def _item_response(item: WeaponInventoryItemDB) -> InventoryItemResponse:
    instance = item.card_instance
    definition = instance.definition if instance else None
    return InventoryItemResponse(
        id=item.id,
        slot_type=item.slot_type,
        slot_index=item.slot_index,
        is_equipped=item.is_equipped,
        serial=instance.serial if instance else None,
        weapon=definition.name if definition else None,
        set_name=definition.set_name if definition else None,
    )


def _batch_response(report: BatchMigrationReport, failure: FailureDetail | None) -> BatchResponse:
    return BatchResponse(
        migrated=report.migrated,
        skipped=report.skipped,
        failed=report.failed,
        failed_session_ids=report.failed_session_ids,
        failure=failure,
    )


async def _require_session(session: AsyncSession, session_id: str) -> GameSessionDB:
    game_session = await get_game_session(session, session_id)
    if game_session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Game session '{session_id}' not found",
        )
    return game_session


@router.get("/sessions/{session_id}", response_model=SessionInventoryResponse)
async def get_session_inventory(
    session_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SessionInventoryResponse:
    """Show a session's legacy strings next to its structured inventory."""
    game_session = await _require_session(session, session_id)

    return SessionInventoryResponse(
        session_id=game_session.id,
        character_name=game_session.character_name,
        active_weapons=game_session.active_weapons,
        inactive_weapons=game_session.inactive_weapons,
        active=[_item_response(item) for item in get_active_items(game_session)],
        backpack=[_item_response(item) for item in get_backpack_items(game_session)],
    )


@router.post("/sessions/{session_id}", response_model=MigrateSessionResponse)
async def migrate_session(
    session_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MigrateSessionResponse:
    """
    Migrate one session's legacy inventory.

    Already-migrated and empty sessions are reported as skipped.
    A validation failure is rolled back and answered with 422 and the
    full list of violated rules.
    """
    game_session = await _require_session(session, session_id)
    service = InventoryMigrationService(session)

    try:
        migration_status = await service.migrate_session_with_validation(game_session)
    except ValidationFailed as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.to_detail().model_dump(mode="json"),
        ) from e

    return MigrateSessionResponse(
        session_id=game_session.id,
        status=migration_status,
        item_count=len(game_session.inventory_items),
    )


@router.get("/sessions/{session_id}/validation", response_model=ValidationResponse)
async def validate_session(
    session_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ValidationResponse:
    """Validate a session's structured inventory without changing it."""
    game_session = await _require_session(session, session_id)
    outcome = InventoryMigrationService(session).validate_migration(game_session)

    return ValidationResponse(
        session_id=game_session.id,
        is_valid=outcome.is_valid,
        errors=list(outcome.errors),
        item_count=outcome.item_count,
        source_count=outcome.source_count,
    )


@router.post("/sessions/{session_id}/rollback", response_model=RollbackResponse)
async def rollback_session(
    session_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RollbackResponse:
    """
    Remove a session's structured inventory.

    The legacy strings are kept, so the session can be migrated again.
    """
    game_session = await _require_session(session, session_id)
    items_removed = len(game_session.inventory_items)

    await InventoryMigrationService(session).rollback_migration(game_session)

    return RollbackResponse(session_id=game_session.id, items_removed=items_removed)


@router.post(
    "/run",
    response_model=BatchResponse,
    responses={409: {"model": BatchResponse}},
)
async def run_batch_migration(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BatchResponse | JSONResponse:
    """
    Migrate every stored session.

    Failures do not stop the run. If any session failed, the counters are
    returned with status 409 once every session has been attempted.
    """
    service = InventoryMigrationService(session)

    try:
        report = await service.migrate_all_sessions()
    except BatchMigrationFailed as e:
        failed_report = e.report or BatchMigrationReport(
            failed=e.failed_count, failed_session_ids=e.failed_session_ids
        )
        body = _batch_response(failed_report, e.to_detail())
        return JSONResponse(status_code=e.status_code, content=body.model_dump(mode="json"))

    return _batch_response(report, None)
