"""
Health check endpoints.

Liveness and readiness probes. Readiness also reports how many game
sessions still carry only legacy inventory strings.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zombitrack.db.database import get_session
from zombitrack.models.db import GameSessionDB, WeaponInventoryItemDB

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    unmigrated_sessions: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Checks database connectivity and counts sessions with a non-empty legacy
    string but no structured items. Returns 503 if the database is unavailable.

    The count is an upper bound: sessions whose strings hold only malformed
    entries, or whose every entry missed the catalog, never leave it.
    """
    has_items = exists().where(WeaponInventoryItemDB.session_id == GameSessionDB.id)
    query = (
        select(func.count())
        .select_from(GameSessionDB)
        .where(
            or_(GameSessionDB.active_weapons != "", GameSessionDB.inactive_weapons != ""),
            ~has_items,
        )
    )
    try:
        unmigrated = (await session.execute(query)).scalar_one()
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(status="ready", database="connected", unmigrated_sessions=unmigrated)
