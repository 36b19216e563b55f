import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI

from zombitrack.api import health_router, migration_router
from zombitrack.config import settings
from zombitrack.db.database import async_session_factory, init_db
from zombitrack.models.failure import BatchMigrationFailed
from zombitrack.services.inventory_migration import InventoryMigrationService

logger = logging.getLogger(__name__)


async def migrate_inventory_on_startup() -> None:
    """Run the batch inventory migration; failed sessions do not block startup."""
    async with async_session_factory() as session:
        try:
            await InventoryMigrationService(session).migrate_all_sessions()
        except BatchMigrationFailed as e:
            logger.warning("Startup inventory migration incomplete: %s", e.message)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    if settings.migrate_inventory_on_startup:
        await migrate_inventory_on_startup()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("zombitrack"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(migration_router)
