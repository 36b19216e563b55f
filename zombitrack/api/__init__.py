from zombitrack.api.health import router as health_router
from zombitrack.api.migration import router as migration_router

__all__ = [
    "health_router",
    "migration_router",
]
