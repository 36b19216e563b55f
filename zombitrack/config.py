from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "ZombiTrack"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./zombitrack.db"

    # Run the legacy inventory batch migration during application startup.
    # Default: False (migration is triggered by the admin job or endpoint)
    migrate_inventory_on_startup: bool = False


settings = Settings()


# =============================================================================
# INVENTORY SLOTS
# =============================================================================

SLOT_ACTIVE = "active"
SLOT_BACKPACK = "backpack"

# Copy index given to freshly materialized card instances (no pooling)
DEFAULT_COPY_INDEX = 1
