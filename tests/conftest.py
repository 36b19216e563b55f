import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from zombitrack.db.operations import upsert_weapon_definition
from zombitrack.models.db import Base

# (name, set, deck type) rows seeded into the weapon catalog
CATALOG_WEAPONS = [
    ("Pistol", "Core", "Starting"),
    ("Crowbar", "Core", "Starting"),
    ("Fire Axe", "Core", "Starting"),
    ("Chainsaw", "Core", "Regular"),
    ("Katana", "Core", "Regular"),
    ("Pan", "Core", "Regular"),
    ("Machete", "Core", "Regular"),
    ("Baseball Bat", "Core", "Regular"),
    ("Knife", "Core", "Regular"),
    ("Chainsaw", "Fort Hendrix", "Regular"),
]


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def catalog(session: AsyncSession) -> None:
    """Seed the weapon catalog and commit it."""
    for name, set_name, deck_type in CATALOG_WEAPONS:
        await upsert_weapon_definition(session, name, set_name, deck_type)
    await session.commit()


@pytest.fixture
def sample_active_weapons() -> str:
    """Legacy active-slot string as stored by older app versions."""
    return "Pistol|Core; Crowbar|Core"


@pytest.fixture
def sample_inactive_weapons() -> str:
    """Legacy backpack string as stored by older app versions."""
    return "Fire Axe|Core; Chainsaw|Fort Hendrix; Katana|Core"
