"""Tests for inventory migration API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from zombitrack.db.database import get_session
from zombitrack.db.operations import create_game_session
from zombitrack.main import app
from zombitrack.models.db import WeaponCardInstanceDB, new_id
from zombitrack.models.inventory import WeaponIdentifier
from zombitrack.services.inventory_migration import InventoryMigrationService


class DefinitionlessResolver:
    """Resolves every identifier to an instance with no catalog definition."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def resolve(self, identifier: WeaponIdentifier) -> WeaponCardInstanceDB | None:
        instance = WeaponCardInstanceDB(id=new_id(), copy_index=1, serial=f"orphan:{identifier}")
        self._session.add(instance)
        return instance


@pytest.fixture
async def client(session_factory: async_sessionmaker[AsyncSession]):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def session_id(session: AsyncSession, catalog: None) -> str:
    """A stored, unmigrated session with two active and one backpack weapon."""
    game_session = await create_game_session(
        session, "Wanda", "Pistol|Core; Crowbar|Core", "Fire Axe|Core"
    )
    await session.commit()
    return game_session.id


def _definitionless_service(session: AsyncSession) -> InventoryMigrationService:
    return InventoryMigrationService(session, resolver=DefinitionlessResolver(session))


class TestGetSessionInventory:
    async def test_unmigrated_session(self, client: AsyncClient, session_id: str) -> None:
        response = await client.get(f"/migration/sessions/{session_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["character_name"] == "Wanda"
        assert data["active_weapons"] == "Pistol|Core; Crowbar|Core"
        assert data["active"] == []
        assert data["backpack"] == []

    async def test_unknown_session(self, client: AsyncClient) -> None:
        response = await client.get("/migration/sessions/nonexistent")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]


class TestMigrateSession:
    async def test_migrate(self, client: AsyncClient, session_id: str) -> None:
        response = await client.post(f"/migration/sessions/{session_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "migrated"
        assert data["item_count"] == 3

        inventory = (await client.get(f"/migration/sessions/{session_id}")).json()
        assert [item["weapon"] for item in inventory["active"]] == ["Pistol", "Crowbar"]
        assert [item["slot_index"] for item in inventory["active"]] == [0, 1]
        assert all(item["is_equipped"] for item in inventory["active"])
        assert inventory["backpack"][0]["serial"] == "Starting:Fire Axe:Core:1"
        assert inventory["backpack"][0]["is_equipped"] is False

    async def test_second_call_skipped(self, client: AsyncClient, session_id: str) -> None:
        await client.post(f"/migration/sessions/{session_id}")

        response = await client.post(f"/migration/sessions/{session_id}")

        assert response.status_code == 200
        assert response.json()["status"] == "already_migrated"
        assert response.json()["item_count"] == 3

    async def test_empty_session(self, client: AsyncClient, session: AsyncSession) -> None:
        game_session = await create_game_session(session, "Ned")
        await session.commit()

        response = await client.post(f"/migration/sessions/{game_session.id}")

        assert response.json()["status"] == "empty"
        assert response.json()["item_count"] == 0

    async def test_unknown_session(self, client: AsyncClient) -> None:
        response = await client.post("/migration/sessions/nonexistent")

        assert response.status_code == 404

    async def test_validation_failure(
        self, client: AsyncClient, session_id: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A failed validation answers 422 and leaves no items behind."""
        monkeypatch.setattr(
            "zombitrack.api.migration.InventoryMigrationService", _definitionless_service
        )

        response = await client.post(f"/migration/sessions/{session_id}")

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["kind"] == "validation_failed"
        assert len(detail["errors"]) == 3
        assert all("missing definition" in error for error in detail["errors"])

        monkeypatch.undo()
        inventory = (await client.get(f"/migration/sessions/{session_id}")).json()
        assert inventory["active"] == []
        assert inventory["backpack"] == []


class TestValidateSession:
    async def test_unmigrated_session_is_valid(self, client: AsyncClient, session_id: str) -> None:
        """No items is never more than the legacy strings allow."""
        response = await client.get(f"/migration/sessions/{session_id}/validation")

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["item_count"] == 0
        assert data["source_count"] == 3

    async def test_migrated_session_is_valid(self, client: AsyncClient, session_id: str) -> None:
        await client.post(f"/migration/sessions/{session_id}")

        data = (await client.get(f"/migration/sessions/{session_id}/validation")).json()

        assert data["is_valid"] is True
        assert data["errors"] == []
        assert data["item_count"] == 3


class TestRollbackSession:
    async def test_rollback_removes_items(self, client: AsyncClient, session_id: str) -> None:
        await client.post(f"/migration/sessions/{session_id}")

        response = await client.post(f"/migration/sessions/{session_id}/rollback")

        assert response.status_code == 200
        assert response.json()["items_removed"] == 3

        inventory = (await client.get(f"/migration/sessions/{session_id}")).json()
        assert inventory["active"] == []
        assert inventory["active_weapons"] == "Pistol|Core; Crowbar|Core"

    async def test_rollback_then_migrate_again(self, client: AsyncClient, session_id: str) -> None:
        await client.post(f"/migration/sessions/{session_id}")
        await client.post(f"/migration/sessions/{session_id}/rollback")

        response = await client.post(f"/migration/sessions/{session_id}")

        assert response.json()["status"] == "migrated"
        assert response.json()["item_count"] == 3

    async def test_rollback_unmigrated_is_noop(self, client: AsyncClient, session_id: str) -> None:
        response = await client.post(f"/migration/sessions/{session_id}/rollback")

        assert response.status_code == 200
        assert response.json()["items_removed"] == 0


class TestRunBatchMigration:
    async def test_run_all(
        self, client: AsyncClient, session: AsyncSession, session_id: str
    ) -> None:
        await create_game_session(session, "Ned", "Katana|Core")
        await create_game_session(session, "Amy")
        await session.commit()

        response = await client.post("/migration/run")

        assert response.status_code == 200
        data = response.json()
        assert data["migrated"] == 2
        assert data["skipped"] == 1
        assert data["failed"] == 0
        assert data["failure"] is None

    async def test_run_with_failures_returns_409(
        self, client: AsyncClient, session_id: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "zombitrack.api.migration.InventoryMigrationService", _definitionless_service
        )

        response = await client.post("/migration/run")

        assert response.status_code == 409
        data = response.json()
        assert data["failed"] == 1
        assert data["failed_session_ids"] == [session_id]
        assert data["failure"]["kind"] == "partial_failure"
