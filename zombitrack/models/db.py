"""
SQLAlchemy ORM models for persistent storage.

The game session keeps its legacy inventory strings alongside the structured
inventory rows produced by the migration. Weapon definitions form the
read-only catalog that card instances point at.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from zombitrack.config import SLOT_ACTIVE


def new_id() -> str:
    """Generate a primary key for a new row."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class GameSessionDB(Base):
    """
    A played game session for one character.

    `active_weapons` and `inactive_weapons` are the legacy inventory strings
    ("Pistol|Core; Fire Axe|Core"). They are never rewritten by the migration.
    """

    __tablename__ = "game_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    character_name: Mapped[str] = mapped_column(String(255), default="")
    active_weapons: Mapped[str] = mapped_column(Text, default="")
    inactive_weapons: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Owned inventory rows; items only carry the session id, not a back-reference
    inventory_items: Mapped[list["WeaponInventoryItemDB"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="[WeaponInventoryItemDB.slot_type, WeaponInventoryItemDB.slot_index]",
    )

    def __repr__(self) -> str:
        return f"<GameSessionDB(id={self.id}, character={self.character_name})>"


class WeaponDefinitionDB(Base):
    """
    Canonical catalog entry for a weapon card.

    The id is deterministic ("Starting:Pistol:Core") so relationships stay
    stable across catalog re-imports.
    """

    __tablename__ = "weapon_definitions"
    __table_args__ = (UniqueConstraint("name", "set", "deck_type", name="uq_weapon_name_set_deck"),)

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    set_name: Mapped[str] = mapped_column("set", String(255), index=True)
    deck_type: Mapped[str] = mapped_column(String(50))
    category: Mapped[str] = mapped_column(String(50), default="Melee")
    default_count: Mapped[int] = mapped_column(Integer, default=1)

    dice: Mapped[int | None] = mapped_column(Integer, nullable=True)
    accuracy: Mapped[int | None] = mapped_column(Integer, nullable=True)
    damage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    range_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    range_max: Mapped[int | None] = mapped_column(Integer, nullable=True)

    can_open_door: Mapped[bool] = mapped_column(Boolean, default=False)
    door_noise: Mapped[bool] = mapped_column(Boolean, default=False)
    kill_noise: Mapped[bool] = mapped_column(Boolean, default=False)
    is_dual: Mapped[bool] = mapped_column(Boolean, default=False)
    has_overload: Mapped[bool] = mapped_column(Boolean, default=False)
    special: Mapped[str | None] = mapped_column(Text, nullable=True)

    metadata_version: Mapped[str] = mapped_column(String(50), default="")
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @staticmethod
    def make_id(deck_type: str, name: str, set_name: str) -> str:
        return f"{deck_type}:{name}:{set_name}"

    def __repr__(self) -> str:
        return f"<WeaponDefinitionDB(id={self.id})>"


class WeaponCardInstanceDB(Base):
    """
    One physical copy of a weapon card.

    Serial format: "Starting:Pistol:Core:1" (deck type, name, set, copy index).
    """

    __tablename__ = "weapon_card_instances"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    copy_index: Mapped[int] = mapped_column(Integer, default=1)
    serial: Mapped[str] = mapped_column(String(512), index=True)
    definition_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("weapon_definitions.id", ondelete="CASCADE"), nullable=True
    )

    definition: Mapped[WeaponDefinitionDB | None] = relationship(lazy="selectin")

    @classmethod
    def from_definition(
        cls, definition: WeaponDefinitionDB, copy_index: int
    ) -> "WeaponCardInstanceDB":
        """Materialize a new copy of a catalog definition."""
        key = WeaponDefinitionDB.make_id(definition.deck_type, definition.name, definition.set_name)
        return cls(
            id=new_id(),
            copy_index=copy_index,
            serial=f"{key}:{copy_index}",
            definition=definition,
        )

    def __repr__(self) -> str:
        return f"<WeaponCardInstanceDB(serial={self.serial})>"


class WeaponInventoryItemDB(Base):
    """
    A card instance held in one inventory slot of a game session.

    Slot indices are zero-based and contiguous per slot type.
    """

    __tablename__ = "weapon_inventory_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    session_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("game_sessions.id", ondelete="CASCADE"), index=True
    )
    card_instance_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("weapon_card_instances.id"), nullable=True
    )
    slot_type: Mapped[str] = mapped_column(String(20))
    slot_index: Mapped[int] = mapped_column(Integer)
    is_equipped: Mapped[bool] = mapped_column(Boolean, default=False)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    card_instance: Mapped[WeaponCardInstanceDB | None] = relationship(lazy="selectin")

    @classmethod
    def for_slot(
        cls,
        slot_type: str,
        slot_index: int,
        card_instance: WeaponCardInstanceDB | None,
        session_id: str | None = None,
        item_id: str | None = None,
    ) -> "WeaponInventoryItemDB":
        """Build an inventory row; active slots are equipped."""
        return cls(
            id=item_id or new_id(),
            session_id=session_id,
            slot_type=slot_type,
            slot_index=slot_index,
            is_equipped=slot_type == SLOT_ACTIVE,
            added_at=datetime.now(UTC),
            card_instance=card_instance,
        )

    def __repr__(self) -> str:
        return (
            f"<WeaponInventoryItemDB(id={self.id}, slot={self.slot_type}[{self.slot_index}])>"
        )
