"""
SQLAlchemy ORM models for persistent storage.

Card and deck payloads are stored as JSON in their camelCase wire shape,
so a stored row round-trips through the pydantic models unchanged.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CatalogCardDB(Base):
    """
    A card definition in the shared catalog.

    `position` is the card's index in sort order, rewritten on every
    catalog write so reads can simply order by it.
    """

    __tablename__ = "catalog_cards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(32), index=True)

    # Full card payload (camelCase keys)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CatalogCardDB(id={self.id}, name={self.name})>"


class SavedVehicleDB(Base):
    """
    A saved vehicle (deck) keyed by lower-cased "name:division".

    Saving a vehicle with the same name and division overwrites it.
    """

    __tablename__ = "saved_vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    storage_key: Mapped[str] = mapped_column(String(512), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    division: Mapped[str] = mapped_column(String(32))

    # Full deck payload (camelCase keys)
    deck: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    last_saved: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<SavedVehicleDB(key={self.storage_key})>"
