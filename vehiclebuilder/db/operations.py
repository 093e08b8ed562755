"""
Database CRUD operations.

Provides async functions for the shared card catalog and for saved
vehicles. Every catalog write stores the whole catalog in sort order.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vehiclebuilder.models.card import Card
from vehiclebuilder.models.db import CatalogCardDB, SavedVehicleDB
from vehiclebuilder.models.deck import Deck
from vehiclebuilder.models.failure import CatalogCardNotFoundError, VehicleNotFoundError
from vehiclebuilder.models.saved_vehicle import SavedVehicleInfo, vehicle_storage_key
from vehiclebuilder.services.catalog import Catalog

logger = logging.getLogger(__name__)

# --- Catalog Operations ---


def catalog_card_to_model(db_card: CatalogCardDB) -> Card:
    """Convert a database catalog row to a domain card."""
    return Card.model_validate({**db_card.data, "id": db_card.id})


async def load_catalog(session: AsyncSession) -> list[Card]:
    """Load the full catalog in stored (sorted) order."""
    result = await session.execute(select(CatalogCardDB).order_by(CatalogCardDB.position))
    return [catalog_card_to_model(row) for row in result.scalars().all()]


async def get_catalog_card(session: AsyncSession, card_id: str) -> Card | None:
    """Get a single catalog card, or None if it does not exist."""
    db_card = await session.get(CatalogCardDB, card_id)
    if db_card is None:
        return None
    return catalog_card_to_model(db_card)


async def save_catalog(session: AsyncSession, cards: Iterable[Card]) -> list[Card]:
    """
    Replace the stored catalog.

    Cards without an id are issued one. The catalog is sorted before it is
    written and the sorted list is returned.
    """
    catalog = Catalog(cards)

    await session.execute(delete(CatalogCardDB))
    for position, card in enumerate(catalog):
        session.add(
            CatalogCardDB(
                id=card.id,
                position=position,
                name=card.name,
                type=card.type.value,
                data=card.model_dump(mode="json", by_alias=True),
            )
        )

    await session.flush()
    logger.info("Saved catalog with %d cards", len(catalog))
    return catalog.cards


async def add_catalog_card(session: AsyncSession, card: Card) -> list[Card]:
    """
    Add one card to the stored catalog.

    Returns the full catalog in sorted order.

    Raises:
        DuplicateCatalogCardError: If the card's id is already stored
    """
    catalog = Catalog(await load_catalog(session))
    catalog.add_card(card)
    return await save_catalog(session, catalog)


async def update_catalog_card(
    session: AsyncSession,
    card_id: str,
    changes: dict[str, Any],
) -> Card:
    """
    Patch fields of a stored card, keeping its id.

    Raises:
        CatalogCardNotFoundError: If the card does not exist
    """
    catalog = Catalog(await load_catalog(session))
    updated = catalog.update_card(card_id, changes)
    await save_catalog(session, catalog)
    return updated


async def delete_catalog_card(session: AsyncSession, card_id: str) -> list[Card]:
    """
    Delete a card from the stored catalog.

    Returns the remaining catalog.

    Raises:
        CatalogCardNotFoundError: If the card does not exist
    """
    result = await session.execute(delete(CatalogCardDB).where(CatalogCardDB.id == card_id))
    # rowcount is available on DELETE results; type stubs incomplete for async
    if int(result.rowcount) == 0:  # type: ignore[attr-defined]
        raise CatalogCardNotFoundError(card_id)

    await session.flush()
    return await load_catalog(session)


async def clear_catalog(session: AsyncSession) -> int:
    """
    Delete every catalog card.

    Returns the number of deleted cards.
    """
    result = await session.execute(delete(CatalogCardDB))
    return int(result.rowcount)  # type: ignore[attr-defined]


async def count_catalog_cards(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(CatalogCardDB))
    return int(result.scalar_one())


# --- Saved Vehicle Operations ---


def saved_vehicle_to_info(db_vehicle: SavedVehicleDB) -> SavedVehicleInfo:
    return SavedVehicleInfo(
        name=db_vehicle.name,
        division=db_vehicle.division,
        last_saved=db_vehicle.last_saved,
        storage_key=db_vehicle.storage_key,
    )


async def save_vehicle(session: AsyncSession, deck: Deck) -> SavedVehicleInfo:
    """
    Insert or overwrite a saved vehicle.

    Vehicles are keyed by name and division, so saving a vehicle with the
    same name and division replaces the earlier save.

    Raises:
        ValueError: If the deck has no name
    """
    if not deck.name.strip():
        msg = "A vehicle must have a name to be saved"
        raise ValueError(msg)

    division = deck.division or "unknown"
    storage_key = vehicle_storage_key(deck.name, division)
    payload = deck.model_dump(mode="json", by_alias=True)
    now = datetime.now(UTC)

    result = await session.execute(
        select(SavedVehicleDB).where(SavedVehicleDB.storage_key == storage_key)
    )
    existing = result.scalar_one_or_none()

    if existing:
        existing.name = deck.name
        existing.division = division
        existing.deck = payload
        existing.last_saved = now
        await session.flush()
        return saved_vehicle_to_info(existing)

    db_vehicle = SavedVehicleDB(
        storage_key=storage_key,
        name=deck.name,
        division=division,
        deck=payload,
        last_saved=now,
    )
    session.add(db_vehicle)
    await session.flush()
    logger.info("Saved vehicle %s", storage_key)
    return saved_vehicle_to_info(db_vehicle)


async def list_saved_vehicles(session: AsyncSession) -> list[SavedVehicleInfo]:
    """All saved vehicles, most recently saved first."""
    result = await session.execute(
        select(SavedVehicleDB).order_by(SavedVehicleDB.last_saved.desc(), SavedVehicleDB.id.desc())
    )
    return [saved_vehicle_to_info(row) for row in result.scalars().all()]


async def load_vehicle(session: AsyncSession, storage_key: str) -> Deck:
    """
    Load a saved vehicle's deck.

    Raises:
        VehicleNotFoundError: If nothing is saved under this key
    """
    result = await session.execute(
        select(SavedVehicleDB).where(SavedVehicleDB.storage_key == storage_key)
    )
    db_vehicle = result.scalar_one_or_none()
    if db_vehicle is None:
        raise VehicleNotFoundError(storage_key)
    return Deck.model_validate(db_vehicle.deck)


async def delete_vehicle(session: AsyncSession, storage_key: str) -> bool:
    """
    Delete a saved vehicle.

    Returns True if deleted, False if not found.
    """
    result = await session.execute(
        delete(SavedVehicleDB).where(SavedVehicleDB.storage_key == storage_key)
    )
    return int(result.rowcount) > 0  # type: ignore[attr-defined]
