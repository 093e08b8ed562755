"""
Import a catalog export into the database.

Reads a JSON array of cards (the same camelCase shape the catalog is
stored in) and writes it to the catalog table, either replacing the
stored catalog or adding to it.

    python -m vehiclebuilder.jobs.import_catalog cards.json [--replace]
"""

import argparse
import asyncio
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vehiclebuilder.db.database import init_db, session_scope
from vehiclebuilder.db.operations import load_catalog, save_catalog
from vehiclebuilder.models.card import Card
from vehiclebuilder.models.failure import CatalogImportError

logger = logging.getLogger(__name__)

_CARD_LIST = TypeAdapter(list[Card])


def read_catalog_file(path: Path) -> list[Card]:
    """
    Parse a catalog export.

    Raises:
        CatalogImportError: If the file is missing or is not a list of cards
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise CatalogImportError(str(path), detail=str(e)) from e

    try:
        return _CARD_LIST.validate_json(raw)
    except ValidationError as e:
        raise CatalogImportError(str(path), detail=str(e)) from e


async def import_catalog(
    path: Path,
    replace: bool = False,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> int:
    """
    Import cards from `path`.

    Args:
        path: JSON export to read
        replace: Replace the stored catalog instead of adding to it
        session_factory: Session source (the configured database by default)

    Returns:
        Number of cards in the stored catalog afterwards
    """
    cards = read_catalog_file(path)
    logger.info("Read %d cards from %s", len(cards), path)

    async with session_scope(session_factory) as session:
        if not replace:
            existing = await load_catalog(session)
            existing_ids = {card.id for card in existing}
            new_cards = []
            for card in cards:
                if card.id and card.id in existing_ids:
                    logger.warning("Skipping %s: id %s already in catalog", card.name, card.id)
                    continue
                existing_ids.add(card.id)
                new_cards.append(card)
            cards = [*existing, *new_cards]
        stored = await save_catalog(session, cards)

    logger.info("Catalog now holds %d cards", len(stored))
    return len(stored)


async def run_import(path: Path, replace: bool = False) -> int:
    await init_db()
    return await import_catalog(path, replace=replace)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Import a card catalog export.")
    parser.add_argument("path", type=Path, help="JSON file holding a list of cards")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Replace the stored catalog instead of adding to it",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_import(args.path, replace=args.replace))


if __name__ == "__main__":
    main()
