"""
In-memory card catalog.

Holds the collection of card definitions that decks are built from.
Cards are kept in display order (see `card_sorting`) after every write,
mirroring what the persisted catalog stores.
"""

import logging
import uuid
from collections.abc import Iterable, Iterator
from typing import Any

from vehiclebuilder.models.card import Card
from vehiclebuilder.models.failure import CatalogCardNotFoundError, DuplicateCatalogCardError
from vehiclebuilder.services.card_sorting import sort_cards

logger = logging.getLogger(__name__)


def new_card_id() -> str:
    return str(uuid.uuid4())


class Catalog:
    """
    A sorted, id-indexed set of catalog cards.

    Card templates are immutable; `update_card` replaces the stored
    template with a patched copy under the same id.
    """

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: list[Card] = []
        self.replace(cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return any(card.id == card_id for card in self._cards)

    @property
    def cards(self) -> list[Card]:
        """Snapshot of the catalog in display order."""
        return list(self._cards)

    def get(self, card_id: str) -> Card | None:
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    def find_by_name(self, name: str) -> Card | None:
        """First card (in display order) whose name matches case-insensitively."""
        wanted = name.strip().lower()
        for card in self._cards:
            if card.name.lower() == wanted:
                return card
        return None

    def replace(self, cards: Iterable[Card]) -> list[Card]:
        """Replace the whole catalog, issuing ids to cards that lack one."""
        self._cards = sort_cards(self._with_id(card) for card in cards)
        return self.cards

    def add_card(self, card: Card) -> list[Card]:
        """
        Add a card, issuing an id if it has none.

        Returns:
            The full catalog in display order

        Raises:
            DuplicateCatalogCardError: If a card with the same id is already present
        """
        card = self._with_id(card)
        if card.id in self:
            raise DuplicateCatalogCardError(card.id)
        self._cards = sort_cards([*self._cards, card])
        logger.debug("Added catalog card %s (%s)", card.name, card.id)
        return self.cards

    def update_card(self, card_id: str, changes: dict[str, Any]) -> Card:
        """
        Patch a card's fields. The id never changes.

        Raises:
            CatalogCardNotFoundError: If no card has this id
        """
        existing = self.get(card_id)
        if existing is None:
            raise CatalogCardNotFoundError(card_id)

        merged = {**existing.model_dump(), **changes, "id": card_id}
        updated = Card.model_validate(merged)
        self._cards = sort_cards([updated if c.id == card_id else c for c in self._cards])
        return updated

    def remove_card(self, card_id: str) -> Card:
        """
        Remove a card and return it.

        Raises:
            CatalogCardNotFoundError: If no card has this id
        """
        existing = self.get(card_id)
        if existing is None:
            raise CatalogCardNotFoundError(card_id)
        self._cards = [c for c in self._cards if c.id != card_id]
        logger.debug("Removed catalog card %s (%s)", existing.name, card_id)
        return existing

    def clear(self) -> None:
        self._cards = []

    @staticmethod
    def _with_id(card: Card) -> Card:
        if card.id:
            return card
        return card.model_copy(update={"id": new_card_id()})
