from collections.abc import Callable
from itertools import count
from typing import Any

import pytest

from vehiclebuilder.models.card import Card, CardArea, CardType, DeckCard
from vehiclebuilder.services.catalog import Catalog
from vehiclebuilder.services.deck_store import DeckStore

CardFactory = Callable[..., Card]
DeckCardFactory = Callable[..., DeckCard]


@pytest.fixture
def make_card() -> CardFactory:
    """Build catalog cards with sensible defaults and unique ids."""
    ids = count(1)

    def _make(name: str, card_type: CardType = CardType.WEAPON, **fields: Any) -> Card:
        fields.setdefault("id", f"card-{next(ids)}")
        return Card(name=name, type=card_type, **fields)

    return _make


@pytest.fixture
def make_deck_card(make_card: CardFactory) -> DeckCardFactory:
    """Build placed deck instances directly, bypassing the store."""
    ids = count(1)

    def _make(
        name: str,
        card_type: CardType = CardType.WEAPON,
        area: CardArea = CardArea.FRONT,
        **fields: Any,
    ) -> DeckCard:
        card = make_card(name, card_type, **fields)
        return DeckCard.from_card(card, f"inst-{next(ids)}", area)

    return _make


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    """Deterministic id factory for stores."""
    ids = count(1)
    return lambda: f"id-{next(ids)}"


@pytest.fixture
def catalog() -> Catalog:
    """A small catalog covering every card type."""
    return Catalog(
        [
            Card(id="machine-gun", name="Machine Gun", type=CardType.WEAPON, build_point_cost=2),
            Card(
                id="rocket-pod",
                name="Rocket Pod",
                type=CardType.WEAPON,
                build_point_cost=6,
            ),
            Card(
                id="turret-gun",
                name="Turret Gun",
                type=CardType.WEAPON,
                build_point_cost=3,
                sides="T",
            ),
            Card(
                id="ram-plate",
                name="Ram Plate",
                type=CardType.STRUCTURE,
                build_point_cost=1,
                sides="FB",
            ),
            Card(id="roll-cage", name="Roll Cage", type=CardType.STRUCTURE, build_point_cost=1),
            Card(
                id="turbo",
                name="Turbo",
                type=CardType.UPGRADE,
                subtype="Engine",
                build_point_cost=2,
            ),
            Card(id="oil-slick", name="Oil Slick", type=CardType.ACCESSORY, build_point_cost=1),
            Card(
                id="ace-driver",
                name="Ace",
                type=CardType.CREW,
                subtype="Driver",
                crew_point_cost=1,
                number_allowed=1,
            ),
            Card(
                id="gunner",
                name="Gunner Gus",
                type=CardType.CREW,
                subtype="Gunner",
                crew_point_cost=1,
            ),
            Card(id="gloves", name="Driving Gloves", type=CardType.GEAR, crew_point_cost=1),
            Card(id="pistol", name="Pistol", type=CardType.SIDEARM, crew_point_cost=1),
            Card(
                id="mines",
                name="Mines",
                type=CardType.ACCESSORY,
                build_point_cost=3,
                copies=3,
            ),
        ]
    )


@pytest.fixture
def store(catalog: Catalog, sequential_ids: Callable[[], str]) -> DeckStore:
    """Division 4 store (16 BP / 4 CP) with no starter card."""
    return DeckStore(
        catalog,
        default_division=4,
        starter_card_name="",
        id_factory=sequential_ids,
    )
