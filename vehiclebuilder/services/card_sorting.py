"""
Display and storage ordering for card lists.

The same catalog must always render (and persist) in the same order
regardless of insertion history, so this ordering is applied before every
catalog write and whenever an area's card list is built.
"""

from collections.abc import Iterable
from functools import cmp_to_key
from typing import TypeVar

from vehiclebuilder.models.card import Card, CardType

CardT = TypeVar("CardT", bound=Card)

TYPE_ORDER: dict[CardType, int] = {
    CardType.CREW: 1,
    CardType.SIDEARM: 3,
    CardType.GEAR: 4,
    CardType.ACCESSORY: 5,
    CardType.UPGRADE: 6,
    CardType.STRUCTURE: 7,
    CardType.WEAPON: 8,
}
UNKNOWN_TYPE_ORDER = 99


def _compare_text(a: str, b: str) -> int:
    """Case-insensitive comparison, falling back to exact text for ties."""
    left, right = a.casefold(), b.casefold()
    if left != right:
        return -1 if left < right else 1
    if a != b:
        return -1 if a < b else 1
    return 0


def _is_driver(card: Card) -> bool:
    return card.subtype.lower() == "driver"


def compare_cards(a: Card, b: Card) -> int:
    """
    Three-way comparison of two cards.

    1. Type precedence (Crew, Sidearm, Gear, Accessory, Upgrade, Structure,
       Weapon; anything else last)
    2. Between two Crew cards, Drivers come first
    3. Upgrades: subtype, then cost. Everything else: cost, then subtype
    4. Name
    """
    type_a = TYPE_ORDER.get(a.type, UNKNOWN_TYPE_ORDER)
    type_b = TYPE_ORDER.get(b.type, UNKNOWN_TYPE_ORDER)
    if type_a != type_b:
        return type_a - type_b

    if a.type == CardType.CREW and b.type == CardType.CREW:
        if _is_driver(a) and not _is_driver(b):
            return -1
        if _is_driver(b) and not _is_driver(a):
            return 1

    cost_diff = a.sort_cost - b.sort_cost
    subtype_diff = _compare_text(a.subtype, b.subtype) if a.subtype != b.subtype else 0

    if a.type == CardType.UPGRADE:
        if subtype_diff:
            return subtype_diff
        if cost_diff:
            return cost_diff
    else:
        if cost_diff:
            return cost_diff
        if subtype_diff:
            return subtype_diff

    return _compare_text(a.name, b.name)


def sort_cards(cards: Iterable[CardT]) -> list[CardT]:
    """Return a new list in display order. The sort is stable."""
    return sorted(cards, key=cmp_to_key(compare_cards))


# Sidearm that always leads the sidearms in the Crew area
FEATURED_SIDEARM = "Hand Cannon"


def _crew_area_rank(card: Card) -> int:
    if card.type == CardType.CREW:
        subtype = card.subtype.strip().lower()
        if subtype == "driver":
            return 0
        if subtype == "gunner":
            return 1
        return 3
    if card.type == CardType.SIDEARM:
        return 2 if card.name == FEATURED_SIDEARM else 4
    return 5


def compare_crew_area(a: Card, b: Card) -> int:
    """
    Three-way comparison for cards shown in the Crew area.

    Driver, then Gunner, then the Hand Cannon, then other crew, then the
    remaining sidearms by name. Other ties keep their arranged order.
    """
    rank_diff = _crew_area_rank(a) - _crew_area_rank(b)
    if rank_diff:
        return rank_diff
    if a.type == CardType.SIDEARM and b.type == CardType.SIDEARM:
        return _compare_text(a.name, b.name)
    return 0


def sort_crew_area(cards: Iterable[CardT]) -> list[CardT]:
    return sorted(cards, key=cmp_to_key(compare_crew_area))
