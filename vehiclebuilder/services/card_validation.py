"""
Card placement validation.

Pure rule checks deciding whether a card may be added to, moved within,
or removed from a vehicle deck. Nothing here mutates state; every function
returns a `ValidationResult` (or a warning) and the caller decides what to do.

Rule order in `validate_card_for_deck` is part of the contract: checks
short-circuit and the first failing rule is reported.
"""

from collections.abc import Sequence

from vehiclebuilder.config import (
    HIGH_COST_WEAPON_MIN_BUILD_POINTS,
    HIGH_COST_WEAPON_THRESHOLD,
    MAX_STRUCTURE_CARDS,
)
from vehiclebuilder.models.card import (
    STRUCTURE_AREAS,
    VEHICLE_LOCATION_CODES,
    Card,
    CardArea,
    CardType,
    DeckCard,
)
from vehiclebuilder.models.deck import PointTotals
from vehiclebuilder.models.validation import (
    ALLOWED,
    CardNotFound,
    CrewLimitReached,
    CrewRole,
    DuplicateAccessory,
    DuplicateGear,
    DuplicateSidearm,
    DuplicateUpgrade,
    ExclusiveLimitReached,
    HasDependentCards,
    InvalidArea,
    InvalidSide,
    MissingPrerequisite,
    NoFreeCopies,
    NotEnoughPoints,
    NumberAllowedWarning,
    SameSubtype,
    StructureLimitReached,
    ValidationResult,
    WeaponCostLimit,
)

# Crew subtypes limited to one per vehicle
LIMITED_CREW_ROLES: dict[str, CrewRole] = {"driver": "Driver", "gunner": "Gunner"}

AREA_CARD_TYPES: dict[CardArea, frozenset[CardType]] = {
    CardArea.CREW: frozenset({CardType.CREW, CardType.SIDEARM}),
    CardArea.GEAR_UPGRADE: frozenset({CardType.GEAR, CardType.UPGRADE}),
    CardArea.FRONT: frozenset({CardType.WEAPON, CardType.ACCESSORY, CardType.STRUCTURE}),
    CardArea.BACK: frozenset({CardType.WEAPON, CardType.ACCESSORY, CardType.STRUCTURE}),
    CardArea.LEFT: frozenset({CardType.WEAPON, CardType.ACCESSORY, CardType.STRUCTURE}),
    CardArea.RIGHT: frozenset({CardType.WEAPON, CardType.ACCESSORY, CardType.STRUCTURE}),
    # Turret also requires 'T' in the card's sides
    CardArea.TURRET: frozenset({CardType.WEAPON}),
}


def can_card_type_go_in_area(card_type: CardType, area: CardArea) -> bool:
    """Whether cards of this type belong in the given area at all."""
    return card_type in AREA_CARD_TYPES.get(area, frozenset())


def check_number_allowed_warning(
    card: Card,
    deck_cards: Sequence[Card],
) -> NumberAllowedWarning | None:
    """
    Check whether adding `card` would exceed its owned-copies limit.

    Crew cards count by name AND subtype, since one crew member name can
    appear as both a Driver and a Gunner card. Everything else counts by name.

    Returns:
        A warning if the deck already holds `number_allowed` or more matching
        cards, otherwise None. Never blocks the add.
    """
    if card.number_allowed <= 0:
        return None

    if card.type == CardType.CREW:
        current_count = sum(
            1
            for c in deck_cards
            if c.same_name(card) and c.subtype.lower() == card.subtype.lower()
        )
    else:
        current_count = sum(1 for c in deck_cards if c.same_name(card))

    if current_count >= card.number_allowed:
        return NumberAllowedWarning(current_count=current_count, max_allowed=card.number_allowed)
    return None


def _check_points(
    card: Card,
    point_limits: PointTotals,
    points_used: PointTotals,
) -> ValidationResult:
    # The full cost is charged once per purchase regardless of `copies`,
    # so affordability is checked against the full cost.
    available = point_limits - points_used
    if card.build_point_cost > 0 and available.build_points < card.build_point_cost:
        return NotEnoughPoints(available=available)
    if card.crew_point_cost > 0 and available.crew_points < card.crew_point_cost:
        return NotEnoughPoints(available=available)
    return ALLOWED


def _check_prerequisite(card: Card, deck_cards: Sequence[Card]) -> ValidationResult:
    if not card.has_prerequisite:
        return ALLOWED
    prerequisite = (card.prerequisite or "").strip()
    if any(c.name.lower() == prerequisite.lower() for c in deck_cards):
        return ALLOWED
    renamed = card.model_copy(update={"name": prerequisite})
    return MissingPrerequisite(conflicting_card=renamed)


def _check_exclusive(card: Card, deck_cards: Sequence[Card]) -> ValidationResult:
    if card.exclusive:
        for existing in deck_cards:
            if existing.exclusive:
                return ExclusiveLimitReached(conflicting_card=existing)
    return ALLOWED


def _check_weapon_cost(card: Card, point_limits: PointTotals) -> ValidationResult:
    if (
        card.type == CardType.WEAPON
        and card.build_point_cost >= HIGH_COST_WEAPON_THRESHOLD
        and point_limits.build_points < HIGH_COST_WEAPON_MIN_BUILD_POINTS
    ):
        return WeaponCostLimit(
            weapon_cost=card.build_point_cost,
            point_limit=point_limits.build_points,
        )
    return ALLOWED


def _check_structure_total(deck_cards: Sequence[Card]) -> ValidationResult:
    structures = sum(1 for c in deck_cards if c.type == CardType.STRUCTURE)
    if structures >= MAX_STRUCTURE_CARDS:
        return StructureLimitReached()
    return ALLOWED


def _check_gear_or_sidearm(card: Card, deck_cards: Sequence[Card]) -> ValidationResult:
    same_type = [c for c in deck_cards if c.type == card.type]
    duplicate = DuplicateGear if card.type == CardType.GEAR else DuplicateSidearm

    for existing in same_type:
        if existing.name == card.name:
            return duplicate(conflicting_card=existing)

    # Only compare art when both cards have real (non-placeholder) images
    if not card.has_placeholder_image:
        for existing in same_type:
            if not existing.has_placeholder_image and existing.image_url == card.image_url:
                return duplicate(conflicting_card=existing)

    if card.has_subtype:
        for existing in same_type:
            if existing.same_subtype(card):
                return SameSubtype(conflicting_card=existing)

    return ALLOWED


def _check_upgrade(card: Card, deck_cards: Sequence[Card]) -> ValidationResult:
    upgrades = [c for c in deck_cards if c.type == CardType.UPGRADE]

    for existing in upgrades:
        if existing.name == card.name:
            return DuplicateUpgrade(conflicting_card=existing)

    if card.has_subtype:
        for existing in upgrades:
            if existing.same_subtype(card):
                return SameSubtype(conflicting_card=existing)

    return ALLOWED


def _check_crew(card: Card, deck_cards: Sequence[Card]) -> ValidationResult:
    role = LIMITED_CREW_ROLES.get(card.subtype.strip().lower())
    if role is None:
        return ALLOWED

    for existing in deck_cards:
        if existing.type == CardType.CREW and existing.subtype.strip().lower() == role.lower():
            return CrewLimitReached(crew_type=role)
    return ALLOWED


def validate_card_for_deck(
    card: Card,
    deck_cards: Sequence[Card],
    point_limits: PointTotals,
    points_used: PointTotals,
) -> ValidationResult:
    """
    Validate a candidate card against the current deck contents.

    Checks run in this order and the first failure wins:
    prerequisite, points, exclusivity, high-cost weapon, Gear/Sidearm
    duplicates and subtypes, Accessory duplicates, Upgrade duplicates and
    subtypes, Driver/Gunner limit, Structure total.

    Per-area Structure occupancy and side restrictions depend on the target
    area and are checked separately (see `validate_card_side_placement`).

    Args:
        card: Candidate card
        deck_cards: Cards currently in the deck
        point_limits: Deck budgets
        points_used: Budgets already spent

    Returns:
        ALLOWED or the first Denial encountered
    """
    result = _check_prerequisite(card, deck_cards)
    if not result.allowed:
        return result

    result = _check_points(card, point_limits, points_used)
    if not result.allowed:
        return result

    result = _check_exclusive(card, deck_cards)
    if not result.allowed:
        return result

    result = _check_weapon_cost(card, point_limits)
    if not result.allowed:
        return result

    if not deck_cards:
        return ALLOWED

    if card.type in (CardType.GEAR, CardType.SIDEARM):
        return _check_gear_or_sidearm(card, deck_cards)

    if card.type == CardType.ACCESSORY:
        for existing in deck_cards:
            if existing.type == CardType.ACCESSORY and existing.name == card.name:
                return DuplicateAccessory(conflicting_card=existing)
        return ALLOWED

    if card.type == CardType.UPGRADE:
        return _check_upgrade(card, deck_cards)

    if card.type == CardType.CREW:
        return _check_crew(card, deck_cards)

    if card.type == CardType.STRUCTURE:
        return _check_structure_total(deck_cards)

    return ALLOWED


def validate_card_side_placement(card: Card, target_area: CardArea) -> ValidationResult:
    """
    Validate a card's `sides` restriction against a target area.

    Turret placement requires an explicit 'T'. For any other vehicle side,
    a non-empty `sides` must include that side's letter. Empty `sides` means
    unrestricted. Crew and GearUpgrade areas are never side-restricted.
    """
    sides = card.sides.strip()

    if target_area == CardArea.TURRET and "T" not in sides.upper():
        return InvalidSide(invalid_side=sides.upper())

    code = VEHICLE_LOCATION_CODES.get(target_area)
    if sides and code and not card.allows_side(code):
        return InvalidSide(invalid_side=sides.upper())

    return ALLOWED


def structure_occupying_area(
    deck_cards: Sequence[DeckCard],
    area: CardArea,
    exclude_id: str | None = None,
) -> DeckCard | None:
    """Structure card already placed in `area`, ignoring `exclude_id`."""
    if area not in STRUCTURE_AREAS:
        return None
    for existing in deck_cards:
        if existing.type != CardType.STRUCTURE or existing.id == exclude_id:
            continue
        if existing.area == area:
            return existing
    return None


def copies_granted(card: Card, deck_cards: Sequence[DeckCard]) -> int:
    """Uncharged instances the charged purchases of `card` in the deck allow."""
    charged = sum(1 for c in deck_cards if c.origin_id == card.id and c.cost_paid)
    return charged * (card.copies - 1)


def free_copies_remaining(card: Card, deck_cards: Sequence[DeckCard]) -> int:
    placed = sum(1 for c in deck_cards if c.origin_id == card.id and not c.cost_paid)
    return copies_granted(card, deck_cards) - placed


def validate_free_copy(
    card: Card,
    target_area: CardArea,
    deck_cards: Sequence[DeckCard],
    point_limits: PointTotals,
) -> ValidationResult:
    """
    Validate placing an uncharged copy of a card that was already bought.

    The copy must be covered by a charged purchase of the same catalog card
    still in the deck. Points are not spent and the duplicate rules do not
    apply between copies of one card. Prerequisite, exclusivity, high-cost
    weapon, Driver/Gunner and both Structure limits still do, as does the
    side restriction.
    """
    if free_copies_remaining(card, deck_cards) <= 0:
        return NoFreeCopies(copies_granted=copies_granted(card, deck_cards))

    result = _check_prerequisite(card, deck_cards)
    if not result.allowed:
        return result

    result = _check_exclusive(card, deck_cards)
    if not result.allowed:
        return result

    result = _check_weapon_cost(card, point_limits)
    if not result.allowed:
        return result

    if card.type == CardType.CREW:
        result = _check_crew(card, deck_cards)
        if not result.allowed:
            return result

    if card.type == CardType.STRUCTURE:
        result = _check_structure_total(deck_cards)
        if not result.allowed:
            return result
        if structure_occupying_area(deck_cards, target_area) is not None:
            return StructureLimitReached(area=target_area)

    return validate_card_side_placement(card, target_area)


def validate_card_movement(
    card: DeckCard,
    target_area: CardArea,
    deck_cards: Sequence[DeckCard],
) -> ValidationResult:
    """
    Validate moving a placed card to another area of the same deck.

    Points and duplicate rules do not apply to a move; only the placement
    rules for the destination do.
    """
    if target_area == CardArea.TURRET and "T" not in card.sides.upper():
        return InvalidSide(invalid_side=card.sides.strip().upper())

    if card.type == CardType.STRUCTURE:
        if structure_occupying_area(deck_cards, target_area, exclude_id=card.id) is not None:
            return StructureLimitReached(area=target_area)

    result = validate_card_side_placement(card, target_area)
    if not result.allowed:
        return result

    if not can_card_type_go_in_area(card.type, target_area):
        return InvalidArea(area=target_area)

    return ALLOWED


def can_remove_from_deck(deck_card_id: str, deck_cards: Sequence[DeckCard]) -> ValidationResult:
    """
    Check whether a placed card can be removed.

    A card that another placed card names as its prerequisite must stay.
    """
    target = next((c for c in deck_cards if c.id == deck_card_id), None)
    if target is None:
        return CardNotFound(card_id=deck_card_id)

    for existing in deck_cards:
        required = (existing.prerequisite or "").strip().lower()
        if required and required == target.name.lower():
            return HasDependentCards(conflicting_card=existing)

    return ALLOWED
