"""
User-facing messages for placement outcomes.

Each reason code maps to exactly one message template. Messages are built
from the structured context carried by the denial, never re-derived from
the deck.
"""

from vehiclebuilder.models.card import Card
from vehiclebuilder.models.validation import (
    CardNotFound,
    CrewLimitReached,
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

SIDE_NAMES = {
    "F": "Front",
    "B": "Back",
    "L": "Left",
    "R": "Right",
    "T": "Turret",
}


def format_side_names(sides: str) -> str:
    """Expand side letters, e.g. "FLR" -> "Front or Left or Right"."""
    return " or ".join(SIDE_NAMES.get(code.upper(), code) for code in sides)


def describe_denial(result: ValidationResult, card: Card) -> str | None:
    """
    Render the message for a denied placement of `card`.

    Returns:
        The message, or None if the result is not a denial
    """
    if isinstance(result, MissingPrerequisite):
        required = result.conflicting_card.name
        return f"Cannot add {card.name}. It requires {required} to be in your vehicle first."
    if isinstance(result, NotEnoughPoints):
        return "Not enough points to add this card to your deck!"
    if isinstance(result, ExclusiveLimitReached):
        return (
            "You already have an exclusive card in your vehicle. "
            "Only one exclusive card is allowed."
        )
    if isinstance(result, WeaponCostLimit):
        return (
            f"Weapons that cost 6+ BP can only be on vehicles that cost 24 or more BP "
            f"(Division 6+). This weapon costs {result.weapon_cost} BP; "
            f"your vehicle has {result.point_limit} BP."
        )
    if isinstance(result, DuplicateGear):
        return "You can only equip one copy of each gear card."
    if isinstance(result, DuplicateSidearm):
        return f'You cannot equip multiple copies of the same sidearm: "{card.name}"'
    if isinstance(result, DuplicateAccessory):
        return f'You cannot equip multiple copies of the same accessory: "{card.name}"'
    if isinstance(result, DuplicateUpgrade):
        return f'You cannot equip multiple copies of the same upgrade: "{card.name}"'
    if isinstance(result, SameSubtype):
        return (
            f"Cannot equip multiple {card.type.value.lower()}s with same subtype: "
            f'"{card.subtype}" (already have "{result.conflicting_card.name}")'
        )
    if isinstance(result, CrewLimitReached):
        role = result.crew_type
        return f"You already have a {role} in your crew. Only one {role} is allowed."
    if isinstance(result, StructureLimitReached):
        if result.area is None:
            return "You cannot add more than 4 structure cards to your car."
        return f"You cannot add another structure card to the {result.area.value} of your car."
    if isinstance(result, InvalidSide):
        if not result.invalid_side:
            return "This card cannot be placed on this side of the vehicle."
        sides = format_side_names(result.invalid_side)
        return f"This card can only be placed on specific sides: {sides}"
    if isinstance(result, InvalidArea):
        return f"{card.type.value} cards cannot be placed in the {result.area.value} area."
    if isinstance(result, HasDependentCards):
        return f"Cannot remove {card.name}. {result.conflicting_card.name} requires it."
    if isinstance(result, CardNotFound):
        return f"Card {result.card_id} is no longer available."
    if isinstance(result, NoFreeCopies):
        if not result.copies_granted:
            return f"{card.name} has not been purchased yet. Add it to your vehicle first."
        return (
            f"All {result.copies_granted} extra copies of {card.name} from your purchase "
            "are already in your vehicle."
        )
    return None


def describe_number_allowed(warning: NumberAllowedWarning, card: Card) -> str:
    """Confirmation prompt for exceeding a card's owned-copies limit."""
    return (
        f"You already have {warning.current_count} of {card.name} in your vehicle "
        f"(number allowed: {warning.max_allowed}). Add another anyway?"
    )
