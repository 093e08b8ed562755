"""
Validation outcomes for deck placement rules.

Every rule check returns exactly one of the variants below. `Allowed` is the
only passing outcome; each `Denial` subclass carries only the context needed
to explain that particular rule, so callers can match exhaustively on the
type (or on `reason`) without probing optional fields.

Rule violations are values, not exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal

from vehiclebuilder.models.card import Card, CardArea, DeckCard
from vehiclebuilder.models.deck import PointTotals


class Reason(str, Enum):
    """Reason codes for a denied placement or removal."""

    DUPLICATE_GEAR = "duplicate_gear"
    DUPLICATE_SIDEARM = "duplicate_sidearm"
    DUPLICATE_ACCESSORY = "duplicate_accessory"
    DUPLICATE_UPGRADE = "duplicate_upgrade"
    SAME_SUBTYPE = "same_subtype"
    NOT_ENOUGH_POINTS = "not_enough_points"
    CREW_LIMIT_REACHED = "crew_limit_reached"
    STRUCTURE_LIMIT_REACHED = "structure_limit_reached"
    WEAPON_COST_LIMIT = "weapon_cost_limit"
    EXCLUSIVE_LIMIT_REACHED = "exclusive_limit_reached"
    MISSING_PREREQUISITE = "missing_prerequisite"
    HAS_DEPENDENT_CARDS = "has_dependent_cards"
    INVALID_SIDE = "invalid_side"
    INVALID_AREA = "invalid_area"
    CARD_NOT_FOUND = "card_not_found"
    NO_FREE_COPIES = "no_free_copies"


CrewRole = Literal["Driver", "Gunner"]


@dataclass(frozen=True, slots=True)
class Allowed:
    """The card may be placed (or removed)."""

    allowed: ClassVar[bool] = True
    reason: ClassVar[Reason | None] = None


ALLOWED = Allowed()


@dataclass(frozen=True, slots=True)
class Placed(Allowed):
    """An add succeeded; carries the deck instances that were created."""

    deck_cards: tuple[DeckCard, ...]

    @property
    def deck_card(self) -> DeckCard:
        """The first (charged) instance."""
        return self.deck_cards[0]


@dataclass(frozen=True, slots=True)
class Denial:
    """Base class for every denied outcome."""

    allowed: ClassVar[bool] = False
    reason: ClassVar[Reason]


@dataclass(frozen=True, slots=True)
class MissingPrerequisite(Denial):
    # The candidate card renamed to the missing prerequisite
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.MISSING_PREREQUISITE


@dataclass(frozen=True, slots=True)
class NotEnoughPoints(Denial):
    available: PointTotals
    reason: ClassVar[Reason] = Reason.NOT_ENOUGH_POINTS


@dataclass(frozen=True, slots=True)
class ExclusiveLimitReached(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.EXCLUSIVE_LIMIT_REACHED


@dataclass(frozen=True, slots=True)
class WeaponCostLimit(Denial):
    weapon_cost: int
    point_limit: int
    reason: ClassVar[Reason] = Reason.WEAPON_COST_LIMIT


@dataclass(frozen=True, slots=True)
class DuplicateGear(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.DUPLICATE_GEAR


@dataclass(frozen=True, slots=True)
class DuplicateSidearm(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.DUPLICATE_SIDEARM


@dataclass(frozen=True, slots=True)
class DuplicateAccessory(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.DUPLICATE_ACCESSORY


@dataclass(frozen=True, slots=True)
class DuplicateUpgrade(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.DUPLICATE_UPGRADE


@dataclass(frozen=True, slots=True)
class SameSubtype(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.SAME_SUBTYPE


@dataclass(frozen=True, slots=True)
class CrewLimitReached(Denial):
    crew_type: CrewRole
    reason: ClassVar[Reason] = Reason.CREW_LIMIT_REACHED


@dataclass(frozen=True, slots=True)
class StructureLimitReached(Denial):
    # None means the four-card total was hit; otherwise the occupied area
    area: CardArea | None = None
    reason: ClassVar[Reason] = Reason.STRUCTURE_LIMIT_REACHED


@dataclass(frozen=True, slots=True)
class InvalidSide(Denial):
    # The card's allowed sides, upper-cased ("" if it has none)
    invalid_side: str
    reason: ClassVar[Reason] = Reason.INVALID_SIDE


@dataclass(frozen=True, slots=True)
class InvalidArea(Denial):
    area: CardArea
    reason: ClassVar[Reason] = Reason.INVALID_AREA


@dataclass(frozen=True, slots=True)
class HasDependentCards(Denial):
    conflicting_card: Card
    reason: ClassVar[Reason] = Reason.HAS_DEPENDENT_CARDS


@dataclass(frozen=True, slots=True)
class CardNotFound(Denial):
    card_id: str
    reason: ClassVar[Reason] = Reason.CARD_NOT_FOUND


@dataclass(frozen=True, slots=True)
class NoFreeCopies(Denial):
    # Uncharged copies granted by the charged purchases already in the deck
    copies_granted: int
    reason: ClassVar[Reason] = Reason.NO_FREE_COPIES


ValidationResult = (
    Allowed
    | MissingPrerequisite
    | NotEnoughPoints
    | ExclusiveLimitReached
    | WeaponCostLimit
    | DuplicateGear
    | DuplicateSidearm
    | DuplicateAccessory
    | DuplicateUpgrade
    | SameSubtype
    | CrewLimitReached
    | StructureLimitReached
    | InvalidSide
    | InvalidArea
    | HasDependentCards
    | CardNotFound
    | NoFreeCopies
)


@dataclass(frozen=True, slots=True)
class NumberAllowedWarning:
    """
    Non-blocking notice that the player may not own another copy.

    Callers decide whether to confirm with the user; it never denies.
    """

    current_count: int
    max_allowed: int
