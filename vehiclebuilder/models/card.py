"""
Card definitions.

A catalog Card is a template: immutable once it has been issued an id.
A DeckCard is one placed instance of a template inside a vehicle deck.

Both serialize with camelCase keys so the catalog JSON export and saved
vehicles round-trip without any field mapping.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from vehiclebuilder.config import MAX_CARD_DAMAGE

PLACEHOLDER_MARKERS = ("Blank_", "placeholders/")


class CardType(str, Enum):
    """Card types. Each belongs to exactly one point category."""

    # Build point cards
    WEAPON = "Weapon"
    UPGRADE = "Upgrade"
    ACCESSORY = "Accessory"
    STRUCTURE = "Structure"

    # Crew point cards
    CREW = "Crew"
    GEAR = "Gear"
    SIDEARM = "Sidearm"


class PointCategory(str, Enum):
    """The two independent budgets a card can draw from."""

    BUILD_POINTS = "BuildPoints"
    CREW_POINTS = "CrewPoints"


CARD_TYPE_CATEGORIES: dict[CardType, PointCategory] = {
    CardType.WEAPON: PointCategory.BUILD_POINTS,
    CardType.UPGRADE: PointCategory.BUILD_POINTS,
    CardType.ACCESSORY: PointCategory.BUILD_POINTS,
    CardType.STRUCTURE: PointCategory.BUILD_POINTS,
    CardType.CREW: PointCategory.CREW_POINTS,
    CardType.GEAR: PointCategory.CREW_POINTS,
    CardType.SIDEARM: PointCategory.CREW_POINTS,
}


class CardArea(str, Enum):
    """Placement zones on the vehicle sheet."""

    CREW = "crew"
    GEAR_UPGRADE = "gearupgrade"
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    TURRET = "turret"


# Areas that map onto a physical side of the vehicle, with their `sides` letter
VEHICLE_LOCATION_CODES: dict[CardArea, str] = {
    CardArea.FRONT: "F",
    CardArea.BACK: "B",
    CardArea.LEFT: "L",
    CardArea.RIGHT: "R",
    CardArea.TURRET: "T",
}

# Areas that hold at most one Structure card each
STRUCTURE_AREAS = frozenset({CardArea.FRONT, CardArea.BACK, CardArea.LEFT, CardArea.RIGHT})


def is_placeholder_image(image_url: str | None) -> bool:
    """True if the url is missing or points at generic stand-in art."""
    if not image_url:
        return True
    return any(marker in image_url for marker in PLACEHOLDER_MARKERS)


def default_area_for_type(card_type: CardType) -> CardArea:
    """Area a card lands in when the caller does not choose one."""
    if card_type in (CardType.CREW, CardType.SIDEARM):
        return CardArea.CREW
    if card_type in (CardType.GEAR, CardType.UPGRADE):
        return CardArea.GEAR_UPGRADE
    return CardArea.FRONT


class Position(BaseModel):
    """Free placement of a card on the vehicle sheet."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Card(BaseModel):
    """
    A card definition from the catalog.

    Attributes:
        id: Catalog-scoped unique id (empty until the catalog issues one)
        name: Card name as printed
        image_url: Card art location; placeholders affect duplicate detection
        type: Card type, determines the point category
        subtype: Free text, compared case-insensitively; empty means none
        build_point_cost: BP charged per purchase
        crew_point_cost: CP charged per purchase
        number_allowed: Soft limit on owned copies (warning only, 0 = none)
        source: Provenance label
        copies: Deck instances granted per purchase
        exclusive: Only one exclusive card per vehicle
        sides: Allowed vehicle sides (subset of "FBLRT"); empty = any
        prerequisite: Name of a card that must already be in the deck
        associated: Name of a card shown alongside this one
        description: Rules text
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = ""
    name: str
    image_url: str = ""
    type: CardType
    subtype: str = ""
    build_point_cost: int = Field(default=0, ge=0)
    crew_point_cost: int = Field(default=0, ge=0)
    number_allowed: int = Field(default=0, ge=0)
    source: str = ""
    copies: int = Field(default=1, ge=1)
    exclusive: bool = False
    sides: str = ""
    prerequisite: str | None = None
    associated: str | None = None
    description: str | None = None

    @field_validator("image_url", "subtype", "source", "sides", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("copies", mode="before")
    @classmethod
    def _at_least_one_copy(cls, value: Any) -> Any:
        # Older exports store 0 for "not a multi-copy card"
        if value is None or (isinstance(value, int) and value < 1):
            return 1
        return value

    @property
    def point_category(self) -> PointCategory:
        """Budget this card type draws from."""
        return CARD_TYPE_CATEGORIES[self.type]

    @property
    def sort_cost(self) -> int:
        """The card's headline cost: BP if it has any, else CP."""
        return self.build_point_cost or self.crew_point_cost or 0

    @property
    def has_subtype(self) -> bool:
        return bool(self.subtype.strip())

    @property
    def has_prerequisite(self) -> bool:
        return bool(self.prerequisite and self.prerequisite.strip())

    @property
    def has_placeholder_image(self) -> bool:
        return is_placeholder_image(self.image_url)

    def allows_side(self, code: str) -> bool:
        """Whether the `sides` restriction admits the given side letter."""
        if not self.sides.strip():
            return True
        return code.upper() in self.sides.upper()

    def same_name(self, other: "Card") -> bool:
        return self.name.lower() == other.name.lower()

    def same_subtype(self, other: "Card") -> bool:
        """Both cards carry a subtype and they match case-insensitively."""
        if not (self.has_subtype and other.has_subtype):
            return False
        return self.subtype.strip().lower() == other.subtype.strip().lower()


class DeckCard(Card):
    """
    A card instance placed in a deck.

    `id` is the deck-scoped instance id so several instances of one catalog
    card can coexist; `origin_id` always holds the catalog id it was cloned
    from.
    """

    origin_id: str
    area: CardArea
    damage: int = Field(default=0, ge=0, le=MAX_CARD_DAMAGE)
    cost_paid: bool = True
    position: Position | None = None

    @classmethod
    def from_card(
        cls,
        card: Card,
        instance_id: str,
        area: CardArea,
        cost_paid: bool = True,
    ) -> "DeckCard":
        """Clone a catalog card into a new deck instance."""
        data = card.model_dump(include=set(Card.model_fields) - {"id"})
        return cls(
            **data,
            id=instance_id,
            origin_id=card.id,
            area=area,
            cost_paid=cost_paid,
        )
