"""
Deck (vehicle) models.

A Deck is an immutable value: every store mutation produces a new Deck via
`model_copy`. Serializing with `model_dump_json(by_alias=True)` and parsing
back with `model_validate_json` yields an equal Deck.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vehiclebuilder.config import MAX_POWER, MAX_TIRES
from vehiclebuilder.models.card import Card, CardArea, DeckCard

CUSTOM_DIVISION = "custom"

SpeedValue = Literal["R", "0", "1", "2", "3", "4", "5"]

ArmorSideName = Literal["front", "back", "left", "right"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PointTotals(_CamelModel):
    """A pair of build point and crew point amounts."""

    build_points: int = 0
    crew_points: int = 0

    def __add__(self, other: "PointTotals") -> "PointTotals":
        return PointTotals(
            build_points=self.build_points + other.build_points,
            crew_points=self.crew_points + other.crew_points,
        )

    def __sub__(self, other: "PointTotals") -> "PointTotals":
        return PointTotals(
            build_points=self.build_points - other.build_points,
            crew_points=self.crew_points - other.crew_points,
        )

    @classmethod
    def cost_of(cls, card: Card) -> "PointTotals":
        return cls(build_points=card.build_point_cost, crew_points=card.crew_point_cost)


def point_limits_for_division(division: int) -> PointTotals:
    """Division N grants 4N build points and N crew points."""
    return PointTotals(build_points=division * 4, crew_points=division)


class ArmorSide(_CamelModel):
    current: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)
    on_fire: bool = False


class ArmorValues(_CamelModel):
    """Armor tracking for the four vehicle sides."""

    front: ArmorSide = Field(default_factory=ArmorSide)
    back: ArmorSide = Field(default_factory=ArmorSide)
    left: ArmorSide = Field(default_factory=ArmorSide)
    right: ArmorSide = Field(default_factory=ArmorSide)

    @classmethod
    def full(cls, armor_points: int) -> "ArmorValues":
        """Every side at full armor."""
        side = ArmorSide(current=armor_points, max=armor_points)
        return cls(front=side, back=side, left=side, right=side)


class VehicleControls(_CamelModel):
    tires: int = Field(default=MAX_TIRES, ge=0, le=MAX_TIRES)
    power: int = Field(default=MAX_POWER, ge=0, le=MAX_POWER)
    speed: SpeedValue = "2"


class Deck(_CamelModel):
    """
    A vehicle's card loadout plus point accounting.

    Attributes:
        id: Deck id
        name: Vehicle name
        division: "custom" or a numeric string; numeric divisions fix limits
        background_image: Vehicle sheet art
        cards: Placed card instances in display order
        point_limits: Budgets available
        points_used: Budgets spent (sum over charged instances)
        armor: Per-side armor tracker
        vehicle_controls: Tires, power and speed dials
    """

    id: str
    name: str = ""
    division: str = CUSTOM_DIVISION
    background_image: str = ""
    cards: tuple[DeckCard, ...] = ()
    point_limits: PointTotals = Field(default_factory=PointTotals)
    points_used: PointTotals = Field(default_factory=PointTotals)
    armor: ArmorValues = Field(default_factory=ArmorValues)
    vehicle_controls: VehicleControls = Field(default_factory=VehicleControls)

    @property
    def available_points(self) -> PointTotals:
        return self.point_limits - self.points_used

    def find_card(self, instance_id: str) -> DeckCard | None:
        for card in self.cards:
            if card.id == instance_id:
                return card
        return None

    def cards_in_area(self, area: CardArea) -> list[DeckCard]:
        return [card for card in self.cards if card.area == area]

    def charged_total(self) -> PointTotals:
        """Sum of costs over instances whose cost was charged."""
        total = PointTotals()
        for card in self.cards:
            if card.cost_paid:
                total = total + PointTotals.cost_of(card)
        return total
