"""
Deck state store.

Owns one vehicle deck and the catalog snapshot it is built from. Every
deck mutation is a single atomic attempt: it validates against the current
deck, and only if the rules allow it swaps in a new immutable `Deck`. The
same `ValidationResult` the check produced is returned, so callers never
need a separate "can I?" call before acting (though `can_add_card_to_deck`
is available for previews).

INVARIANT: `deck.points_used` equals the summed cost of every instance whose
cost was charged (`cost_paid`).

Rule violations and unknown ids never raise; they are returned and logged.
"""

import logging
import threading
import uuid
from collections.abc import Callable, Iterable

from vehiclebuilder.config import MAX_CARD_DAMAGE, MAX_POWER, MAX_TIRES, settings
from vehiclebuilder.models.card import (
    Card,
    CardArea,
    CardType,
    DeckCard,
    Position,
    default_area_for_type,
)
from vehiclebuilder.models.deck import (
    CUSTOM_DIVISION,
    ArmorSideName,
    ArmorValues,
    Deck,
    PointTotals,
    SpeedValue,
    point_limits_for_division,
)
from vehiclebuilder.models.failure import DeckInvariantError
from vehiclebuilder.models.validation import (
    ALLOWED,
    CardNotFound,
    NumberAllowedWarning,
    Placed,
    StructureLimitReached,
    ValidationResult,
)
from vehiclebuilder.services.card_sorting import sort_crew_area
from vehiclebuilder.services.card_validation import (
    can_remove_from_deck,
    check_number_allowed_warning,
    structure_occupying_area,
    validate_card_for_deck,
    validate_card_movement,
    validate_card_side_placement,
    validate_free_copy,
)
from vehiclebuilder.services.catalog import Catalog

logger = logging.getLogger(__name__)


def new_instance_id() -> str:
    return str(uuid.uuid4())


def check_point_accounting(deck: Deck) -> None:
    """
    Verify that points_used matches the charged instances.

    Raises:
        DeckInvariantError: If the totals disagree
    """
    expected = deck.charged_total()
    if deck.points_used != expected:
        raise DeckInvariantError(
            deck.id,
            f"points_used={deck.points_used.model_dump()} but charged cards "
            f"total {expected.model_dump()}",
        )


class DeckStore:
    """
    Mutable holder for one deck plus its catalog.

    Create one per deck being edited; nothing here is global, so tests and
    multiple open vehicles stay isolated.

    Args:
        catalog: Catalog cards are drawn from
        deck: Existing deck to edit; a fresh deck is created when omitted
        default_division: Division for fresh decks (defaults to settings)
        starter_card_name: Catalog card seeded into fresh decks (defaults to settings)
        id_factory: Generator for deck and instance ids
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        deck: Deck | None = None,
        *,
        default_division: int | None = None,
        starter_card_name: str | None = None,
        id_factory: Callable[[], str] = new_instance_id,
    ):
        self.catalog = catalog if catalog is not None else Catalog()
        self.default_division = (
            default_division if default_division is not None else settings.default_division
        )
        self.starter_card_name = (
            starter_card_name if starter_card_name is not None else settings.starter_card_name
        )
        self._new_id = id_factory
        self._lock = threading.RLock()
        self._deck = deck if deck is not None else self._fresh_deck()

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def deck(self) -> Deck:
        """Current deck snapshot. Immutable; later mutations do not affect it."""
        return self._deck

    def available_points(self) -> PointTotals:
        return self._deck.available_points

    def cards_in_area(self, area: CardArea) -> list[DeckCard]:
        """
        Cards placed in `area`, in display order.

        The Crew area always shows Driver and Gunner first (see
        `compare_crew_area`); every other area keeps its arranged order.
        """
        cards = self._deck.cards_in_area(area)
        if area == CardArea.CREW:
            return sort_crew_area(cards)
        return cards

    def number_allowed_warning(self, card: Card) -> NumberAllowedWarning | None:
        return check_number_allowed_warning(card, self._deck.cards)

    def can_add_card_to_deck(
        self,
        card: Card,
        target_area: CardArea | None = None,
    ) -> ValidationResult:
        """
        Full admission check for placing `card`.

        Deck-wide rules first, then (when an area is known) the per-area
        Structure limit and the card's side restriction.
        """
        deck = self._deck
        result = validate_card_for_deck(card, deck.cards, deck.point_limits, deck.points_used)
        if not result.allowed or target_area is None:
            return result

        if card.type == CardType.STRUCTURE:
            if structure_occupying_area(deck.cards, target_area) is not None:
                return StructureLimitReached(area=target_area)

        return validate_card_side_placement(card, target_area)

    # =========================================================================
    # ADD / REMOVE
    # =========================================================================

    def add_to_deck(
        self,
        catalog_card_id: str,
        area: CardArea | None = None,
        deduct_cost: bool = True,
    ) -> ValidationResult:
        """
        Place one instance of a catalog card.

        With `deduct_cost=False` the instance is an extra copy of a purchase
        already in the deck: no points are spent, and it is accepted only
        while that purchase still grants unplaced copies (see
        `validate_free_copy`).

        Returns:
            Placed with the new instance, or the denial
        """
        with self._lock:
            card = self.catalog.get(catalog_card_id)
            if card is None:
                logger.warning("Cannot add unknown catalog card %s", catalog_card_id)
                return CardNotFound(card_id=catalog_card_id)

            target_area = area or default_area_for_type(card.type)
            if deduct_cost:
                result = self.can_add_card_to_deck(card, target_area)
            else:
                deck = self._deck
                result = validate_free_copy(card, target_area, deck.cards, deck.point_limits)
            if not result.allowed:
                self._log_denial("add", card, result)
                return result

            instance = self._instance(card, target_area, cost_paid=deduct_cost)
            self._commit_add([instance])
            return Placed(deck_cards=(instance,))

    def purchase(self, catalog_card_id: str, area: CardArea | None = None) -> ValidationResult:
        """
        Buy a card: one charged instance plus up to `copies - 1` free instances.

        All instances land in the same area in a single atomic step. Copies
        the area cannot take (a second Structure on one side, a second
        exclusive card) are left unplaced and can still be added elsewhere
        with `add_to_deck(..., deduct_cost=False)`.
        """
        with self._lock:
            card = self.catalog.get(catalog_card_id)
            if card is None:
                logger.warning("Cannot purchase unknown catalog card %s", catalog_card_id)
                return CardNotFound(card_id=catalog_card_id)

            target_area = area or default_area_for_type(card.type)
            result = self.can_add_card_to_deck(card, target_area)
            if not result.allowed:
                self._log_denial("purchase", card, result)
                return result

            instances = [self._instance(card, target_area, cost_paid=True)]
            limits = self._deck.point_limits
            for _ in range(card.copies - 1):
                pending = [*self._deck.cards, *instances]
                copy_result = validate_free_copy(card, target_area, pending, limits)
                if not copy_result.allowed:
                    logger.info(
                        "Placed %d of %d copies of %s: %s",
                        len(instances),
                        card.copies,
                        card.name,
                        copy_result.reason.value,
                    )
                    break
                instances.append(self._instance(card, target_area, cost_paid=False))
            self._commit_add(instances)
            return Placed(deck_cards=tuple(instances))

    def remove_from_deck(self, instance_id: str, copies: int = 1) -> ValidationResult:
        """
        Remove a placed card and up to `copies - 1` sibling instances.

        Siblings are instances with the same `origin_id`, taken in deck order.
        The card's cost is refunded once, and only if one of the removed
        instances had actually been charged.
        """
        with self._lock:
            deck = self._deck
            result = can_remove_from_deck(instance_id, deck.cards)
            if not result.allowed:
                logger.info("Removal of %s denied: %s", instance_id, result.reason.value)
                return result

            target = deck.find_card(instance_id)
            if target is None:
                return CardNotFound(card_id=instance_id)

            removed_ids = {target.id}
            for card in deck.cards:
                if len(removed_ids) >= copies:
                    break
                if card.origin_id == target.origin_id:
                    removed_ids.add(card.id)

            removed = [card for card in deck.cards if card.id in removed_ids]
            refund = PointTotals()
            if any(card.cost_paid for card in removed):
                refund = PointTotals.cost_of(target)

            self._deck = deck.model_copy(
                update={
                    "cards": tuple(card for card in deck.cards if card.id not in removed_ids),
                    "points_used": deck.points_used - refund,
                }
            )
            logger.debug("Removed %d instance(s) of %s", len(removed), target.name)
            return ALLOWED

    # =========================================================================
    # PLACEMENT
    # =========================================================================

    def move_card(self, instance_id: str, area: CardArea) -> ValidationResult:
        """Relocate a placed card after checking the destination's rules."""
        with self._lock:
            card = self._deck.find_card(instance_id)
            if card is None:
                return CardNotFound(card_id=instance_id)

            result = validate_card_movement(card, area, self._deck.cards)
            if not result.allowed:
                self._log_denial("move", card, result)
                return result

            self._replace_card(instance_id, area=area)
            return ALLOWED

    def update_card_area(self, instance_id: str, area: CardArea) -> bool:
        """
        Relocate a placed card without any rule checks.

        Callers must have validated the destination (see `move_card`).
        Returns False if the instance does not exist.
        """
        with self._lock:
            return self._replace_card(instance_id, area=area)

    def update_card_position(self, instance_id: str, x: float, y: float) -> bool:
        with self._lock:
            return self._replace_card(instance_id, position=Position(x=x, y=y))

    def reorder_card_in_area(self, instance_id: str, new_index: int) -> bool:
        """
        Move a card to `new_index` among the cards of its own area.

        Cards in other areas keep their positions. Out-of-range indexes are
        clamped.
        """
        with self._lock:
            deck = self._deck
            target = deck.find_card(instance_id)
            if target is None:
                logger.warning("Cannot reorder unknown deck card %s", instance_id)
                return False

            remaining = [card for card in deck.cards if card.id != instance_id]
            slots = [i for i, card in enumerate(remaining) if card.area == target.area]
            if not slots:
                return True

            new_index = max(0, min(new_index, len(slots)))
            insert_at = slots[new_index] if new_index < len(slots) else slots[-1] + 1
            remaining.insert(insert_at, target)

            self._deck = deck.model_copy(update={"cards": tuple(remaining)})
            return True

    def update_card_damage(self, instance_id: str, delta: int) -> int | None:
        """
        Adjust a card's damage counter, clamped to 0..MAX_CARD_DAMAGE.

        Returns:
            The new damage value, or None if the instance does not exist
        """
        with self._lock:
            card = self._deck.find_card(instance_id)
            if card is None:
                logger.warning("Cannot damage unknown deck card %s", instance_id)
                return None
            damage = max(0, min(MAX_CARD_DAMAGE, card.damage + delta))
            self._replace_card(instance_id, damage=damage)
            return damage

    # =========================================================================
    # DECK FIELDS
    # =========================================================================

    def update_point_limits(self, limits: PointTotals) -> None:
        with self._lock:
            self._deck = self._deck.model_copy(update={"point_limits": limits})

    def update_deck_name(self, name: str) -> None:
        with self._lock:
            self._deck = self._deck.model_copy(update={"name": name})

    def update_deck_background(self, image_url: str) -> None:
        with self._lock:
            self._deck = self._deck.model_copy(update={"background_image": image_url})

    def set_division(self, division: str | int) -> bool:
        """
        Set the deck's division.

        A numeric division resets point limits to 4N BP / N CP and armor to
        N per side. "custom" keeps the current limits.
        """
        value = str(division).strip().lower()
        with self._lock:
            if value == CUSTOM_DIVISION:
                self._deck = self._deck.model_copy(update={"division": CUSTOM_DIVISION})
                return True

            if not value.isdigit() or int(value) < 1:
                logger.warning("Ignoring invalid division %r", division)
                return False

            number = int(value)
            self._deck = self._deck.model_copy(
                update={
                    "division": str(number),
                    "point_limits": point_limits_for_division(number),
                    "armor": ArmorValues.full(number),
                }
            )
            return True

    def update_armor(self, side: ArmorSideName, delta: int) -> int:
        """Adjust current armor on one side, clamped to 0..max. Returns the new value."""
        with self._lock:
            armor = self._deck.armor
            current = getattr(armor, side)
            value = max(0, min(current.max, current.current + delta))
            updated = armor.model_copy(update={side: current.model_copy(update={"current": value})})
            self._deck = self._deck.model_copy(update={"armor": updated})
            return value

    def toggle_on_fire(self, side: ArmorSideName) -> bool:
        """Flip the on-fire marker for one side. Returns the new state."""
        with self._lock:
            armor = self._deck.armor
            current = getattr(armor, side)
            on_fire = not current.on_fire
            updated = armor.model_copy(
                update={side: current.model_copy(update={"on_fire": on_fire})}
            )
            self._deck = self._deck.model_copy(update={"armor": updated})
            return on_fire

    def update_vehicle_controls(
        self,
        tires: int | None = None,
        power: int | None = None,
        speed: SpeedValue | None = None,
    ) -> None:
        """Set any of the vehicle dials. Tires and power are clamped to their range."""
        with self._lock:
            controls = self._deck.vehicle_controls
            changes: dict[str, object] = {}
            if tires is not None:
                changes["tires"] = max(0, min(MAX_TIRES, tires))
            if power is not None:
                changes["power"] = max(0, min(MAX_POWER, power))
            if speed is not None:
                changes["speed"] = speed
            self._deck = self._deck.model_copy(
                update={"vehicle_controls": controls.model_copy(update=changes)}
            )

    # =========================================================================
    # WHOLE-DECK AND CATALOG
    # =========================================================================

    def load_deck(self, deck: Deck, verify: bool = False) -> None:
        """
        Make `deck` the deck being edited.

        Raises:
            DeckInvariantError: If `verify` is set and the deck's point
                accounting does not match its cards
        """
        if verify:
            check_point_accounting(deck)
        with self._lock:
            self._deck = deck

    def reset_deck(self) -> Deck:
        """Replace the deck with a fresh one (seeded with the starter card if configured)."""
        with self._lock:
            self._deck = self._fresh_deck()
            return self._deck

    def replace_catalog(self, cards: Iterable[Card]) -> list[Card]:
        with self._lock:
            return self.catalog.replace(cards)

    def remove_from_catalog(self, card_id: str) -> list[DeckCard]:
        """
        Delete a catalog card and every deck instance cloned from it.

        Charged instances are refunded. Returns the removed instances.

        Raises:
            CatalogCardNotFoundError: If the catalog has no such card
        """
        with self._lock:
            self.catalog.remove_card(card_id)

            deck = self._deck
            removed = [card for card in deck.cards if card.origin_id == card_id]
            if not removed:
                return []

            refund = PointTotals()
            for card in removed:
                if card.cost_paid:
                    refund = refund + PointTotals.cost_of(card)

            self._deck = deck.model_copy(
                update={
                    "cards": tuple(card for card in deck.cards if card.origin_id != card_id),
                    "points_used": deck.points_used - refund,
                }
            )
            logger.info(
                "Catalog card %s removed with %d deck instance(s)", card_id, len(removed)
            )
            return removed

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _fresh_deck(self) -> Deck:
        division = self.default_division
        deck = Deck(
            id=self._new_id(),
            division=str(division),
            point_limits=point_limits_for_division(division),
            armor=ArmorValues.full(division),
        )

        if not self.starter_card_name:
            return deck

        starter = self.catalog.find_by_name(self.starter_card_name)
        if starter is None:
            logger.info("Starter card %r not in catalog; deck left empty", self.starter_card_name)
            return deck

        instance = self._instance(starter, default_area_for_type(starter.type), cost_paid=True)
        return deck.model_copy(
            update={
                "cards": (instance,),
                "points_used": PointTotals.cost_of(instance),
            }
        )

    def _instance(self, card: Card, area: CardArea, cost_paid: bool) -> DeckCard:
        return DeckCard.from_card(card, self._new_id(), area, cost_paid=cost_paid)

    def _commit_add(self, instances: list[DeckCard]) -> None:
        deck = self._deck
        charged = PointTotals()
        for instance in instances:
            if instance.cost_paid:
                charged = charged + PointTotals.cost_of(instance)
        self._deck = deck.model_copy(
            update={
                "cards": (*deck.cards, *instances),
                "points_used": deck.points_used + charged,
            }
        )
        logger.debug("Added %d instance(s) of %s", len(instances), instances[0].name)

    def _replace_card(self, instance_id: str, **changes: object) -> bool:
        deck = self._deck
        if deck.find_card(instance_id) is None:
            logger.warning("Deck card %s not found", instance_id)
            return False
        cards = tuple(
            card.model_copy(update=changes) if card.id == instance_id else card
            for card in deck.cards
        )
        self._deck = deck.model_copy(update={"cards": cards})
        return True

    @staticmethod
    def _log_denial(action: str, card: Card, result: ValidationResult) -> None:
        reason = result.reason.value if result.reason else "unknown"
        logger.info("Denied %s of %s: %s", action, card.name, reason)
