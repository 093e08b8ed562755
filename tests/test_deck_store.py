"""Tests for the deck state store."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from vehiclebuilder.models.card import CardArea, CardType, Position
from vehiclebuilder.models.deck import ArmorValues, PointTotals
from vehiclebuilder.models.failure import CatalogCardNotFoundError, DeckInvariantError
from vehiclebuilder.models.validation import (
    ALLOWED,
    CardNotFound,
    CrewLimitReached,
    HasDependentCards,
    InvalidArea,
    InvalidSide,
    NoFreeCopies,
    Placed,
    Reason,
    StructureLimitReached,
)
from vehiclebuilder.services.deck_store import DeckStore, check_point_accounting


def points(build: int = 0, crew: int = 0) -> PointTotals:
    return PointTotals(build_points=build, crew_points=crew)


class TestFreshDeck:
    def test_default_division(self, store: DeckStore) -> None:
        """A fresh deck uses the configured division."""
        deck = store.deck

        assert deck.division == "4"
        assert deck.point_limits == points(16, 4)
        assert deck.points_used == points()
        assert deck.armor == ArmorValues.full(4)
        assert deck.cards == ()

    def test_starter_card_seeded(self, catalog, sequential_ids) -> None:
        """The starter card is placed with its cost already charged."""
        store = DeckStore(
            catalog,
            default_division=4,
            starter_card_name="Ace",
            id_factory=sequential_ids,
        )

        (starter,) = store.deck.cards
        assert starter.origin_id == "ace-driver"
        assert starter.area == CardArea.CREW
        assert store.deck.points_used == points(0, 1)

    def test_missing_starter_card_leaves_deck_empty(self, catalog, sequential_ids) -> None:
        """A starter name absent from the catalog is ignored."""
        store = DeckStore(
            catalog,
            default_division=4,
            starter_card_name="Nobody",
            id_factory=sequential_ids,
        )

        assert store.deck.cards == ()

    def test_reset_deck(self, catalog, sequential_ids) -> None:
        """Reset discards changes and re-seeds the starter card."""
        store = DeckStore(
            catalog,
            default_division=4,
            starter_card_name="Ace",
            id_factory=sequential_ids,
        )
        store.add_to_deck("machine-gun")
        store.update_deck_name("Rust Bucket")

        deck = store.reset_deck()

        assert deck.name == ""
        assert [c.name for c in deck.cards] == ["Ace"]
        assert deck.points_used == points(0, 1)


class TestCanAddCardToDeck:
    def test_deck_rules_only_without_area(self, store: DeckStore) -> None:
        """Without an area only the deck-wide rules apply."""
        ram_plate = store.catalog.get("ram-plate")

        assert store.can_add_card_to_deck(ram_plate).allowed

    def test_checks_side_for_area(self, store: DeckStore) -> None:
        ram_plate = store.catalog.get("ram-plate")

        assert isinstance(store.can_add_card_to_deck(ram_plate, CardArea.LEFT), InvalidSide)
        assert store.can_add_card_to_deck(ram_plate, CardArea.FRONT).allowed

    def test_occupied_structure_area(self, store: DeckStore) -> None:
        """An occupied side is reported without touching the deck."""
        store.add_to_deck("ram-plate", CardArea.FRONT)
        before = store.deck

        result = store.can_add_card_to_deck(store.catalog.get("roll-cage"), CardArea.FRONT)

        assert isinstance(result, StructureLimitReached)
        assert store.deck is before

    def test_deck_rule_denial(self, store: DeckStore) -> None:
        result = store.can_add_card_to_deck(store.catalog.get("rocket-pod"), CardArea.FRONT)

        assert result.reason == Reason.WEAPON_COST_LIMIT


class TestAddToDeck:
    def test_add_charges_cost(self, store: DeckStore) -> None:
        """Adding a card places an instance and spends its cost."""
        result = store.add_to_deck("machine-gun")

        assert isinstance(result, Placed)
        instance = result.deck_card
        assert instance.origin_id == "machine-gun"
        assert instance.id != "machine-gun"
        assert instance.area == CardArea.FRONT
        assert instance.cost_paid
        assert store.deck.points_used == points(2, 0)
        assert store.available_points() == points(14, 4)

    @pytest.mark.parametrize(
        ("card_id", "area"),
        [
            ("ace-driver", CardArea.CREW),
            ("pistol", CardArea.CREW),
            ("gloves", CardArea.GEAR_UPGRADE),
            ("turbo", CardArea.GEAR_UPGRADE),
            ("oil-slick", CardArea.FRONT),
        ],
    )
    def test_default_area(self, store: DeckStore, card_id: str, area: CardArea) -> None:
        """Without an explicit area the card type picks one."""
        result = store.add_to_deck(card_id)

        assert result.deck_card.area == area

    def test_unknown_catalog_card(self, store: DeckStore) -> None:
        """Unknown ids are reported, not raised."""
        before = store.deck

        result = store.add_to_deck("missing")

        assert isinstance(result, CardNotFound)
        assert store.deck is before

    def test_denied_add_changes_nothing(self, store: DeckStore) -> None:
        """A rule violation leaves the deck untouched."""
        before = store.deck

        result = store.add_to_deck("rocket-pod")

        assert result.reason == Reason.WEAPON_COST_LIMIT
        assert store.deck is before

    def test_structure_per_area(self, store: DeckStore) -> None:
        """Each vehicle side holds one structure card."""
        assert store.add_to_deck("ram-plate", CardArea.FRONT).allowed

        result = store.add_to_deck("roll-cage", CardArea.FRONT)

        assert isinstance(result, StructureLimitReached)
        assert result.area == CardArea.FRONT
        assert store.add_to_deck("roll-cage", CardArea.BACK).allowed

    def test_side_restriction(self, store: DeckStore) -> None:
        """Cards restricted to sides are denied elsewhere."""
        result = store.add_to_deck("ram-plate", CardArea.LEFT)

        assert isinstance(result, InvalidSide)
        assert result.invalid_side == "FB"

    def test_turret_weapon(self, store: DeckStore) -> None:
        """A turret-only weapon fits the turret and nothing else."""
        assert not store.add_to_deck("turret-gun").allowed
        assert store.add_to_deck("turret-gun", CardArea.TURRET).allowed

    def test_extra_copy_not_charged(self, store: DeckStore) -> None:
        """Copies of a purchased card skip the duplicate rules and cost nothing."""
        store.add_to_deck("mines")

        result = store.add_to_deck("mines", deduct_cost=False)

        assert result.allowed
        assert not result.deck_card.cost_paid
        assert store.deck.points_used == points(3, 0)

    def test_extra_copy_still_side_checked(self, store: DeckStore, make_card) -> None:
        """Extra copies must still respect the card's sides."""
        store.catalog.add_card(
            make_card("Twin Ram", CardType.STRUCTURE, id="twin-ram", sides="FB", copies=2)
        )
        store.add_to_deck("twin-ram", CardArea.FRONT)

        result = store.add_to_deck("twin-ram", CardArea.RIGHT, deduct_cost=False)

        assert result.reason == Reason.INVALID_SIDE
        assert store.add_to_deck("twin-ram", CardArea.BACK, deduct_cost=False).allowed

    def test_snapshots_are_immutable(self, store: DeckStore) -> None:
        """A deck snapshot is not affected by later mutations."""
        snapshot = store.deck

        store.add_to_deck("machine-gun")

        assert snapshot.cards == ()
        assert len(store.deck.cards) == 1

    def test_second_exclusive_denied(self, store: DeckStore, make_card) -> None:
        """The store applies the exclusive rule."""
        store.catalog.add_card(make_card("Unique A", CardType.ACCESSORY, id="ua", exclusive=True))
        store.catalog.add_card(make_card("Unique B", CardType.ACCESSORY, id="ub", exclusive=True))

        assert store.add_to_deck("ua").allowed
        assert store.add_to_deck("ub").reason == Reason.EXCLUSIVE_LIMIT_REACHED

    def test_number_allowed_warning(self, store: DeckStore) -> None:
        """The owned-copies warning reflects the current deck."""
        ace = store.catalog.get("ace-driver")
        assert store.number_allowed_warning(ace) is None

        store.add_to_deck("ace-driver")
        warning = store.number_allowed_warning(ace)

        assert warning is not None
        assert warning.current_count == 1

    def test_concurrent_adds_are_atomic(self, store: DeckStore) -> None:
        """Racing adds of a unique card place it exactly once."""
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: store.add_to_deck("oil-slick"), range(16)))

        assert sum(1 for r in results if r.allowed) == 1
        assert len(store.deck.cards) == 1
        assert store.deck.points_used == points(1, 0)


class TestPurchase:
    def test_multi_copy_purchase(self, store: DeckStore) -> None:
        """A copies=3 card charges once and places three instances."""
        result = store.purchase("mines", CardArea.BACK)

        assert isinstance(result, Placed)
        assert len(result.deck_cards) == 3
        assert [c.cost_paid for c in result.deck_cards] == [True, False, False]
        assert {c.area for c in result.deck_cards} == {CardArea.BACK}
        assert {c.origin_id for c in result.deck_cards} == {"mines"}
        assert store.deck.points_used == points(3, 0)

    def test_single_copy_purchase(self, store: DeckStore) -> None:
        """Ordinary cards purchase as one instance."""
        result = store.purchase("machine-gun")

        assert len(result.deck_cards) == 1

    def test_denied_purchase(self, store: DeckStore) -> None:
        """A denied purchase places nothing."""
        store.update_point_limits(points(2, 4))

        result = store.purchase("mines")

        assert result.reason == Reason.NOT_ENOUGH_POINTS
        assert store.deck.cards == ()

    def test_unknown_purchase(self, store: DeckStore) -> None:
        assert isinstance(store.purchase("missing"), CardNotFound)

    def test_structure_copies_stop_at_occupied_side(self, store: DeckStore, make_card) -> None:
        """Copies that cannot share the area stay unplaced but remain available."""
        store.catalog.add_card(make_card("Twin Cage", CardType.STRUCTURE, id="cage", copies=2))

        result = store.purchase("cage", CardArea.FRONT)

        assert len(result.deck_cards) == 1
        assert len(store.cards_in_area(CardArea.FRONT)) == 1
        assert store.add_to_deck("cage", CardArea.BACK, deduct_cost=False).allowed

    def test_exclusive_copies_not_placed(self, store: DeckStore, make_card) -> None:
        """Only one instance of an exclusive multi-copy card is placed."""
        store.catalog.add_card(
            make_card("Unique Rig", CardType.ACCESSORY, id="rig", copies=3, exclusive=True)
        )

        result = store.purchase("rig")

        assert [c.cost_paid for c in result.deck_cards] == [True]
        assert sum(1 for c in store.deck.cards if c.exclusive) == 1

    def test_driver_copies_not_placed(self, store: DeckStore, make_card) -> None:
        store.catalog.add_card(
            make_card("Twin Ace", CardType.CREW, id="twin-ace", subtype="Driver", copies=2)
        )

        result = store.purchase("twin-ace")

        assert len(result.deck_cards) == 1
        assert len(store.cards_in_area(CardArea.CREW)) == 1


class TestFreeCopies:
    def test_unpurchased_card_cannot_be_added_free(self, store: DeckStore) -> None:
        """A free copy of a card that was never bought is denied."""
        before = store.deck

        result = store.add_to_deck("rocket-pod", deduct_cost=False)

        assert result == NoFreeCopies(copies_granted=0)
        assert store.deck is before

    def test_second_driver_denied_as_free_copy(self, store: DeckStore) -> None:
        store.add_to_deck("ace-driver")

        result = store.add_to_deck("ace-driver", deduct_cost=False)

        assert isinstance(result, NoFreeCopies)
        assert len(store.cards_in_area(CardArea.CREW)) == 1

    def test_occupied_side_denied_as_free_copy(self, store: DeckStore) -> None:
        """A free Structure copy cannot double up a side."""
        store.add_to_deck("roll-cage", CardArea.FRONT)

        result = store.add_to_deck("ram-plate", CardArea.FRONT, deduct_cost=False)

        assert not result.allowed
        assert len(store.cards_in_area(CardArea.FRONT)) == 1

    def test_driver_copy_of_multi_copy_card(self, store: DeckStore, make_card) -> None:
        """Even a granted copy cannot add a second Driver."""
        store.catalog.add_card(
            make_card("Twin Ace", CardType.CREW, id="twin-ace", subtype="Driver", copies=2)
        )
        store.add_to_deck("twin-ace")

        result = store.add_to_deck("twin-ace", deduct_cost=False)

        assert result == CrewLimitReached(crew_type="Driver")

    def test_granted_copies_are_limited(self, store: DeckStore) -> None:
        """A purchase grants exactly `copies - 1` free instances."""
        store.add_to_deck("mines")
        assert store.add_to_deck("mines", deduct_cost=False).allowed
        assert store.add_to_deck("mines", deduct_cost=False).allowed

        result = store.add_to_deck("mines", deduct_cost=False)

        assert result == NoFreeCopies(copies_granted=2)
        assert len(store.deck.cards) == 3
        assert store.deck.points_used == points(3, 0)

    def test_purchased_copies_count_against_grant(self, store: DeckStore) -> None:
        store.purchase("mines")

        assert isinstance(store.add_to_deck("mines", deduct_cost=False), NoFreeCopies)


class TestRemoveFromDeck:
    def test_remove_refunds_cost(self, store: DeckStore) -> None:
        """Removing a charged card refunds its cost once."""
        instance = store.add_to_deck("machine-gun").deck_card

        result = store.remove_from_deck(instance.id)

        assert result == ALLOWED
        assert store.deck.cards == ()
        assert store.deck.points_used == points()

    def test_remove_all_copies(self, store: DeckStore) -> None:
        """Removing with copies takes siblings and refunds once."""
        placed = store.purchase("mines")
        store.add_to_deck("machine-gun")

        store.remove_from_deck(placed.deck_card.id, copies=3)

        assert [c.origin_id for c in store.deck.cards] == ["machine-gun"]
        assert store.deck.points_used == points(2, 0)

    def test_remove_free_copy_keeps_points(self, store: DeckStore) -> None:
        """Removing an uncharged copy refunds nothing."""
        placed = store.purchase("mines")

        store.remove_from_deck(placed.deck_cards[2].id)

        assert len(store.deck.cards) == 2
        assert store.deck.points_used == points(3, 0)

    def test_copies_only_match_same_origin(self, store: DeckStore) -> None:
        """Siblings are identified by origin, not by name."""
        first = store.add_to_deck("oil-slick").deck_card
        store.add_to_deck("machine-gun")

        store.remove_from_deck(first.id, copies=5)

        assert [c.origin_id for c in store.deck.cards] == ["machine-gun"]

    def test_dependents_block_removal(self, store: DeckStore, make_card) -> None:
        """A card another card requires cannot be removed."""
        store.catalog.add_card(
            make_card("Gun Sight", CardType.UPGRADE, id="sight", prerequisite="Machine Gun")
        )
        gun = store.add_to_deck("machine-gun").deck_card
        store.add_to_deck("sight")
        before = store.deck

        result = store.remove_from_deck(gun.id)

        assert isinstance(result, HasDependentCards)
        assert result.conflicting_card.name == "Gun Sight"
        assert store.deck is before

    def test_unknown_instance(self, store: DeckStore) -> None:
        assert isinstance(store.remove_from_deck("missing"), CardNotFound)

    def test_points_invariant_over_operations(self, store: DeckStore) -> None:
        """points_used always equals the charged instances."""
        mines = store.purchase("mines").deck_cards
        store.add_to_deck("oil-slick")
        store.add_to_deck("ace-driver")
        store.remove_from_deck(mines[1].id)
        store.add_to_deck("mines", CardArea.BACK, deduct_cost=False)
        store.remove_from_deck(mines[0].id)

        check_point_accounting(store.deck)
        assert store.deck.points_used == store.deck.charged_total()


class TestPlacement:
    def test_move_card(self, store: DeckStore) -> None:
        """A valid move relocates the card."""
        gun = store.add_to_deck("machine-gun").deck_card

        result = store.move_card(gun.id, CardArea.BACK)

        assert result.allowed
        assert store.deck.find_card(gun.id).area == CardArea.BACK

    def test_move_to_wrong_area(self, store: DeckStore) -> None:
        """Moves are validated against the destination."""
        gun = store.add_to_deck("machine-gun").deck_card

        result = store.move_card(gun.id, CardArea.CREW)

        assert isinstance(result, InvalidArea)
        assert store.deck.find_card(gun.id).area == CardArea.FRONT

    def test_move_unknown(self, store: DeckStore) -> None:
        assert isinstance(store.move_card("missing", CardArea.BACK), CardNotFound)

    def test_update_card_area_unvalidated(self, store: DeckStore) -> None:
        """Plain area updates skip the rules and keep points."""
        gun = store.add_to_deck("machine-gun").deck_card

        assert store.update_card_area(gun.id, CardArea.CREW)
        assert store.deck.find_card(gun.id).area == CardArea.CREW
        assert store.deck.points_used == points(2, 0)
        assert not store.update_card_area("missing", CardArea.CREW)

    def test_update_card_position(self, store: DeckStore) -> None:
        gun = store.add_to_deck("machine-gun").deck_card

        assert store.update_card_position(gun.id, 10.5, 20)
        assert store.deck.find_card(gun.id).position == Position(x=10.5, y=20)

    def test_reorder_within_area(self, store: DeckStore) -> None:
        """Reordering moves a card among its own area only."""
        gun = store.add_to_deck("machine-gun").deck_card
        pistol = store.add_to_deck("pistol").deck_card
        slick = store.add_to_deck("oil-slick").deck_card
        cage = store.add_to_deck("roll-cage").deck_card

        assert store.reorder_card_in_area(cage.id, 0)

        front = [c.id for c in store.cards_in_area(CardArea.FRONT)]
        assert front == [cage.id, gun.id, slick.id]
        assert [c.id for c in store.cards_in_area(CardArea.CREW)] == [pistol.id]

    def test_reorder_clamps_index(self, store: DeckStore) -> None:
        """Out-of-range indexes move the card to an end."""
        gun = store.add_to_deck("machine-gun").deck_card
        slick = store.add_to_deck("oil-slick").deck_card

        store.reorder_card_in_area(gun.id, 99)
        assert [c.id for c in store.cards_in_area(CardArea.FRONT)] == [slick.id, gun.id]

        store.reorder_card_in_area(gun.id, -5)
        assert [c.id for c in store.cards_in_area(CardArea.FRONT)] == [gun.id, slick.id]

    def test_crew_area_display_order(self, store: DeckStore, make_card) -> None:
        """The Crew area lists Driver, Gunner, Hand Cannon, then other sidearms."""
        store.catalog.add_card(make_card("Hand Cannon", CardType.SIDEARM, id="cannon"))
        store.catalog.add_card(make_card("Crossbow", CardType.SIDEARM, id="crossbow"))
        for card_id in ("pistol", "gunner", "cannon", "crossbow", "ace-driver"):
            assert store.add_to_deck(card_id).allowed

        names = [c.name for c in store.cards_in_area(CardArea.CREW)]

        assert names == ["Ace", "Gunner Gus", "Hand Cannon", "Crossbow", "Pistol"]
        assert [c.name for c in store.deck.cards][0] == "Pistol"

    def test_reorder_unknown(self, store: DeckStore) -> None:
        assert not store.reorder_card_in_area("missing", 0)

    def test_damage_clamped(self, store: DeckStore) -> None:
        """Damage stays within 0..9."""
        gun = store.add_to_deck("machine-gun").deck_card

        assert store.update_card_damage(gun.id, 3) == 3
        assert store.update_card_damage(gun.id, 10) == 9
        assert store.update_card_damage(gun.id, -20) == 0
        assert store.update_card_damage("missing", 1) is None


class TestDeckFields:
    def test_numeric_division(self, store: DeckStore) -> None:
        """A numeric division sets limits and armor."""
        assert store.set_division(6)

        deck = store.deck
        assert deck.division == "6"
        assert deck.point_limits == points(24, 6)
        assert deck.armor.front.current == 6
        assert store.add_to_deck("rocket-pod").allowed

    def test_custom_division_keeps_limits(self, store: DeckStore) -> None:
        """Switching to custom keeps the current limits."""
        store.update_point_limits(points(30, 2))

        assert store.set_division("custom")
        assert store.deck.division == "custom"
        assert store.deck.point_limits == points(30, 2)

    @pytest.mark.parametrize("value", ["abc", "0", -1, ""])
    def test_invalid_division(self, store: DeckStore, value) -> None:
        """Invalid divisions are ignored."""
        before = store.deck

        assert not store.set_division(value)
        assert store.deck is before

    def test_name_and_background(self, store: DeckStore) -> None:
        store.update_deck_name("Rust Bucket")
        store.update_deck_background("https://cdn/backgrounds/van.png")

        assert store.deck.name == "Rust Bucket"
        assert store.deck.background_image == "https://cdn/backgrounds/van.png"

    def test_armor_clamped(self, store: DeckStore) -> None:
        """Armor stays between zero and the side's maximum."""
        assert store.update_armor("front", -3) == 1
        assert store.update_armor("front", -3) == 0
        assert store.update_armor("front", 10) == 4
        assert store.deck.armor.back.current == 4

    def test_toggle_on_fire(self, store: DeckStore) -> None:
        assert store.toggle_on_fire("left")
        assert store.deck.armor.left.on_fire
        assert not store.toggle_on_fire("left")

    def test_vehicle_controls(self, store: DeckStore) -> None:
        """Tires and power are clamped; speed is set directly."""
        store.update_vehicle_controls(tires=15, power=-1, speed="R")

        controls = store.deck.vehicle_controls
        assert controls.tires == 10
        assert controls.power == 0
        assert controls.speed == "R"


class TestCatalogCascade:
    def test_remove_from_catalog_cascades(self, store: DeckStore) -> None:
        """Deleting a catalog card removes its instances and refunds them."""
        store.purchase("mines")
        store.add_to_deck("machine-gun")

        removed = store.remove_from_catalog("mines")

        assert len(removed) == 3
        assert "mines" not in store.catalog
        assert [c.origin_id for c in store.deck.cards] == ["machine-gun"]
        assert store.deck.points_used == points(2, 0)

    def test_cascade_refunds_only_charged(self, store: DeckStore) -> None:
        """Uncharged copies are not refunded."""
        store.add_to_deck("mines")
        store.add_to_deck("mines", CardArea.BACK, deduct_cost=False)
        store.add_to_deck("machine-gun")

        store.remove_from_catalog("mines")

        assert store.deck.points_used == points(2, 0)
        check_point_accounting(store.deck)

    def test_remove_unknown_catalog_card(self, store: DeckStore) -> None:
        with pytest.raises(CatalogCardNotFoundError):
            store.remove_from_catalog("missing")

    def test_replace_catalog(self, store: DeckStore, make_card) -> None:
        """Replacing the catalog keeps it sorted."""
        cards = store.replace_catalog([make_card("Gun"), make_card("Ace", CardType.CREW)])

        assert [c.name for c in cards] == ["Ace", "Gun"]
        assert len(store.catalog) == 2


class TestLoadDeck:
    def test_load_deck(self, store: DeckStore) -> None:
        """A loaded deck becomes the deck being edited."""
        other = store.deck.model_copy(update={"name": "Loaded"})

        store.load_deck(other)

        assert store.deck.name == "Loaded"

    def test_verify_rejects_bad_accounting(self, store: DeckStore) -> None:
        """Verification catches points that disagree with the cards."""
        store.add_to_deck("machine-gun")
        broken = store.deck.model_copy(update={"points_used": points(5, 0)})

        with pytest.raises(DeckInvariantError):
            store.load_deck(broken, verify=True)
