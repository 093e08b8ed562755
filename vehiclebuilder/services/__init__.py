"""
VehicleBuilder services.

Placement rules, card ordering, the catalog and the deck store.
"""

from vehiclebuilder.services.card_sorting import (
    compare_cards,
    compare_crew_area,
    sort_cards,
    sort_crew_area,
)
from vehiclebuilder.services.card_validation import (
    can_card_type_go_in_area,
    can_remove_from_deck,
    check_number_allowed_warning,
    validate_card_for_deck,
    validate_card_movement,
    validate_card_side_placement,
    validate_free_copy,
)
from vehiclebuilder.services.catalog import Catalog
from vehiclebuilder.services.deck_store import DeckStore, check_point_accounting
from vehiclebuilder.services.messages import describe_denial, describe_number_allowed

__all__ = [
    "Catalog",
    "DeckStore",
    "can_card_type_go_in_area",
    "can_remove_from_deck",
    "check_number_allowed_warning",
    "check_point_accounting",
    "compare_cards",
    "compare_crew_area",
    "describe_denial",
    "describe_number_allowed",
    "sort_cards",
    "sort_crew_area",
    "validate_card_for_deck",
    "validate_card_movement",
    "validate_card_side_placement",
    "validate_free_copy",
]
