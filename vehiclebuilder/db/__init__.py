from vehiclebuilder.db.database import init_db, session_scope
from vehiclebuilder.db.operations import (
    add_catalog_card,
    catalog_card_to_model,
    clear_catalog,
    count_catalog_cards,
    delete_catalog_card,
    delete_vehicle,
    get_catalog_card,
    list_saved_vehicles,
    load_catalog,
    load_vehicle,
    save_catalog,
    save_vehicle,
    update_catalog_card,
)

__all__ = [
    "add_catalog_card",
    "catalog_card_to_model",
    "clear_catalog",
    "count_catalog_cards",
    "delete_catalog_card",
    "delete_vehicle",
    "get_catalog_card",
    "init_db",
    "list_saved_vehicles",
    "load_catalog",
    "load_vehicle",
    "save_catalog",
    "save_vehicle",
    "session_scope",
    "update_catalog_card",
]
