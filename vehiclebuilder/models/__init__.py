from vehiclebuilder.models.card import (
    CARD_TYPE_CATEGORIES,
    Card,
    CardArea,
    CardType,
    DeckCard,
    PointCategory,
    Position,
    default_area_for_type,
    is_placeholder_image,
)
from vehiclebuilder.models.deck import (
    CUSTOM_DIVISION,
    ArmorSide,
    ArmorValues,
    Deck,
    PointTotals,
    VehicleControls,
    point_limits_for_division,
)
from vehiclebuilder.models.failure import (
    CatalogCardNotFoundError,
    CatalogImportError,
    DeckInvariantError,
    DuplicateCatalogCardError,
    FailureKind,
    KnownError,
    VehicleNotFoundError,
)
from vehiclebuilder.models.saved_vehicle import SavedVehicleInfo, vehicle_storage_key
from vehiclebuilder.models.validation import (
    ALLOWED,
    Allowed,
    CardNotFound,
    CrewLimitReached,
    Denial,
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
    Placed,
    Reason,
    SameSubtype,
    StructureLimitReached,
    ValidationResult,
    WeaponCostLimit,
)

__all__ = [
    "ALLOWED",
    "CARD_TYPE_CATEGORIES",
    "CUSTOM_DIVISION",
    "Allowed",
    "ArmorSide",
    "ArmorValues",
    "Card",
    "CardArea",
    "CardNotFound",
    "CardType",
    "CatalogCardNotFoundError",
    "CatalogImportError",
    "CrewLimitReached",
    "Deck",
    "DeckCard",
    "DeckInvariantError",
    "DuplicateCatalogCardError",
    "Denial",
    "DuplicateAccessory",
    "DuplicateGear",
    "DuplicateSidearm",
    "DuplicateUpgrade",
    "ExclusiveLimitReached",
    "FailureKind",
    "HasDependentCards",
    "InvalidArea",
    "InvalidSide",
    "KnownError",
    "MissingPrerequisite",
    "NoFreeCopies",
    "NotEnoughPoints",
    "NumberAllowedWarning",
    "Placed",
    "PointCategory",
    "PointTotals",
    "Position",
    "Reason",
    "SameSubtype",
    "SavedVehicleInfo",
    "StructureLimitReached",
    "ValidationResult",
    "VehicleControls",
    "VehicleNotFoundError",
    "WeaponCostLimit",
    "default_area_for_type",
    "is_placeholder_image",
    "point_limits_for_division",
    "vehicle_storage_key",
]
