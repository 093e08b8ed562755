from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class SavedVehicleInfo:
    """
    Listing entry for a saved vehicle.

    Attributes:
        name: Vehicle name
        division: Division the vehicle was built for ("unknown" if unset)
        last_saved: When the vehicle was last written
        storage_key: Lookup key, lower-cased "name:division"
    """

    name: str
    division: str
    last_saved: datetime
    storage_key: str


def vehicle_storage_key(name: str, division: str) -> str:
    """Key under which a vehicle is saved; same name and division overwrite."""
    return f"{name}:{division or 'unknown'}".lower()
