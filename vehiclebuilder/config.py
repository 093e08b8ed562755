from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="VEHICLEBUILDER_")

    app_name: str = "VehicleBuilder"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./vehiclebuilder.db"

    # Division used when a fresh deck is created (4 => 16 BP / 4 CP)
    default_division: int = 4

    # Catalog card (matched by name) placed into every freshly reset deck.
    # Empty disables seeding.
    starter_card_name: str = ""


settings = Settings()


# =============================================================================
# GAME RULE CONSTANTS
# =============================================================================

# Structure cards: one per vehicle side, four in total
MAX_STRUCTURE_CARDS = 4

# Weapons costing this much BP or more need a vehicle of at least
# HIGH_COST_WEAPON_MIN_BUILD_POINTS (Division 6+)
HIGH_COST_WEAPON_THRESHOLD = 6
HIGH_COST_WEAPON_MIN_BUILD_POINTS = 24

# Damage markers on a single card
MAX_CARD_DAMAGE = 9

# Vehicle control dials
MAX_TIRES = 10
MAX_POWER = 10
