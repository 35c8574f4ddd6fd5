"""Game settings loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Fish Tycoon configuration from .env file."""

    data_dir: Path = Path("data")
    save_key: str = "fishingTycoonSave"

    # Offline backfill
    offline_enabled: bool = True
    offline_max_hours: float = 12.0
    offline_efficiency: float = 0.8  # 80% of the online auto-fishing rate
    offline_min_elapsed_ms: int = 60_000
    offline_inventory_cap: int = 1000

    # Periodic timers (seconds)
    auto_fish_interval: float = 5.0
    auto_sell_interval: float = 30.0
    season_length: float = 600.0

    # Catch action phases (seconds, before efficiency)
    cast_delay: float = 0.5
    splash_delay: float = 1.0
    reel_delay: float = 0.5
    settle_delay: float = 0.5

    skills_enabled: bool = True

    model_config = {"env_prefix": "FISHTYCOON_", "env_file": ".env"}


def load_settings() -> Settings:
    """Load and return game settings."""
    return Settings()
