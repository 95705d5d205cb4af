"""Configuration module for constants, scheduling windows, and settings."""

from pathlib import Path
from typing import Dict, Optional, Tuple
from pydantic_settings import BaseSettings


# Route network - every flight and weather event refers to one of these
ROUTES = ["KAUS–KGTU", "KAUS–KHYI", "KAUS–KEDC", "KAUS–KATT"]

# Operating day (hours, half-open [start, end))
DAY_START_HOUR = 8
DAY_END_HOUR = 17
FLIGHT_DURATION_HOURS = 1

STUDENT_LEVELS = ["beginner", "intermediate", "advanced"]

# Student preference -> hour window, half-open [start, end)
PREFERRED_TIME_WINDOWS: Dict[str, Tuple[int, int]] = {
    "morning": (8, 11),
    "noon": (11, 14),
    "afternoon": (14, 17),
}
DEFAULT_TIME_WINDOW: Tuple[int, int] = (DAY_START_HOUR, DAY_END_HOUR)

# Alerts returned on read
ALERT_LIMIT = 50

# Weather simulation picks this many routes when none are given
MIN_WEATHER_ROUTES = 2
MAX_WEATHER_ROUTES = 3

# Upper bounds for a single clock advance and a single weather event
MAX_ADVANCE_MINUTES = 366 * 24 * 60
MAX_WEATHER_HOURS = 7 * 24

DATA_DIR = Path(__file__).parent / "data"


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    # Background tick
    TICK_INTERVAL_SECONDS: float = 10.0
    TICK_ADVANCE_MINUTES: int = 10
    AUTO_TICK: bool = False

    # Board maintenance
    RETENTION_HOURS: int = 2
    BACKFILL_RATIO: float = 1.0
    BACKFILL_CAP: int = 5
    BACKFILL_HORIZON_DAYS: int = 3
    BACKFILL_MAX_ATTEMPTS: int = 50

    # Rescheduling
    SLOT_HORIZON_DAYS: int = 7

    # Seeding
    SEED_FLIGHT_COUNT: int = 40
    RANDOM_SEED: Optional[int] = None
    DATA_DIR: Path = DATA_DIR

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "simulation.log"
    TICK_JOURNAL_FILE: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }
