# subtrend/config/settings.py

"""Central configuration for the subtrend engine."""

import os
import re
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_REPO_DIR: Path = Path(__file__).resolve().parent.parent.parent


def env_path(name: str, default: Path) -> Path:
    """Directory from environment variable *name*, else *default*."""
    value = os.getenv(name, "").strip()
    return Path(value).expanduser() if value else default


class Settings:
    """Central configuration for the subtrend engine."""

    # --- Trends ---
    BASE_PLAN: str = "individual"       # Plan compared across countries
    TOP_N: int = 10                     # Rows per ranked list
    SERIES_WINDOW: int = 6              # Sparkline points per country

    # --- Caching ---
    PRICES_CACHE_TTL: float = 60.0      # Parsed price files (secs)
    TRENDS_CACHE_TTL: float = 60.0      # Computed trend results (secs)
    CACHE_MAX_SIZE: int = 150           # Entries before LRU eviction

    # --- Validation ---
    SLUG_PATTERN: re.Pattern[str] = re.compile(r"^[a-z0-9-]+$")

    # --- Paths ---
    BASE_DIR: Path = _REPO_DIR
    DATA_DIR: Path = env_path("SUBTREND_DATA_DIR", _REPO_DIR / "data")
    PRICES_DIR: Path = DATA_DIR / "prices"
    HISTORY_DIR: Path = DATA_DIR / "history"
    CHARTS_DIR: Path = DATA_DIR / "charts"
    LOGS_DIR: Path = env_path("SUBTREND_LOGS_DIR", _REPO_DIR / "logs")

    # --- Logging ---
    # Console threshold; the per-run log file always records DEBUG
    LOG_LEVEL: str = os.getenv("SUBTREND_LOG_LEVEL", "WARNING").upper()
