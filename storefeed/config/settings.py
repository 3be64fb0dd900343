# storefeed/config/settings.py

"""Central configuration for the storefeed catalog core."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the storefeed catalog core."""

    # --- Remote catalog ---
    BASE_URL: str = os.getenv(
        "STOREFEED_BASE_URL", "https://api.escuelajs.co/api/v1"
    )
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out

    # --- Pagination ---
    PAGE_SIZE: int = 10                 # Products per page
    LOOK_AHEAD_THRESHOLD: int = 5       # Rows before the end that trigger a load
    DEBOUNCE_DELAY: float = 0.2         # Seconds to coalesce load-more triggers
    PREFETCH_DELAY: float = 0.3         # Seconds between successive page fetches

    # --- Upstream data quality ---
    # Fixture products the upstream API serves in a broken state
    POISONED_TITLES: frozenset[str] = frozenset({"Co Co CoLa"})
    RATING_RATE_RANGE: tuple[float, float] = (3.0, 5.0)
    RATING_COUNT_RANGE: tuple[int, int] = (10, 500)
    INVALID_CATEGORY_NAMES: frozenset[str] = frozenset({"", "string"})
    INVALID_CATEGORY_MARKER: str = "category_"

    # --- Purchases (simulated) ---
    PURCHASE_DELAY: float = 2.0         # Simulated store latency
    PURCHASE_KEY_PREFIX: str = "purchased_product_"

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    PURCHASES_PATH: Path = DATA_DIR / "purchases.json"
    LOGS_DIR: Path = BASE_DIR / "logs"
