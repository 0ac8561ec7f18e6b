"""Configuration constants for the GoWild scanner"""

import os
from pathlib import Path

# Site configuration
BASE_URL = "https://www.flyfrontier.com"
SITE_DOMAIN = "flyfrontier.com"
LOGIN_URL = f"{BASE_URL}/myfrontier/login"
ACCOUNT_URL = f"{BASE_URL}/myfrontier/my-account"
SEARCH_URL = f"{BASE_URL}/flights"

# Storage locations
DATA_DIR = Path(os.environ.get("GOWILD_DATA_DIR", "./data"))
COOKIES_FILENAME = "cookies.json"
CACHE_DB_FILENAME = "app.db"
DEBUG_DIRNAME = "debug"
DEFAULT_COOKIE_FILE = DATA_DIR / COOKIES_FILENAME
DEFAULT_CACHE_DB = DATA_DIR / CACHE_DB_FILENAME
DEFAULT_DEBUG_DIR = DATA_DIR / DEBUG_DIRNAME

# Session age threshold (in seconds) - advisory only
SESSION_STALE_AGE = 7 * 24 * 60 * 60  # 7 days

# Browser pool
MAX_BROWSERS = 2

# Cache
CACHE_TTL_MINUTES = 45

# Call-site rate limiting
MIN_SCAN_INTERVAL = 10.0  # Seconds between scan batches
BATCH_WAIT_SLACK = 0.05  # Seconds added when sleeping out the interval, covers early timer wakeups

# Timeouts (milliseconds, as Playwright expects)
NAVIGATION_TIMEOUT_MS = 60000
VALIDATION_TIMEOUT_MS = 30000
SELECTOR_TIMEOUT_MS = 5000
SETTLE_DELAY_MS = 3000

# Browser context
VIEWPORT = {"width": 1280, "height": 800}

# Search parameters (fixed: one adult, one-way)
SEARCH_PASSENGERS = {"adults": "1", "children": "0", "infants": "0"}
SEARCH_TRIP_TYPE = "oneway"

# Extraction heuristics
NO_FLIGHTS_MARKERS = (
    "no flights",
    "No flights available",
    "We couldn't find",
)
GO_WILD_MARKERS = (
    "gowild",
    "go wild",
    "$0",
    "pass",
)
# Most specific first
CARD_SELECTORS = (
    '[data-testid="flight-card"]',
    ".flight-card",
    ".flight-result",
    '[class*="flight"]',
    '[class*="FlightCard"]',
    ".departure-flight",
)
DEFAULT_CURRENCY = "USD"
UNKNOWN_TIME = "Unknown"

# Request limits
MAX_ORIGINS = 10
DEFAULT_MAX_DESTINATIONS = 20
MAX_DESTINATIONS_LIMIT = 50

# Login polling (CLI cadence only, the flow itself never polls)
LOGIN_POLL_INTERVAL = 2.0  # Seconds
LOGIN_TIMEOUT = 300  # Seconds
