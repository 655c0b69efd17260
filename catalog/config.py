"""Configuration and constants for the catalog pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

__all__ = [
    "SEARCH_URL",
    "INFO_URL",
    "PRODUCT_BASE",
    "API_KEY",
    "COLLECTION",
    "TAKE",
    "HEADERS",
    "REQUEST_TIMEOUT",
    "PAGES_PER_PAUSE",
    "PAGE_DELAY",
    "INFO_CHECKS_PER_PAUSE",
    "INFO_DELAY",
    "MAX_RETRIES",
    "RETRY_BACKOFF_BASE",
    "MAX_RETRY_BACKOFF",
    "RETRY_STATUS_CODES",
    "DATA_DIR",
    "CATALOG_PATH",
    "IN_STOCK_PATH",
    "ITEMS_PATH",
    "TALENT_MAP_FILENAME",
    "SEARCH_TERMS_FILENAME",
]

_PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# Remote endpoints
SEARCH_URL = "https://svc-3-usf.hotyon.com/search"
INFO_URL = "https://d2z3u0bdyw6j8v.cloudfront.net/info"
PRODUCT_BASE = "https://shop.hololivepro.com/en/products/"

# Search API parameters
API_KEY = os.getenv("API_KEY", "f3982e4c-9b6a-407a-b368-0fcd0b21961b")
COLLECTION = os.getenv("CATALOG_COLLECTION", "432790438108")
TAKE = 100  # page size; the API may cap at its own max

HEADERS = {
    "accept-language": "en-US,en;q=0.9",
}

REQUEST_TIMEOUT = 15

# Courtesy pauses between sequential requests (seconds)
PAGES_PER_PAUSE = 10
PAGE_DELAY = 0.5
INFO_CHECKS_PER_PAUSE = 25
INFO_DELAY = 0.1

# Retry settings with exponential backoff
MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2.0
MAX_RETRY_BACKOFF = 30.0
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

# Output paths
DATA_DIR = _PROJECT_ROOT / "data"
CATALOG_PATH = DATA_DIR / "catalog.json"
IN_STOCK_PATH = DATA_DIR / "catalog-in-stock.json"
ITEMS_PATH = DATA_DIR / "items.json"
TALENT_MAP_FILENAME = "talent-jp-to-en.json"
SEARCH_TERMS_FILENAME = "talent-search-terms.json"
