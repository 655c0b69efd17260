"""Centralized configuration for the catalog browser."""

import os
from pathlib import Path

from dotenv import load_dotenv

_THIS_DIR = Path(__file__).parent
_PROJECT_ROOT = _THIS_DIR.parent

load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# Where the built artifacts live: a directory or an http(s) base URL
CATALOG_DATA_DIR = os.getenv("CATALOG_DATA_DIR", str(_PROJECT_ROOT / "data"))
ITEMS_FILENAME = "items.json"
REQUEST_TIMEOUT = int(os.getenv("CATALOG_REQUEST_TIMEOUT", "10"))

# Flask app settings (allow env overrides; default debug off for safety)
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"

# Coalescing window for rapid filter edits (seconds)
DEBOUNCE_SECONDS = float(os.getenv("DEBOUNCE_SECONDS", "0.2"))

# Lifetime of the persisted exclusion toggles (one year)
PREFERENCE_MAX_AGE = 60 * 60 * 24 * 365
