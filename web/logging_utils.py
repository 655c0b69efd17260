"""Logging utilities for the catalog browser.

Provides structured JSONL logging for catalog loads and queries.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

__all__ = ["log_interaction", "LOG_DIR"]

LOG_DIR = Path(__file__).parent / "logs"


def _log_file() -> Path:
    return LOG_DIR / f"browser_{datetime.now().strftime('%Y%m%d')}.jsonl"


def log_interaction(event_type: str, data: Dict[str, Any]) -> None:
    """Append a structured event to the day's JSONL file.

    Args:
        event_type: Type of event (catalog_loaded, catalog_load_error, items_query, etc.)
        data: Event-specific data to log
    """
    LOG_DIR.mkdir(exist_ok=True)
    log_entry = {"timestamp": datetime.now().isoformat(), "event_type": event_type, **data}
    with open(_log_file(), "a", encoding="utf-8") as f:
        f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
