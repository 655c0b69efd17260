"""Load the built catalog artifacts for the browser.

The primary ``items.json`` must load; the talent name map and search terms
are optional and their absence only weakens talent matching.
"""

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import requests  # type: ignore[import-untyped]

from catalog.config import SEARCH_TERMS_FILENAME, TALENT_MAP_FILENAME
from catalog.models import Row
from catalog.talent import build_search_terms

from web.config import ITEMS_FILENAME, REQUEST_TIMEOUT

__all__ = ["Catalog", "CatalogLoadError", "load_catalog", "read_artifact"]

logger = logging.getLogger(__name__)


class CatalogLoadError(Exception):
    """Raised when an artifact cannot be fetched or parsed."""
    pass


@dataclass(frozen=True)
class Catalog:
    """Everything the browser needs, read-only for the life of the app."""

    rows: List[Row]
    built_at: Optional[str] = None
    name_map: Dict[str, str] = field(default_factory=dict)
    search_terms: Dict[str, List[str]] = field(default_factory=dict)


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def read_artifact(source: str, name: str) -> Any:
    """Read one JSON artifact from a directory or an HTTP base URL.

    Raises:
        CatalogLoadError: On a missing file, non-success status or invalid JSON
    """
    if _is_url(source):
        url = source.rstrip("/") + "/" + name
        try:
            resp = requests.get(url, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise CatalogLoadError(f"{status} fetching {url}") from e
        except ValueError as e:
            raise CatalogLoadError(f"Invalid JSON in {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise CatalogLoadError(f"Failed to fetch {url}: {e}") from e

    path = Path(source) / name
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CatalogLoadError(f"Missing artifact: {path}") from e
    except (OSError, ValueError) as e:
        raise CatalogLoadError(f"Unreadable artifact {path}: {e}") from e


def _load_optional(source: str, name: str) -> Optional[Dict[str, Any]]:
    try:
        data = read_artifact(source, name)
    except CatalogLoadError as e:
        logger.warning(f"Optional artifact unavailable ({e}); continuing without it")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {name}: expected a JSON object")
        return None
    return data


def _clean_name_map(data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    if not data:
        return {}
    return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}


def _clean_search_terms(data: Optional[Mapping[str, Any]]) -> Dict[str, List[str]]:
    if not data:
        return {}
    terms: Dict[str, List[str]] = {}
    for talent, values in data.items():
        if isinstance(values, list):
            terms[talent] = [v for v in values if isinstance(v, str) and v]
    return terms


def load_catalog(source: str) -> Catalog:
    """Load rows plus lookup maps and normalize row talents.

    Raises:
        CatalogLoadError: If the primary items artifact is unusable
    """
    document = read_artifact(source, ITEMS_FILENAME)
    items = document.get("items") if isinstance(document, dict) else None
    if not isinstance(items, list):
        raise CatalogLoadError(f"{ITEMS_FILENAME} has no items array")

    name_map = _clean_name_map(_load_optional(source, TALENT_MAP_FILENAME))
    rows = []
    for item in items:
        if not isinstance(item, dict):
            continue
        row = Row.from_dict(item)
        if row.talent in name_map:
            row = dataclasses.replace(row, talent=name_map[row.talent])
        rows.append(row)

    search_terms = _clean_search_terms(_load_optional(source, SEARCH_TERMS_FILENAME))
    # Every displayed talent stays matchable by its own name
    for talent, terms in build_search_terms({}, {r.talent for r in rows}).items():
        search_terms.setdefault(talent, terms)

    built_at = document.get("builtAt")
    logger.info(f"Loaded {len(rows)} rows from {source}")
    return Catalog(
        rows=rows,
        built_at=built_at if isinstance(built_at, str) else None,
        name_map=name_map,
        search_terms=search_terms,
    )
