"""Filter, search and sort over the loaded catalog rows.

Every function here is pure: the same rows and settings always produce the
same ordered result, and input lists are never mutated.
"""

import locale
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from catalog.models import Row
from catalog.talent import UNKNOWN_TALENT

__all__ = [
    "FilterState",
    "SORT_KEYS",
    "DEFAULT_SORT_KEY",
    "DEFAULT_ASCENDING",
    "has_cjk",
    "text_contains",
    "terms_for_talent",
    "matches_talent",
    "looks_digital",
    "looks_made_to_order",
    "matches_search",
    "row_matches",
    "filter_rows",
    "parse_price",
    "parse_timestamp",
    "sort_rows",
    "talent_options",
]

SORT_KEYS = ("title", "item", "price", "stock", "date", "talent")
DEFAULT_SORT_KEY = "date"
DEFAULT_ASCENDING = False

# Hiragana, katakana, CJK ideographs and punctuation, half/full-width forms, Hangul
_CJK_RE = re.compile(
    "[　-〿぀-ゟ゠-ヿ㐀-䶿一-鿿"
    "豈-﫿＀-￯가-힯]"
)

# Looser than the build-time classifier; catches plurals and audiobook spellings
_DIGITAL_HINT_RE = re.compile(
    r"\b(?:voices?|asmr|audio\s*books?|audiobooks?)\b|ボイス|オーディオブック|音声",
    re.IGNORECASE,
)
_MADE_TO_ORDER_HINT_RE = re.compile(r"受注生産|made[\s-]to[\s-]order", re.IGNORECASE)


@dataclass(frozen=True)
class FilterState:
    """Interactive predicates; an empty or unset predicate always passes."""

    talent: str = ""
    exclude_digital: bool = False
    exclude_preorder: bool = False
    exclude_made_to_order: bool = False
    search_query: str = ""


def has_cjk(text: str) -> bool:
    return bool(text) and bool(_CJK_RE.search(text))


def text_contains(haystack: Optional[str], needle: str) -> bool:
    """Substring test: exact for CJK needles, case-insensitive otherwise."""
    if not needle:
        return True
    if not haystack:
        return False
    if has_cjk(needle):
        return needle in haystack
    return needle.casefold() in haystack.casefold()


def terms_for_talent(talent: str, search_terms: Optional[Mapping[str, Sequence[str]]]) -> List[str]:
    """Alias terms registered for a talent, looked up case-insensitively."""
    if not search_terms or not talent:
        return []
    terms = search_terms.get(talent)
    if terms is None:
        folded = talent.casefold()
        terms = next((v for k, v in search_terms.items() if k.casefold() == folded), None)
    return [t for t in (terms or []) if t]


def matches_talent(
    row: Row,
    talent: str,
    search_terms: Optional[Mapping[str, Sequence[str]]] = None,
) -> bool:
    """Exact talent match, or any alias term found in the row's item or title."""
    talent = (talent or "").strip()
    if not talent:
        return True
    if (row.talent or "").casefold() == talent.casefold():
        return True
    return any(
        text_contains(row.item, term) or text_contains(row.title, term)
        for term in terms_for_talent(talent, search_terms)
    )


def looks_digital(row: Row) -> bool:
    return bool(_DIGITAL_HINT_RE.search(f"{row.title} {row.item}"))


def looks_made_to_order(row: Row) -> bool:
    return bool(_MADE_TO_ORDER_HINT_RE.search(row.title or ""))


def matches_search(row: Row, query: str) -> bool:
    query = (query or "").strip()
    if not query:
        return True
    return any(text_contains(field, query) for field in (row.title, row.item, row.talent))


def row_matches(
    row: Row,
    state: FilterState,
    search_terms: Optional[Mapping[str, Sequence[str]]] = None,
) -> bool:
    """All predicates of ``state``, combined with AND."""
    if state.exclude_digital and (row.is_digital or looks_digital(row)):
        return False
    if state.exclude_preorder and row.is_preorder:
        return False
    if state.exclude_made_to_order and (row.is_made_to_order or looks_made_to_order(row)):
        return False
    if not matches_talent(row, state.talent, search_terms):
        return False
    return matches_search(row, state.search_query)


def filter_rows(
    rows: Iterable[Row],
    state: FilterState,
    search_terms: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[Row]:
    return [row for row in rows if row_matches(row, state, search_terms)]


def parse_price(price: Optional[str]) -> float:
    """Numeric value of a display price such as "$3,000"; 0 when unparseable."""
    if not price or not isinstance(price, str):
        return 0.0
    digits = re.sub(r"[^0-9.]", "", price)
    try:
        return float(digits)
    except ValueError:
        return 0.0


def parse_timestamp(value: Optional[str]) -> float:
    """POSIX timestamp of an ISO date string; 0 (the epoch) when invalid."""
    if not value or not isinstance(value, str):
        return 0.0
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _text_key(value: Optional[str]) -> str:
    return locale.strxfrm((value or "").casefold())


def _text_field(row: Row, key: str) -> str:
    value = getattr(row, key, "")
    return value if isinstance(value, str) else ""


def _sort_key(key: str):
    if key == "price":
        return lambda row: parse_price(row.price)
    if key == "date":
        return lambda row: parse_timestamp(row.date_raw or row.date)
    if key == "stock":
        return lambda row: math.inf if row.stock is None else float(row.stock)
    return lambda row: _text_key(_text_field(row, key))


def sort_rows(rows: Iterable[Row], key: str = DEFAULT_SORT_KEY, ascending: bool = DEFAULT_ASCENDING) -> List[Row]:
    """Return a new list ordered by ``key``.

    ``price`` and ``date`` compare numerically, ``stock`` treats unlimited
    (None) as larger than any count, and any other key compares text
    case-insensitively.
    """
    return sorted(rows, key=_sort_key(key), reverse=not ascending)


def _title_case(name: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in name.split())


def talent_options(rows: Iterable[Row]) -> List[str]:
    """Distinct talents for the filter dropdown, merged case-insensitively."""
    by_folded: Dict[str, str] = {}
    for row in rows:
        talent = (row.talent or "").strip()
        if not talent or talent == UNKNOWN_TALENT:
            continue
        by_folded.setdefault(talent.casefold(), _title_case(talent))
    return sorted(by_folded.values(), key=_text_key)
