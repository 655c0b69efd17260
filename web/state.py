"""Application state for the catalog browser.

``ViewState`` is the single value describing what the user is looking at.
It round-trips through URL query parameters, its exclusion toggles are
persisted through a ``PreferenceStore``, and ``CatalogController`` owns the
loaded catalog and turns a state into the visible rows.
"""

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from catalog.models import Row

from web.config import DEBOUNCE_SECONDS
from web.engine import (
    DEFAULT_ASCENDING,
    DEFAULT_SORT_KEY,
    SORT_KEYS,
    FilterState,
    filter_rows,
    sort_rows,
    talent_options,
)
from web.loader import Catalog

__all__ = [
    "VIEWS",
    "PREF_KEYS",
    "ViewState",
    "parse_flag",
    "state_from_query",
    "state_to_query",
    "toggle_sort",
    "PreferenceStore",
    "Debouncer",
    "CatalogController",
]

VIEWS = ("table", "cards")

# FilterState field -> persisted preference key
PREF_KEYS: Dict[str, str] = {
    "exclude_digital": "excludeDigital",
    "exclude_preorder": "excludePreorder",
    "exclude_made_to_order": "excludeMadeToOrder",
}

# FilterState field -> URL parameter; the parameter says whether the
# category is shown, so "digital=0" hides digital items
_QUERY_FLAGS: Dict[str, str] = {
    "exclude_digital": "digital",
    "exclude_preorder": "preorder",
    "exclude_made_to_order": "madeToOrder",
}


@dataclass(frozen=True)
class ViewState:
    filters: FilterState = field(default_factory=FilterState)
    sort_key: str = DEFAULT_SORT_KEY
    ascending: bool = DEFAULT_ASCENDING
    view: str = "table"


def parse_flag(value: Any) -> Optional[bool]:
    """Parse a persisted or URL boolean; None for anything unrecognized."""
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    if text in ("1", "true"):
        return True
    if text in ("0", "false"):
        return False
    return None


def state_from_query(
    args: Mapping[str, str],
    prefs: Optional[Mapping[str, bool]] = None,
) -> ViewState:
    """Build a state from query parameters, falling back to saved toggles.

    Args:
        args: Query parameters (``q``, ``talent``, ``digital``, ``preorder``,
            ``madeToOrder``, ``sort``, ``dir``, ``view``)
        prefs: Saved toggles keyed by FilterState field name
    """
    prefs = prefs or {}
    toggles: Dict[str, bool] = {}
    for attr, param in _QUERY_FLAGS.items():
        shown = parse_flag(args.get(param))
        if shown is not None:
            toggles[attr] = not shown
        else:
            toggles[attr] = bool(prefs.get(attr, False))

    filters = FilterState(
        talent=(args.get("talent") or "").strip(),
        search_query=(args.get("q") or "").strip(),
        **toggles,
    )

    sort_key = args.get("sort") or DEFAULT_SORT_KEY
    if sort_key not in SORT_KEYS:
        sort_key = DEFAULT_SORT_KEY
    direction = (args.get("dir") or "").lower()
    ascending = DEFAULT_ASCENDING if direction not in ("asc", "desc") else direction == "asc"
    view = args.get("view") if args.get("view") in VIEWS else VIEWS[0]

    return ViewState(filters=filters, sort_key=sort_key, ascending=ascending, view=view)


def state_to_query(state: ViewState) -> Dict[str, str]:
    """Query parameters for a state, omitting defaults."""
    query: Dict[str, str] = {}
    if state.filters.search_query:
        query["q"] = state.filters.search_query
    if state.filters.talent:
        query["talent"] = state.filters.talent
    for attr, param in _QUERY_FLAGS.items():
        if getattr(state.filters, attr):
            query[param] = "0"
    if state.sort_key != DEFAULT_SORT_KEY or state.ascending != DEFAULT_ASCENDING:
        query["sort"] = state.sort_key
        query["dir"] = "asc" if state.ascending else "desc"
    if state.view != VIEWS[0]:
        query["view"] = state.view
    return query


def toggle_sort(state: ViewState, key: str) -> ViewState:
    """Clicking the current sort column flips direction; a new column sorts ascending."""
    if state.sort_key == key:
        return replace(state, ascending=not state.ascending)
    return replace(state, sort_key=key, ascending=True)


class PreferenceStore:
    """Exclusion toggles persisted in a string key-value store.

    In the web app the store is the request's cookies; corrupt values are
    ignored so the default behaviour applies.
    """

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values = values or {}

    def load(self) -> Dict[str, bool]:
        prefs: Dict[str, bool] = {}
        for attr, key in PREF_KEYS.items():
            parsed = parse_flag(self._values.get(key))
            if parsed is not None:
                prefs[attr] = parsed
        return prefs

    @staticmethod
    def dump(filters: FilterState) -> Dict[str, str]:
        return {key: "1" if getattr(filters, attr) else "0" for attr, key in PREF_KEYS.items()}


class Debouncer:
    """Coalesce rapid calls so only the last one runs after a quiet period.

    At most one pending timer exists; each ``submit`` cancels and replaces it
    under a lock, and a timer that fires after being replaced does nothing.
    """

    def __init__(self, delay: float = DEBOUNCE_SECONDS, timer_factory=threading.Timer):
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: Optional[Tuple[Any, Callable[[], None]]] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def submit(self, fn: Callable[[], None]) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending[0].cancel()
            timer = self._timer_factory(self.delay, self._fire)
            timer.daemon = True
            self._pending = (timer, fn)
            # Pass the token so a stale timer can recognize itself
            timer.args = (timer,)
            timer.start()

    def _fire(self, token: Any) -> None:
        with self._lock:
            if self._pending is None or self._pending[0] is not token:
                return
            _, fn = self._pending
            self._pending = None
        fn()

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending[0].cancel()
            self._pending = None

    def flush(self) -> None:
        """Run the pending call now instead of waiting for its timer."""
        with self._lock:
            if self._pending is None:
                return
            timer, fn = self._pending
            timer.cancel()
            self._pending = None
        fn()


class CatalogController:
    """Owns the loaded catalog and the current view state."""

    def __init__(self, catalog: Catalog, debounce_seconds: float = DEBOUNCE_SECONDS):
        self.catalog = catalog
        self.state = ViewState()
        self._debouncer = Debouncer(debounce_seconds)
        self._talents: Optional[List[str]] = None

    def visible(self, state: Optional[ViewState] = None) -> List[Row]:
        """Rows for a state: filtered, then sorted. Pure given the catalog."""
        state = state or self.state
        rows = filter_rows(self.catalog.rows, state.filters, self.catalog.search_terms)
        return sort_rows(rows, state.sort_key, state.ascending)

    def talent_options(self) -> List[str]:
        if self._talents is None:
            self._talents = talent_options(self.catalog.rows)
        return self._talents

    def update(self, state: ViewState) -> List[Row]:
        self.state = state
        return self.visible(state)

    def request_update(self, state: ViewState, callback: Callable[[List[Row]], None]) -> None:
        """Debounced ``update``; only the last state in a burst is computed."""
        self._debouncer.submit(lambda: callback(self.update(state)))

    def flush(self) -> None:
        self._debouncer.flush()

    def cancel_pending(self) -> None:
        self._debouncer.cancel()
