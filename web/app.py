"""Flask web app for browsing the in-stock catalog.

Renders the built rows as a filterable, searchable, sortable table or card
grid. All filtering happens server-side from the immutable loaded catalog;
the page is a projection of the current ``ViewState``.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, make_response, render_template, request, url_for

from web.config import CATALOG_DATA_DIR, FLASK_DEBUG, FLASK_HOST, FLASK_PORT, PREFERENCE_MAX_AGE
from web.engine import SORT_KEYS
from web.loader import CatalogLoadError, load_catalog
from web.logging_utils import log_interaction
from web.state import (
    VIEWS,
    CatalogController,
    PreferenceStore,
    ViewState,
    state_from_query,
    state_to_query,
    toggle_sort,
)

app = Flask(__name__)
app.config.setdefault("CATALOG_SOURCE", CATALOG_DATA_DIR)

_controller: Optional[CatalogController] = None


def get_controller() -> CatalogController:
    """Load the catalog once; a failed load is retried on the next request."""
    global _controller
    if _controller is None:
        source = app.config["CATALOG_SOURCE"]
        catalog = load_catalog(source)
        log_interaction("catalog_loaded", {"source": source, "rows": len(catalog.rows)})
        _controller = CatalogController(catalog)
    return _controller


def reset_controller() -> None:
    global _controller
    _controller = None


def _request_state() -> ViewState:
    # Last value wins so a checkbox can override its hidden default
    args = {key: request.args.getlist(key)[-1] for key in request.args}
    prefs = PreferenceStore(request.cookies).load()
    return state_from_query(args, prefs)


def _persist_preferences(response: Response, state: ViewState) -> Response:
    for key, value in PreferenceStore.dump(state.filters).items():
        response.set_cookie(key, value, max_age=PREFERENCE_MAX_AGE, samesite="Lax")
    return response


def format_built_at(built_at: Optional[str]) -> Optional[str]:
    """Human-readable build time, e.g. "Mar 15, 2024, 09:30"; None if unparseable."""
    if not built_at:
        return None
    text = built_at[:-1] + "+00:00" if built_at.endswith("Z") else built_at
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed.strftime("%b %d, %Y, %H:%M")


def _page_links(state: ViewState) -> Dict[str, Any]:
    return {
        "sort": {key: url_for("index", **state_to_query(toggle_sort(state, key))) for key in SORT_KEYS},
        "views": {
            view: url_for("index", **state_to_query(ViewState(state.filters, state.sort_key, state.ascending, view)))
            for view in VIEWS
        },
    }


@app.route("/", methods=["GET"])
def index():
    """Render the catalog page for the current filters and sort order."""
    state = _request_state()
    try:
        controller = get_controller()
    except CatalogLoadError as e:
        log_interaction("catalog_load_error", {"error": str(e)})
        return render_template("index.html", error=str(e), state=state), 503

    rows = controller.update(state)
    html = render_template(
        "index.html",
        error=None,
        state=state,
        rows=rows,
        talents=controller.talent_options(),
        built_at=format_built_at(controller.catalog.built_at),
        links=_page_links(state),
    )
    return _persist_preferences(make_response(html), state)


@app.route("/api/items", methods=["GET"])
def api_items():
    """Filtered, sorted rows as JSON for the current query."""
    state = _request_state()
    try:
        controller = get_controller()
    except CatalogLoadError as e:
        log_interaction("catalog_load_error", {"error": str(e)})
        return jsonify({"error": f"Failed to load data: {e}"}), 503

    rows = controller.visible(state)
    log_interaction("items_query", {"query": state_to_query(state), "count": len(rows)})
    response = jsonify({
        "count": len(rows),
        "builtAt": controller.catalog.built_at,
        "query": state_to_query(state),
        "items": [row.to_dict() for row in rows],
    })
    return _persist_preferences(response, state)


if __name__ == "__main__":
    app.run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG)
