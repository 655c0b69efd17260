"""Shared test fixtures and utilities for the web test suite."""

import json
from pathlib import Path

import pytest

from catalog.models import Row


def make_row(**overrides) -> Row:
    fields = dict(
        title="Acrylic Stand",
        item="Set",
        price="$1,500",
        stock=3,
        stock_display="3",
        talent="Gawr Gura",
        item_type="グッズ",
        date="2024-03-15",
        date_raw="2024-03-15T00:00:00Z",
    )
    fields.update(overrides)
    return Row(**fields)


@pytest.fixture
def row_factory():
    return make_row


@pytest.fixture
def rows():
    """A mixed catalog: physical, digital, preorder, made-to-order and unknown talent."""
    return [
        make_row(title="Acrylic Stand", talent="Gawr Gura", price="$1,500", stock=3, stock_display="3",
                 date="2024-03-15", date_raw="2024-03-15T00:00:00Z"),
        make_row(title="Birthday Voice 2024", item="ボイス", talent="Houshou Marine", price="$2,000",
                 stock=None, stock_display="Unlimited", is_digital=True,
                 date="2024-05-01", date_raw="2024-05-01T00:00:00Z"),
        make_row(title="Anniversary Hoodie", item="L", talent="houshou marine", price="$12,000",
                 stock=5, stock_display="5", is_preorder=True,
                 date="2024-01-10", date_raw="2024-01-10T00:00:00Z"),
        make_row(title="Custom Figure (受注生産)", item="—", talent="Shirakami Fubuki", price="$30,000",
                 stock=1, stock_display="1", is_made_to_order=True,
                 date="2023-12-01", date_raw="2023-12-01T00:00:00Z"),
        make_row(title="Collab Tapestry", item="マリン ver.", talent="—", price="$3,000",
                 stock=10, stock_display="10", date=None, date_raw=None),
    ]


@pytest.fixture
def search_terms():
    return {
        "Houshou Marine": ["Houshou Marine", "宝鐘マリン", "マリン"],
        "Gawr Gura": ["Gawr Gura", "がうる・ぐら"],
    }


@pytest.fixture
def artifact_dir(tmp_path, rows, search_terms):
    """A directory holding items.json and both lookup maps."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "items.json").write_text(
        json.dumps({"items": [r.to_dict() for r in rows], "builtAt": "2024-06-01T12:30:00.000Z"},
                   ensure_ascii=False),
        encoding="utf-8",
    )
    (directory / "talent-jp-to-en.json").write_text(
        json.dumps({"宝鐘マリン": "Houshou Marine"}, ensure_ascii=False), encoding="utf-8"
    )
    (directory / "talent-search-terms.json").write_text(
        json.dumps(search_terms, ensure_ascii=False), encoding="utf-8"
    )
    return directory


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep JSONL interaction logs out of the source tree."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr("web.logging_utils.LOG_DIR", log_dir)
    return Path(log_dir)
