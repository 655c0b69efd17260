"""Shared fixtures for the catalog pipeline tests."""

import json
from typing import Any, Dict, List, Optional

import pytest

from catalog.stock import UNLIMITED_SENTINEL


def make_variant(
    variant_id: str = "v1",
    price: Any = 3000,
    available: Any = 5,
    options: Optional[List[int]] = None,
    image_index: Optional[int] = None,
) -> Dict[str, Any]:
    variant: Dict[str, Any] = {
        "id": variant_id,
        "price": price,
        "available": available,
        "options": [0] if options is None else options,
    }
    if image_index is not None:
        variant["imageIndex"] = image_index
    return variant


def make_product(
    product_id: str = "p1",
    title: str = "Birthday Celebration 2024",
    vendor: str = "Houshou Marine",
    tags: Optional[List[str]] = None,
    options: Optional[List[Dict[str, Any]]] = None,
    variants: Optional[List[Dict[str, Any]]] = None,
    images: Optional[List[Dict[str, Any]]] = None,
    date: Optional[str] = "2024-03-15T00:00:00Z",
    url_name: str = "birthday-2024",
) -> Dict[str, Any]:
    return {
        "id": product_id,
        "title": title,
        "vendor": vendor,
        "urlName": url_name,
        "tags": tags or [],
        "options": options if options is not None else [{"name": "Type", "values": ["グッズ"]}],
        "variants": variants if variants is not None else [make_variant()],
        "images": images if images is not None else [{"url": "//cdn.example.com/a.jpg"}],
        "date": date,
    }


@pytest.fixture
def catalog_document():
    """A small catalog with in-stock, unlimited, free and sold-out products."""
    return {
        "meta": {"source": "test"},
        "data": {
            "total": 4,
            "items": [
                make_product("p1", title="Acrylic Stand", variants=[make_variant("v1", 1500, 3)]),
                make_product(
                    "p2",
                    title="Voice Pack",
                    vendor="hololive production official shop",
                    tags=["Talent_宝鐘マリン", "先行発送"],
                    options=[{"name": "Type", "values": ["ボイス"]}],
                    variants=[make_variant("v2", 2000, UNLIMITED_SENTINEL)],
                ),
                make_product("p3", title="Sample", variants=[make_variant("v3", 0, 10)]),
                make_product("p4", title="Sold Out", variants=[make_variant("v4", 1000, 0)]),
            ],
        },
    }


@pytest.fixture
def catalog_file(tmp_path, catalog_document):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_document, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def product_factory():
    """Build raw product dicts shaped like the search API's items."""
    return make_product


@pytest.fixture
def variant_factory():
    return make_variant
