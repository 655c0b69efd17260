"""Tests for ingestion of raw catalog documents."""

import pytest

from catalog.models import CatalogFormatError, CatalogProduct, Row, Variant, load_catalog_document


class TestLoadCatalogDocument:

    def test_parses_items(self, catalog_document):
        products = load_catalog_document(catalog_document)
        assert [p.id for p in products] == ["p1", "p2", "p3", "p4"]

    @pytest.mark.parametrize("document", [
        {},
        {"data": None},
        {"data": {"items": "nope"}},
        [],
        None,
    ])
    def test_rejects_documents_without_items_array(self, document):
        with pytest.raises(CatalogFormatError):
            load_catalog_document(document)

    def test_skips_non_object_items(self):
        products = load_catalog_document({"data": {"items": [{"id": 1}, "junk", 3]}})
        assert len(products) == 1
        assert products[0].id == "1"


class TestMalformedFieldsDegrade:

    def test_empty_product(self):
        product = CatalogProduct.from_dict({})
        assert product.title == ""
        assert product.vendor == ""
        assert product.tags == []
        assert product.variants == []
        assert product.date is None

    def test_wrong_types_become_defaults(self):
        product = CatalogProduct.from_dict({
            "title": None,
            "tags": "not-a-list",
            "options": [{"name": "Size", "values": "S"}, "junk"],
            "variants": [{"price": "12.5", "available": True, "options": ["x", 1]}],
            "images": [{"url": 5}],
        })
        assert product.title == ""
        assert product.tags == []
        assert product.options[0].values == []
        assert len(product.options) == 1
        variant = product.variants[0]
        assert variant.price == 12.5
        assert variant.available is None  # booleans are not counts
        assert variant.options == [-1, 1]
        assert product.images[0].url is None

    def test_raw_document_is_kept(self, product_factory):
        raw = product_factory()
        assert CatalogProduct.from_dict(raw).raw is raw

    def test_variant_reads_image_index(self):
        assert Variant.from_dict({"imageIndex": 2}).image_index == 2


class TestRowSerialization:

    def test_optional_fields_omitted_when_absent(self):
        row = Row(title="T", item="—", price="$1", stock=None, stock_display="Unlimited")
        data = row.to_dict()
        assert data["stock"] is None
        assert data["stockDisplay"] == "Unlimited"
        for key in ("imageUrl", "productUrl", "date", "dateRaw"):
            assert key not in data

    def test_from_dict_reads_wire_shape(self):
        data = {
            "title": "T",
            "item": "S / Red",
            "price": "$3,000",
            "stock": 4,
            "stockDisplay": "4",
            "talent": "Gawr Gura",
            "itemType": "グッズ",
            "date": "2024-03-15",
            "dateRaw": "2024-03-15T00:00:00Z",
            "isDigital": False,
            "isPreorder": True,
            "isMadeToOrder": False,
        }
        row = Row.from_dict(data)
        assert row.stock == 4
        assert row.is_preorder is True
        assert row.to_dict() == data

    def test_from_dict_defaults(self):
        row = Row.from_dict({})
        assert row.title == "—"
        assert row.talent == "—"
        assert row.stock is None
        assert row.is_digital is False
