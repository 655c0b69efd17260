"""Data models for catalog products and the flattened rows built from them.

Raw API documents are loosely typed. Every record here is built through a
``from_dict`` constructor that validates the shape once at the ingestion
boundary; malformed fields fall back to safe defaults instead of raising, so
business logic never needs to probe optional keys.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

__all__ = [
    "CatalogFormatError",
    "ProductOption",
    "ProductImage",
    "Variant",
    "CatalogProduct",
    "Row",
    "load_catalog_document",
]

Number = Union[int, float]


class CatalogFormatError(ValueError):
    """Raised when a catalog document does not have the expected envelope."""
    pass


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_number(value: Any) -> Optional[Number]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


@dataclass(frozen=True)
class ProductOption:
    """One option axis of a product (e.g. "Size") with its ordered values."""

    name: str
    values: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductOption":
        values = [_as_str(v) for v in _as_list(data.get("values"))]
        return cls(name=_as_str(data.get("name")), values=values)

    def value_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.values):
            return self.values[index]
        return None


@dataclass(frozen=True)
class ProductImage:
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductImage":
        url = data.get("url")
        return cls(url=url if isinstance(url, str) and url else None)


@dataclass(frozen=True)
class Variant:
    """A purchasable configuration of a product.

    ``options`` holds one value index per product option, in option order.
    ``available`` is the raw availability integer; see ``catalog.stock``.
    """

    id: Optional[str]
    price: Optional[Number] = None
    available: Optional[int] = None
    options: List[int] = field(default_factory=list)
    image_index: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variant":
        raw_options = data.get("options")
        options: List[int] = []
        if isinstance(raw_options, list):
            for idx in raw_options:
                parsed = _as_int(idx)
                # Keep positions aligned with the product's options
                options.append(parsed if parsed is not None else -1)
        variant_id = data.get("id")
        return cls(
            id=_as_str(variant_id) or None,
            price=_as_number(data.get("price")),
            available=_as_int(data.get("available")),
            options=options,
            image_index=_as_int(data.get("imageIndex")),
        )


@dataclass
class CatalogProduct:
    """Immutable snapshot of one product from the commerce search API."""

    id: Optional[str]
    title: str = ""
    vendor: str = ""
    url_name: str = ""
    tags: List[str] = field(default_factory=list)
    options: List[ProductOption] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    images: List[ProductImage] = field(default_factory=list)
    date: Optional[str] = None

    # Original document, kept so stock splits can be written back verbatim
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogProduct":
        if not isinstance(data, dict):
            data = {}
        date = data.get("date")
        return cls(
            id=_as_str(data.get("id")) or None,
            title=_as_str(data.get("title")),
            vendor=_as_str(data.get("vendor")),
            url_name=_as_str(data.get("urlName")),
            tags=[_as_str(t) for t in _as_list(data.get("tags")) if _as_str(t)],
            options=[ProductOption.from_dict(o) for o in _as_list(data.get("options")) if isinstance(o, dict)],
            variants=[Variant.from_dict(v) for v in _as_list(data.get("variants")) if isinstance(v, dict)],
            images=[ProductImage.from_dict(i) for i in _as_list(data.get("images")) if isinstance(i, dict)],
            date=date if isinstance(date, str) and date else None,
            raw=data,
        )


@dataclass
class Row:
    """One orderable variant, flattened for the catalog browser."""

    title: str
    item: str
    price: str
    stock: Optional[int]
    stock_display: str
    talent: str = "—"
    item_type: str = "—"
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    date: Optional[str] = None
    date_raw: Optional[str] = None
    is_digital: bool = False
    is_preorder: bool = False
    is_made_to_order: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape consumed by the browser."""
        out: Dict[str, Any] = {
            "title": self.title,
            "item": self.item,
            "price": self.price,
            "stock": self.stock,
            "stockDisplay": self.stock_display,
            "imageUrl": self.image_url,
            "productUrl": self.product_url,
            "talent": self.talent,
            "itemType": self.item_type,
            "date": self.date,
            "dateRaw": self.date_raw,
            "isDigital": self.is_digital,
            "isPreorder": self.is_preorder,
            "isMadeToOrder": self.is_made_to_order,
        }
        for optional in ("imageUrl", "productUrl", "date", "dateRaw"):
            if not out[optional]:
                del out[optional]
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Row":
        stock = _as_int(data.get("stock"))
        return cls(
            title=_as_str(data.get("title"), "—"),
            item=_as_str(data.get("item"), "—"),
            price=_as_str(data.get("price"), "—"),
            stock=stock,
            stock_display=_as_str(data.get("stockDisplay"), "Unlimited" if stock is None else str(stock)),
            talent=_as_str(data.get("talent"), "—") or "—",
            item_type=_as_str(data.get("itemType"), "—"),
            image_url=_as_str(data.get("imageUrl")) or None,
            product_url=_as_str(data.get("productUrl")) or None,
            date=_as_str(data.get("date")) or None,
            date_raw=_as_str(data.get("dateRaw")) or None,
            is_digital=data.get("isDigital") is True,
            is_preorder=data.get("isPreorder") is True,
            is_made_to_order=data.get("isMadeToOrder") is True,
        )


def load_catalog_document(document: Any) -> List[CatalogProduct]:
    """Parse a ``{"data": {"items": [...]}}`` document into products.

    Raises:
        CatalogFormatError: If ``data.items`` is missing or not a list
    """
    data = document.get("data") if isinstance(document, dict) else None
    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise CatalogFormatError("Expected data.items array in catalog document")
    return [CatalogProduct.from_dict(item) for item in items if isinstance(item, dict)]
