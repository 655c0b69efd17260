"""Stock classification for catalog variants.

Availability comes from ``variant.available``:

- ``available > 0``: in stock, value is the quantity on hand
- ``available == 0``: out of stock
- ``available == UNLIMITED_SENTINEL`` (INT_MIN): stock is not tracked, the
  variant is always orderable (unlimited or preorder)
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from catalog.models import CatalogProduct

__all__ = [
    "UNLIMITED_SENTINEL",
    "StockReport",
    "is_orderable",
    "orderable_variants",
    "analyze_stock",
    "filter_paid",
]

UNLIMITED_SENTINEL = -2147483648


def is_orderable(available: Optional[int]) -> bool:
    """Return True if a variant with this availability can be ordered."""
    if available is None:
        return False
    if available == UNLIMITED_SENTINEL:
        return True
    return available > 0


def orderable_variants(product: CatalogProduct):
    return [v for v in product.variants if is_orderable(v.available)]


@dataclass
class StockReport:
    """Products split by whether any of their variants is orderable."""

    in_stock: List[CatalogProduct] = field(default_factory=list)
    out_of_stock: List[CatalogProduct] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.in_stock) + len(self.out_of_stock)

    @property
    def in_stock_count(self) -> int:
        return len(self.in_stock)

    @property
    def out_of_stock_count(self) -> int:
        return len(self.out_of_stock)


def analyze_stock(products: Iterable[CatalogProduct]) -> StockReport:
    """Classify products into in-stock vs out-of-stock."""
    report = StockReport()
    for product in products:
        if orderable_variants(product):
            report.in_stock.append(product)
        else:
            report.out_of_stock.append(product)
    return report


def filter_paid(products: Iterable[CatalogProduct]) -> List[CatalogProduct]:
    """Keep products with at least one orderable variant priced above zero."""
    return [
        p for p in products
        if any((v.price or 0) > 0 for v in orderable_variants(p))
    ]
