"""Shop catalog pipeline: fetch, classify and flatten products into rows."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from catalog.config import CATALOG_PATH, IN_STOCK_PATH, ITEMS_PATH
from catalog.export import export_rows
from catalog.models import CatalogFormatError, CatalogProduct, Row, Variant, load_catalog_document
from catalog.rows import build_all_rows, build_rows
from catalog.stock import UNLIMITED_SENTINEL, analyze_stock, is_orderable
from catalog.talent import TALENT_JP_TO_EN, build_search_terms, resolve_talent
from catalog.workflows import build_workflow, fetch_workflow

__all__ = [
    # Version
    "__version__",
    # Config
    "CATALOG_PATH",
    "IN_STOCK_PATH",
    "ITEMS_PATH",
    # Models
    "CatalogFormatError",
    "CatalogProduct",
    "Row",
    "Variant",
    "load_catalog_document",
    # Core functions
    "UNLIMITED_SENTINEL",
    "is_orderable",
    "analyze_stock",
    "build_rows",
    "build_all_rows",
    "TALENT_JP_TO_EN",
    "resolve_talent",
    "build_search_terms",
    "export_rows",
    "fetch_workflow",
    "build_workflow",
]
