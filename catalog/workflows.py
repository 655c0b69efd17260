"""High-level pipeline workflows.

Orchestrates the two pipeline steps: fetching the catalog (with a stock
report) and building the browser's row artifacts from a saved catalog.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from catalog.config import CATALOG_PATH, IN_STOCK_PATH
from catalog.export import export_rows, write_catalog, write_stock_split, write_tables
from catalog.fetcher import fetch_full_catalog, filter_physical_only
from catalog.logging_config import get_logger
from catalog.models import CatalogProduct, Row, load_catalog_document
from catalog.rows import build_all_rows
from catalog.shutdown import get_shutdown_handler
from catalog.stock import StockReport, analyze_stock, filter_paid
from catalog.talent import TALENT_JP_TO_EN

__all__ = [
    "load_catalog_file",
    "print_stock_report",
    "fetch_workflow",
    "build_workflow",
]

logger = get_logger("workflows")


def load_catalog_file(path: Path) -> List[CatalogProduct]:
    """Load products from a saved ``{"data": {"items": [...]}}`` file.

    Raises:
        FileNotFoundError: If the file does not exist
        CatalogFormatError: If the document has no ``data.items`` array
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        document = json.load(f)
    return load_catalog_document(document)


def print_stock_report(report: StockReport) -> None:
    print("\n--- Stock report ---")
    print(f"  In stock (orderable): {report.in_stock_count}")
    print(f"  Out of stock:         {report.out_of_stock_count}")
    print(f"  Total products:       {report.total}")


def fetch_workflow(
    output_path: Optional[Path] = None,
    from_file: Optional[Path] = None,
    report_only: bool = False,
) -> StockReport:
    """Fetch (or load) the catalog, save it, and write the stock split.

    Args:
        output_path: Where to save the fetched catalog (default data/catalog.json)
        from_file: Load this catalog file instead of fetching
        report_only: Only print the stock report, write nothing

    Returns:
        The stock report for the loaded products
    """
    if from_file is not None:
        logger.info(f"Loading catalog from {from_file}")
        products = load_catalog_file(from_file)
        logger.info(f"  Loaded {len(products)} items")
        base = Path(output_path) if output_path else Path(from_file)
    else:
        handler = get_shutdown_handler().install()
        try:
            document = fetch_full_catalog()
        finally:
            handler.uninstall()
        products = load_catalog_document(document)
        base = Path(output_path) if output_path else CATALOG_PATH
        if not report_only:
            write_catalog(base, document)

    report = analyze_stock(products)
    print_stock_report(report)
    if not report_only:
        write_stock_split(base, report)
    return report


def build_workflow(
    input_path: Path = IN_STOCK_PATH,
    output_json: Optional[Path] = None,
    physical_only: bool = False,
) -> List[Row]:
    """Build rows from a saved catalog and write tables and browser artifacts.

    Args:
        input_path: Catalog file to read (default data/catalog-in-stock.json)
        output_json: If set, write items JSON plus talent map and search terms here
        physical_only: Drop products whose variants ship downloadable files

    Returns:
        The built rows
    """
    products = load_catalog_file(input_path)

    before = len(products)
    products = filter_paid(products)
    removed = before - len(products)
    if removed:
        logger.info(f"Filtered out {removed} items (0 cost). Remaining: {len(products)}")

    if physical_only:
        logger.info("Filtering to physical-only products")
        products = filter_physical_only(products)

    rows = build_all_rows(products)
    logger.info(f"Building table for {len(rows)} rows (one per variant)")
    write_tables(rows, input_path)

    if output_json is not None:
        written: Dict[str, Any] = export_rows(rows, output_json, TALENT_JP_TO_EN)
        for path in written.values():
            logger.info(f"Wrote: {path}")
    return rows
