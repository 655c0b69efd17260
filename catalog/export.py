"""Write catalog artifacts: raw catalog, stock splits, rows and lookup maps."""

import html
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from catalog.config import SEARCH_TERMS_FILENAME, TALENT_MAP_FILENAME
from catalog.logging_config import get_logger, log_catalog_event
from catalog.models import CatalogProduct, Row
from catalog.stock import StockReport
from catalog.talent import build_search_terms

__all__ = [
    "write_json",
    "write_catalog",
    "write_stock_split",
    "build_timestamp",
    "export_rows",
    "rows_to_markdown",
    "rows_to_html",
    "write_tables",
]

logger = get_logger("export")

PathLike = Union[str, Path]


def write_json(path: PathLike, payload: Any, indent: int = 2) -> Path:
    """Write JSON as UTF-8, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, ensure_ascii=False)
    log_catalog_event("artifact_written", {"message": f"Wrote: {path}", "path": str(path)})
    return path


def write_catalog(path: PathLike, document: Dict[str, Any]) -> Path:
    return write_json(path, document, indent=4)


def _products_document(products: List[CatalogProduct]) -> Dict[str, Any]:
    return {"data": {"total": len(products), "items": [p.raw for p in products]}}


def write_stock_split(base: PathLike, report: StockReport) -> List[Path]:
    """Write ``<base>-in-stock.json`` and ``<base>-out-of-stock.json``.

    Empty halves are not written.
    """
    base = str(base)
    if base.lower().endswith(".json"):
        base = base[:-5]
    written: List[Path] = []
    if report.in_stock:
        written.append(write_json(f"{base}-in-stock.json", _products_document(report.in_stock)))
    if report.out_of_stock:
        written.append(write_json(f"{base}-out-of-stock.json", _products_document(report.out_of_stock)))
    return written


def build_timestamp() -> str:
    """Build time for ``builtAt``; ``BUILD_TIMESTAMP`` pins it for reproducible builds."""
    pinned = os.getenv("BUILD_TIMESTAMP")
    if pinned:
        return pinned
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_rows(
    rows: List[Row],
    output_path: PathLike,
    name_map: Mapping[str, str],
    built_at: Optional[str] = None,
) -> Dict[str, Path]:
    """Write the browser's three artifacts.

    ``output_path`` receives ``{"items": [...], "builtAt": ...}``; the talent
    name map and search terms are written next to it.
    """
    output_path = Path(output_path)
    directory = output_path.parent

    items_path = write_json(output_path, {
        "items": [row.to_dict() for row in rows],
        "builtAt": built_at or build_timestamp(),
    })
    map_path = write_json(directory / TALENT_MAP_FILENAME, dict(name_map))
    talents_seen = {row.talent for row in rows if row.talent}
    terms_path = write_json(
        directory / SEARCH_TERMS_FILENAME,
        build_search_terms(name_map, sorted(talents_seen)),
    )
    return {"items": items_path, "talent_map": map_path, "search_terms": terms_path}


def _md_cell(value: str) -> str:
    return (value or "—").replace("|", "\\|")


def rows_to_markdown(rows: Iterable[Row]) -> str:
    lines = ["| Title | Item | Price |", "| --- | --- | --- |"]
    for row in rows:
        lines.append(f"| {_md_cell(row.title)} | {_md_cell(row.item)} | {row.price} |")
    return "\n".join(lines) + "\n"


def rows_to_html(rows: Iterable[Row]) -> str:
    body = "\n".join(
        f"  <tr><td>{html.escape(row.title)}</td><td>{html.escape(row.item)}</td>"
        f"<td>{html.escape(row.price)}</td></tr>"
        for row in rows
    )
    return (
        '<!DOCTYPE html>\n<html lang="en">\n'
        '<head><meta charset="utf-8"><title>In-stock items</title>\n'
        "<style>table{border-collapse:collapse}th,td{border:1px solid #ccc;"
        "padding:6px 10px;text-align:left}th{background:#f5f5f5}</style>\n"
        "</head>\n<body>\n<table>\n"
        "<thead><tr><th>Title</th><th>Item</th><th>Price</th></tr></thead>\n"
        f"<tbody>\n{body}\n</tbody>\n</table>\n</body>\n</html>"
    )


def write_tables(rows: List[Row], input_path: PathLike) -> Dict[str, Path]:
    """Write Markdown and HTML tables next to the input catalog.

    ``data/catalog-in-stock.json`` produces ``data/catalog-in-stock-table.md``
    and ``.html``.
    """
    base = str(input_path)
    if base.lower().endswith(".json"):
        base = base[:-5]
    if base.endswith("-in-stock"):
        base = base[: -len("-in-stock")]
    base += "-in-stock-table"

    md_path = Path(base + ".md")
    html_path = Path(base + ".html")
    md_path.parent.mkdir(parents=True, exist_ok=True)
    md_path.write_text(rows_to_markdown(rows), encoding="utf-8")
    html_path.write_text(rows_to_html(rows), encoding="utf-8")
    logger.info(f"Wrote: {md_path}")
    logger.info(f"Wrote: {html_path}")
    return {"markdown": md_path, "html": html_path}
