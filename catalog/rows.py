"""Expand catalog products into flat, orderable variant rows."""

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence
from urllib.parse import quote

from catalog.config import PRODUCT_BASE
from catalog.logging_config import get_logger, log_catalog_event
from catalog.models import CatalogProduct, ProductImage, ProductOption, Row, Variant
from catalog.stock import UNLIMITED_SENTINEL, orderable_variants
from catalog.talent import resolve_talent

__all__ = [
    "PLACEHOLDER",
    "LABEL_SEPARATOR",
    "VOICE_ITEM_TYPE",
    "variant_label",
    "item_type",
    "is_old_price_label",
    "is_digital",
    "is_preorder",
    "is_made_to_order",
    "format_price",
    "format_date",
    "resolve_image",
    "product_url",
    "build_rows",
    "build_all_rows",
]

logger = get_logger("rows")

PLACEHOLDER = "—"
LABEL_SEPARATOR = " / "
VOICE_ITEM_TYPE = "ボイス"

_OLD_PRICE_RE = re.compile(r"old\s*price|旧価格", re.IGNORECASE)

# Download variants are labelled "Download / ..." or "ダウンロード / ..."
_DOWNLOAD_LABEL_RE = re.compile(r"^download\s*/|^ダウンロード\s*/", re.IGNORECASE)
_DIGITAL_TEXT_RE = re.compile(
    r"digital\s+contents|\bvoice\b|ボイス|asmr|audio\s*book|オーディオブック",
    re.IGNORECASE,
)

_PREORDER_TAG_RE = re.compile(r"先行発送|pre-?order", re.IGNORECASE)
_MADE_TO_ORDER_TAG_RE = re.compile(r"受注生産|made[\s-]to[\s-]order", re.IGNORECASE)


def variant_label(options: Sequence[ProductOption], variant: Variant) -> str:
    """Join the variant's selected option values, e.g. "Set / Goods"."""
    if not variant.options:
        return PLACEHOLDER
    parts = []
    for option, index in zip(options, variant.options):
        value = option.value_at(index)
        if value:
            parts.append(value)
    return LABEL_SEPARATOR.join(parts) if parts else PLACEHOLDER


def item_type(options: Sequence[ProductOption], variant: Variant) -> str:
    """The first option's selected value, used for digital classification."""
    if not variant.options or not options:
        return PLACEHOLDER
    value = options[0].value_at(variant.options[0])
    return value if value is not None else PLACEHOLDER


def is_old_price_label(label: str) -> bool:
    return bool(label) and bool(_OLD_PRICE_RE.search(label.strip()))


def is_digital(variant_type: str, label: str, title: str = "") -> bool:
    """True for voice packs, downloads, ASMR and other digital contents."""
    if variant_type == VOICE_ITEM_TYPE:
        return True
    label = (label or "").strip()
    if _DOWNLOAD_LABEL_RE.search(label):
        return True
    return bool(_DIGITAL_TEXT_RE.search(f"{title} {label}"))


def is_preorder(tags: Iterable[str]) -> bool:
    return any(_PREORDER_TAG_RE.search(str(t)) for t in tags)


def is_made_to_order(tags: Iterable[str]) -> bool:
    return any(_MADE_TO_ORDER_TAG_RE.search(str(t)) for t in tags)


def format_price(price) -> str:
    """Format a currency-less price as "$3,000" or "$12.5"."""
    if price is None:
        return PLACEHOLDER
    if float(price).is_integer():
        return f"${int(price):,}"
    return "$" + f"{price:,.3f}".rstrip("0").rstrip(".")


def _parse_iso(value: str) -> Optional[datetime]:
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_date(iso_str: Optional[str]) -> Optional[str]:
    """Return the UTC calendar date (YYYY-MM-DD) of an ISO timestamp."""
    if not iso_str or not isinstance(iso_str, str):
        return None
    parsed = _parse_iso(iso_str)
    return parsed.strftime("%Y-%m-%d") if parsed else None


def resolve_image(images: Sequence[ProductImage], image_index: Optional[int]) -> Optional[str]:
    """Pick the variant's image (or the product's first) as an absolute URL."""
    if not images:
        return None
    image = images[0]
    if image_index is not None and 0 <= image_index < len(images):
        image = images[image_index]
    url = image.url or images[0].url
    if url and url.startswith("//"):
        url = "https:" + url
    return url or None


def product_url(url_name: str) -> Optional[str]:
    return PRODUCT_BASE + quote(url_name, safe="") if url_name else None


def _stock_fields(available: Optional[int]):
    if available == UNLIMITED_SENTINEL:
        return None, "Unlimited"
    if available is None:
        return None, PLACEHOLDER
    return available, str(available)


def build_rows(product: CatalogProduct) -> List[Row]:
    """One row per orderable variant with a positive price.

    Variants whose label marks a superseded "old price" tier are skipped.
    """
    title = product.title or PLACEHOLDER
    talent = resolve_talent(product.vendor, product.tags)
    date = format_date(product.date)
    preorder = is_preorder(product.tags)
    made_to_order = is_made_to_order(product.tags)
    link = product_url(product.url_name)

    rows: List[Row] = []
    for variant in orderable_variants(product):
        if (variant.price or 0) <= 0:
            continue
        label = variant_label(product.options, variant)
        if is_old_price_label(label):
            continue
        variant_type = item_type(product.options, variant)
        stock, stock_display = _stock_fields(variant.available)
        rows.append(Row(
            title=title,
            item=label,
            price=format_price(variant.price),
            stock=stock,
            stock_display=stock_display,
            talent=talent,
            item_type=variant_type,
            image_url=resolve_image(product.images, variant.image_index),
            product_url=link,
            date=date,
            date_raw=product.date if date else None,
            is_digital=is_digital(variant_type, label, product.title),
            is_preorder=preorder,
            is_made_to_order=made_to_order,
        ))
    return rows


def build_all_rows(products: Iterable[CatalogProduct]) -> List[Row]:
    """Build rows for every product, skipping any product that fails."""
    rows: List[Row] = []
    skipped = 0
    for product in products:
        try:
            rows.extend(build_rows(product))
        except Exception as e:
            skipped += 1
            logger.error(f"Skipping product {product.id}: {e}")

    log_catalog_event("rows_built", {
        "message": f"Built {len(rows)} rows",
        "rows": len(rows),
        "skipped_products": skipped,
    })
    return rows
