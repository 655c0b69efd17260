"""Fetch the product catalog from the commerce search API."""

import logging
import random
import time
from typing import Any, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from catalog.config import (
    API_KEY,
    COLLECTION,
    HEADERS,
    INFO_CHECKS_PER_PAUSE,
    INFO_DELAY,
    INFO_URL,
    MAX_RETRIES,
    MAX_RETRY_BACKOFF,
    PAGE_DELAY,
    PAGES_PER_PAUSE,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_BASE,
    RETRY_STATUS_CODES,
    SEARCH_URL,
    TAKE,
)
from catalog.logging_config import get_logger, log_catalog_event
from catalog.models import CatalogProduct
from catalog.shutdown import shutdown_requested
from catalog.stock import orderable_variants

__all__ = [
    "FetchError",
    "create_session",
    "search_params",
    "get_json",
    "fetch_page",
    "fetch_full_catalog",
    "fetch_variant_info",
    "is_physical_only",
    "filter_physical_only",
]

logger = get_logger("fetcher")


class FetchError(ValueError):
    """Raised when a catalog request fails or returns an unexpected body."""
    pass


def create_session() -> requests.Session:
    """Create a requests Session with the API's expected headers."""
    session = requests.Session()
    session.headers.update(HEADERS)
    session.headers.setdefault("Accept-Encoding", "gzip, deflate")
    return session


def search_params(skip: int, take: int = TAKE) -> Dict[str, str]:
    return {
        "q": "",
        "apiKey": API_KEY,
        "country": "US",
        "locale": "en",
        "getProductDescription": "0",
        "collection": COLLECTION,
        "skip": str(skip),
        "take": str(take),
        "sort": "-date",
    }


def _backoff(attempt: int) -> float:
    return min(RETRY_BACKOFF_BASE ** attempt, MAX_RETRY_BACKOFF) + random.uniform(0, 1)


def get_json(
    url: str,
    params: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
) -> Any:
    """GET a JSON document, backing off on transient failures.

    Raises:
        FetchError: On a non-success status, exhausted retries or invalid JSON
    """
    sess = session or create_session()

    for attempt in range(MAX_RETRIES + 1):
        try:
            resp = sess.get(url, params=params, timeout=REQUEST_TIMEOUT)
            if resp.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                backoff = _backoff(attempt)
                logger.warning(
                    f"Received {resp.status_code}, backing off {backoff:.1f}s "
                    f"(attempt {attempt + 1}/{MAX_RETRIES})"
                )
                time.sleep(backoff)
                continue
            resp.raise_for_status()
            return resp.json()

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"HTTP error fetching {url}: {e}")
            raise FetchError(f"HTTP {status_code}: {url}") from e

        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            if attempt < MAX_RETRIES:
                backoff = _backoff(attempt)
                logger.warning(
                    f"{type(e).__name__}, backing off {backoff:.1f}s "
                    f"(attempt {attempt + 1}/{MAX_RETRIES})"
                )
                time.sleep(backoff)
                continue
            raise FetchError(f"Failed to fetch {url}: {e}") from e

        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}") from e

        except requests.exceptions.RequestException as e:
            raise FetchError(f"Failed to fetch {url}: {e}") from e

    raise FetchError(f"Failed to fetch {url} after {MAX_RETRIES} retries")


def fetch_page(
    skip: int,
    session: Optional[requests.Session] = None,
    take: int = TAKE,
) -> Dict[str, Any]:
    """Fetch one page of search results starting at ``skip``."""
    document = get_json(SEARCH_URL, params=search_params(skip, take), session=session)
    data = document.get("data") if isinstance(document, dict) else None
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise FetchError(f"Unexpected response structure at skip={skip}")
    return document


def fetch_full_catalog(
    session: Optional[requests.Session] = None,
    take: int = TAKE,
) -> Dict[str, Any]:
    """Page through the whole collection and merge it into one document.

    The first page's envelope is kept; ``data.items`` and ``data.total`` are
    replaced with the merged result. Stops on a short page, once the declared
    total is reached, or when a shutdown is requested.
    """
    sess = session or create_session()
    logger.info(f"Fetching full catalog (collection {COLLECTION})")

    template: Optional[Dict[str, Any]] = None
    all_items: List[Dict[str, Any]] = []
    total_expected: Optional[int] = None
    skip = 0
    pages = 0

    while True:
        if shutdown_requested():
            logger.info("Shutdown requested, keeping pages fetched so far")
            break

        document = fetch_page(skip, session=sess, take=take)
        pages += 1
        data = document["data"]
        items = data["items"]

        if template is None:
            template = {**document, "data": {**data, "items": []}}
            declared = data.get("total")
            total_expected = declared if isinstance(declared, int) else None
            logger.info(f"  skip={skip}: total declared {total_expected}")
        else:
            logger.info(f"  skip={skip}: got {len(items)}")
        log_catalog_event("page_fetch", {"skip": skip, "items": len(items)}, level=logging.DEBUG)

        all_items.extend(items)
        if len(items) < take:
            break
        if total_expected is not None and len(all_items) >= total_expected:
            break
        skip += take
        if pages % PAGES_PER_PAUSE == 0:
            time.sleep(PAGE_DELAY)

    if template is None:
        template = {"data": {}}
    template["data"]["items"] = all_items
    template["data"]["total"] = len(all_items)

    log_catalog_event("catalog_fetched", {
        "message": f"Fetched {len(all_items)} products in {pages} pages",
        "products": len(all_items),
        "pages": pages,
    })
    return template


def fetch_variant_info(
    product_id: str,
    variant_id: str,
    session: Optional[requests.Session] = None,
) -> Optional[Any]:
    """Return the info endpoint's file list for a variant, or None on failure."""
    try:
        return get_json(
            INFO_URL,
            params={"productId": str(product_id), "variantId": str(variant_id)},
            session=session,
        )
    except FetchError as e:
        logger.debug(f"Info lookup failed for {product_id}/{variant_id}: {e}")
        return None


def is_physical_only(
    product_id: str,
    variant_id: str,
    session: Optional[requests.Session] = None,
) -> bool:
    """True if the variant ships no downloadable files (info returns ``[]``)."""
    info = fetch_variant_info(product_id, variant_id, session=session)
    return isinstance(info, list) and len(info) == 0


def filter_physical_only(
    products: List[CatalogProduct],
    session: Optional[requests.Session] = None,
) -> List[CatalogProduct]:
    """Keep products whose first orderable variant has no digital files."""
    sess = session or create_session()
    physical: List[CatalogProduct] = []
    for i, product in enumerate(products):
        variants = orderable_variants(product)
        if product.id and variants and variants[0].id:
            if is_physical_only(product.id, variants[0].id, session=sess):
                physical.append(product)
        if i > 0 and i % INFO_CHECKS_PER_PAUSE == 0:
            time.sleep(INFO_DELAY)

    logger.info(
        f"Filtered out {len(products) - len(physical)} digital/hybrid products. "
        f"Remaining (physical only): {len(physical)}"
    )
    return physical
