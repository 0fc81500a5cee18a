"""Overwrite selected parts' links with catalog data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from partscout.constants import (
    CATALOG_CURRENCY_SYMBOL,
    CATALOG_VENDOR_NAME,
    DIGIKEY_KEYWORD_SEARCH_PAGE,
    STEP_CATALOG_ENRICHMENT,
)
from partscout.models.parts import CatalogProduct, ComponentOption, FinalList, VendorLink
from partscout.services.digikey_client import AuthFailed, CatalogUnavailable
from partscout.services.reporter import RunTrace

if TYPE_CHECKING:
    from partscout.agents.base import CatalogService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrichmentReport:
    """Outcome counts for one enrichment pass."""

    authenticated: bool
    matched: int = 0
    unmatched: int = 0
    failed: int = 0


def catalog_search_url(keyword: str) -> str:
    """Return the catalog's own keyword-search page for a part name."""

    return f"{DIGIKEY_KEYWORD_SEARCH_PAGE}?{urlencode({'keywords': keyword})}"


def format_price(unit_price: float | None) -> str:
    if not unit_price:
        return ""
    amount = f"{unit_price:.6f}".rstrip("0").rstrip(".")
    return f"{CATALOG_CURRENCY_SYMBOL}{amount}"


def apply_catalog_match(option: ComponentOption, product: CatalogProduct) -> None:
    """Replace an option's links with the catalog record."""

    option.datasheet_link = product.datasheet_url or ""
    option.photo_url = product.photo_url or ""
    option.vendor_links = [
        VendorLink(
            name=CATALOG_VENDOR_NAME,
            url=product.product_url or catalog_search_url(option.name),
            price=format_price(product.unit_price),
        )
    ]


def clear_unverified_links(option: ComponentOption) -> None:
    """Drop links the catalog could not confirm."""

    option.datasheet_link = ""
    option.vendor_links = []


async def enrich_final_list(
    final_list: FinalList,
    catalog: CatalogService,
    client_id: str,
    client_secret: str,
    trace: RunTrace,
) -> EnrichmentReport:
    """Look up every selected option in the catalog, mutating it in place.

    Args:
        final_list: Final selection to enrich.
        catalog: Catalog service.
        client_id: Catalog client ID.
        client_secret: Catalog client secret.
        trace: Run trace.

    Returns:
        EnrichmentReport with per-outcome counts.
    """

    trace.add(
        STEP_CATALOG_ENRICHMENT,
        reasoning="Replacing vendor, datasheet, and photo links with catalog data",
    )
    if not final_list.final_parts:
        return EnrichmentReport(authenticated=False)

    try:
        token = await catalog.authenticate(client_id, client_secret)
    except AuthFailed:
        logger.exception("Catalog authentication failed; clearing unverified links")
        for part in final_list.final_parts:
            clear_unverified_links(part.selected_option)
        return EnrichmentReport(authenticated=False, failed=len(final_list.final_parts))

    matched = unmatched = failed = 0
    for part in final_list.final_parts:
        option = part.selected_option
        try:
            products = await catalog.lookup(token, option.name)
        except CatalogUnavailable as exc:
            logger.warning("Catalog lookup failed for %s: %s", option.name, exc)
            clear_unverified_links(option)
            failed += 1
            trace.part_enriched(option.name, False)
            continue

        if products:
            apply_catalog_match(option, products[0])
            matched += 1
        else:
            logger.info("No catalog match for %s", option.name)
            clear_unverified_links(option)
            unmatched += 1
        trace.part_enriched(option.name, bool(products))

    logger.info(
        "Catalog enrichment: %d matched, %d unmatched, %d failed",
        matched,
        unmatched,
        failed,
    )
    return EnrichmentReport(
        authenticated=True,
        matched=matched,
        unmatched=unmatched,
        failed=failed,
    )
