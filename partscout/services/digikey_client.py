"""DigiKey Product Information API client."""

from __future__ import annotations

import logging

import httpx

from partscout.constants import DIGIKEY_BASE_URL, DIGIKEY_TOKEN_URL
from partscout.models.parts import CatalogProduct
from partscout.services.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)


class AuthFailed(RuntimeError):
    """Raised when the client-credentials exchange fails."""


class CatalogUnavailable(RuntimeError):
    """Raised when a catalog lookup fails."""


def _parse_price(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_product(item: dict) -> CatalogProduct:
    description = item.get("Description") or {}
    name = item.get("ManufacturerProductNumber") or ""
    if not name and isinstance(description, dict):
        name = description.get("ProductDescription") or ""
    return CatalogProduct(
        name=name,
        datasheet_url=item.get("DatasheetUrl") or None,
        photo_url=item.get("PhotoUrl") or None,
        product_url=item.get("ProductUrl") or None,
        unit_price=_parse_price(item.get("UnitPrice")),
    )


async def get_digikey_token(
    client_id: str,
    client_secret: str,
    token_url: str = DIGIKEY_TOKEN_URL,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Exchange client credentials for an access token.

    Args:
        client_id: DigiKey client ID.
        client_secret: DigiKey client secret.
        token_url: OAuth2 token endpoint.
        timeout: Request timeout in seconds when no client is given.
        client: Optional HTTP client.

    Returns:
        Bearer access token.
    """

    if not client_id or not client_secret:
        raise AuthFailed("DIGIKEY_CLIENT_ID and/or DIGIKEY_CLIENT_SECRET are empty")

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
        close_client = True

    try:
        response = await client.post(
            token_url,
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "client_credentials",
            },
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise AuthFailed(f"DigiKey token exchange failed: {exc}") from exc
    finally:
        if close_client:
            await client.aclose()

    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise AuthFailed("DigiKey token response did not include an access_token")
    logger.info("DigiKey token acquired (expires_in=%s)", data.get("expires_in"))
    return token


async def search_digikey_keyword(
    keyword: str,
    access_token: str,
    client_id: str,
    limit: int = 1,
    base_url: str = DIGIKEY_BASE_URL,
    timeout: float = 30.0,
    client: httpx.AsyncClient | None = None,
) -> list[CatalogProduct]:
    """Run a keyword search against the product catalog.

    Args:
        keyword: Search keywords, usually a part name.
        access_token: Bearer token from get_digikey_token.
        client_id: DigiKey client ID sent alongside the token.
        limit: Maximum products to return.
        base_url: API base URL.
        timeout: Request timeout in seconds when no client is given.
        client: Optional HTTP client.

    Returns:
        Matching products, best match first.
    """

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
        close_client = True

    try:
        response = await client.post(
            f"{base_url.rstrip('/')}/products/v4/search/keyword",
            headers={
                "Authorization": f"Bearer {access_token}",
                "X-DIGIKEY-Client-Id": client_id,
            },
            json={"Keywords": keyword, "Limit": limit, "Offset": 0},
        )
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise CatalogUnavailable(f"DigiKey search failed: {exc}") from exc
    finally:
        if close_client:
            await client.aclose()

    products = data.get("Products") if isinstance(data, dict) else None
    return [_parse_product(item) for item in products or [] if isinstance(item, dict)]


class DigiKeyCatalogService:
    """CatalogService backed by the DigiKey v4 API."""

    def __init__(
        self,
        base_url: str = DIGIKEY_BASE_URL,
        token_url: str = DIGIKEY_TOKEN_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        self._base_url = base_url
        self._token_url = token_url
        self._timeout = timeout
        self._client = client
        self._usage_tracker = usage_tracker
        self._client_id = ""

    async def authenticate(self, client_id: str, client_secret: str) -> str:
        token = await get_digikey_token(
            client_id,
            client_secret,
            token_url=self._token_url,
            timeout=self._timeout,
            client=self._client,
        )
        self._client_id = client_id
        return token

    async def lookup(self, token: str, keyword: str) -> list[CatalogProduct]:
        if self._usage_tracker is not None:
            await self._usage_tracker.add_source("digikey")
        try:
            return await search_digikey_keyword(
                keyword,
                token,
                self._client_id,
                limit=1,
                base_url=self._base_url,
                timeout=self._timeout,
                client=self._client,
            )
        except CatalogUnavailable:
            if self._usage_tracker is not None:
                await self._usage_tracker.add_source_failure("digikey")
            raise
