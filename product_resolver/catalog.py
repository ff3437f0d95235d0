"""
Catalog API collaborator: product-by-id and tag search over HTTP.

The catalog answers with several envelope styles, so the product object is
dug out with :func:`extract_product_payload` before normalization.
"""

import logging
from typing import Any, Optional, Protocol

import httpx

from product_resolver import config
from product_resolver.exceptions import (
    CatalogFetchError,
    ErrorContext,
    ProductNotFoundError,
)
from product_resolver.logging_config import get_correlation_id
from product_resolver.retry import RetryConfig, retry_with_backoff

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "product-resolver/1.0",
}


class Catalog(Protocol):
    """What the engine needs from the catalog API."""

    async def fetch_product(self, product_id: str) -> dict:
        ...

    async def search_by_tag(self, tag: str) -> list[dict]:
        ...


def extract_product_payload(body: Any) -> Optional[dict]:
    """Find the product object inside a product-by-id response body."""
    if isinstance(body, dict):
        if isinstance(body.get("product"), dict):
            return body["product"]
        data = body.get("data")
        if isinstance(data, dict) and isinstance(data.get("product"), dict):
            return data["product"]
        if body.get("id"):
            return body
        return None
    if isinstance(body, list) and body and isinstance(body[0], dict):
        return body[0]
    return None


class HttpCatalogClient:
    """
    Async HTTP client for the storefront catalog API.

    Transport errors and 5xx answers are retried with backoff; a 404 is final.
    Pass ``client`` to share an ``httpx.AsyncClient`` (or a mock transport in
    tests); otherwise one is created and owned by this instance.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = config.CATALOG_TIMEOUT,
        retry_config: Optional[RetryConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = config.require_catalog_url(base_url or config.CATALOG_API_URL)
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig(
            max_attempts=config.CATALOG_MAX_ATTEMPTS,
            base_delay=config.CATALOG_RETRY_BASE_DELAY,
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers=_DEFAULT_HEADERS, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpCatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"

        @retry_with_backoff(config=self.retry_config)
        async def attempt() -> httpx.Response:
            try:
                response = await self._client.get(
                    url,
                    params=params,
                    headers={"X-Correlation-ID": get_correlation_id()},
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                raise CatalogFetchError(
                    message=f"Catalog request failed: {e}",
                    url=url,
                    original_exception=e,
                )
            if response.status_code >= 500:
                raise CatalogFetchError(
                    message=f"Catalog answered {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            return response

        response = await attempt()

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise CatalogFetchError(
                message=f"Catalog answered {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CatalogFetchError(
                message=f"Catalog returned invalid JSON: {e}",
                url=url,
                status_code=response.status_code,
                original_exception=e,
            )

    async def fetch_product(self, product_id: str) -> dict:
        """
        Fetch one raw product.

        Raises:
            ProductNotFoundError: 404 or a body without a product object
            CatalogFetchError: Network failure or server error after retries
        """
        body = await self._get_json(f"/products/id/{product_id}")
        payload = extract_product_payload(body)
        if payload is None:
            raise ProductNotFoundError(
                message=f"Product {product_id} not found",
                product_id=product_id,
                context=ErrorContext(correlation_id=get_correlation_id()),
            )
        logger.debug("Fetched product payload", extra={"product_id": product_id})
        return payload

    async def search_by_tag(self, tag: str) -> list[dict]:
        """Entries carrying ``tag``; an empty list is a valid answer."""
        body = await self._get_json("/search/tag", params={"tag": tag})
        products = body.get("products") if isinstance(body, dict) else body
        if not isinstance(products, list):
            return []
        return [p for p in products if isinstance(p, dict)]
