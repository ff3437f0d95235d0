"""Centralized configuration for the product resolver (environment overrides)."""

import os
from urllib.parse import urlparse

from product_resolver.exceptions import ConfigurationError

CATALOG_API_URL = os.getenv("CATALOG_API_URL", "http://localhost:3001/api")
CATALOG_TIMEOUT = float(os.getenv("CATALOG_TIMEOUT", "10.0"))
CATALOG_MAX_ATTEMPTS = int(os.getenv("CATALOG_MAX_ATTEMPTS", "3"))
CATALOG_RETRY_BASE_DELAY = float(os.getenv("CATALOG_RETRY_BASE_DELAY", "0.5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()
SERVICE_NAME = os.getenv("SERVICE_NAME", "product-resolver")


def require_catalog_url(url: str = CATALOG_API_URL) -> str:
    """Return ``url`` without a trailing slash, or fail if it is not http(s)."""
    if not url:
        raise ConfigurationError(
            message="Catalog API URL is not configured",
            config_key="CATALOG_API_URL",
        )
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            message=f"Catalog API URL must be an http(s) URL, got {url!r}",
            config_key="CATALOG_API_URL",
        )
    return url.rstrip("/")
