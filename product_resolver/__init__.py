"""
Product normalization and variant resolution for the storefront.

Turns shape-variable catalog payloads into one canonical product, discovers
its sibling color variants, maps colors to images and encodes the slugs used
for product-page navigation.
"""

from product_resolver.catalog import Catalog, HttpCatalogClient, extract_product_payload
from product_resolver.exceptions import (
    CatalogFetchError,
    ConfigurationError,
    ProductNotFoundError,
    ResolverError,
    SelectionIncompleteError,
)
from product_resolver.images import images_for
from product_resolver.models import (
    CanonicalProduct,
    CartLine,
    ColorOption,
    ItemProjection,
    Slug,
    VariantSummary,
)
from product_resolver.normalizer import ProductNormalizer, normalize
from product_resolver.page import PageResult, PageStatus, ProductPage
from product_resolver.selection import can_add_to_cart, display_images
from product_resolver.slug import decode_slug, encode_slug
from product_resolver.variants import DefaultVariantSynthesizer, ModelTag, VariantResolver

__all__ = [
    "Catalog",
    "HttpCatalogClient",
    "extract_product_payload",
    "CanonicalProduct",
    "CartLine",
    "ColorOption",
    "ItemProjection",
    "Slug",
    "VariantSummary",
    "ProductNormalizer",
    "normalize",
    "VariantResolver",
    "DefaultVariantSynthesizer",
    "ModelTag",
    "images_for",
    "can_add_to_cart",
    "display_images",
    "encode_slug",
    "decode_slug",
    "ProductPage",
    "PageResult",
    "PageStatus",
    "ResolverError",
    "CatalogFetchError",
    "ProductNotFoundError",
    "SelectionIncompleteError",
    "ConfigurationError",
]

__version__ = "1.0.0"
