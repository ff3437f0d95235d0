"""Pytest fixtures and configuration."""

import os

import pytest

os.environ["CATALOG_API_URL"] = "http://catalog.test/api"
os.environ["CATALOG_MAX_ATTEMPTS"] = "3"
os.environ["CATALOG_RETRY_BASE_DELAY"] = "0"

from product_resolver.exceptions import CatalogFetchError, ProductNotFoundError  # noqa: E402
from product_resolver.models import CanonicalProduct, ColorOption  # noqa: E402


class FakeCatalog:
    """In-memory catalog collaborator."""

    def __init__(self, products=None, tag_results=None, search_error=None, fetch_error=None):
        self.products = products or {}
        self.tag_results = tag_results or {}
        self.search_error = search_error
        self.fetch_error = fetch_error
        self.fetched = []
        self.searched = []

    async def fetch_product(self, product_id):
        self.fetched.append(product_id)
        if self.fetch_error:
            raise self.fetch_error
        if product_id not in self.products:
            raise ProductNotFoundError(message="missing", product_id=product_id)
        return self.products[product_id]

    async def search_by_tag(self, tag):
        self.searched.append(tag)
        if self.search_error:
            raise self.search_error
        return self.tag_results.get(tag, [])


@pytest.fixture
def fake_catalog_cls():
    return FakeCatalog


@pytest.fixture
def flat_payload():
    """Flat object: string images, variants with direct size/color fields."""
    return {
        "id": "PROD123",
        "title": "Swivel Allure - Black",
        "description": "A swivel chair.",
        "tags": ["model-swivel-allure", "color-black"],
        "images": ["/img/black-1.jpg", "/img/black-2.jpg"],
        "variants": [
            {"id": "V1", "size": "S", "color": "Black", "price": "120.00"},
            {"id": "V2", "size": "M", "color": "Black", "price": "120.00"},
            {"id": "V3", "size": "M", "color": "Navy", "price": "125.00"},
        ],
    }


@pytest.fixture
def graphql_payload():
    """GraphQL edges for images and variants, options on selectedOptions."""
    return {
        "id": "gid://shopify/Product/987",
        "title": "Crimson Allure",
        "images": {
            "edges": [
                {"node": {"url": "https://cdn.test/a.jpg"}},
                {"node": {"originalSrc": "https://cdn.test/b.jpg"}},
            ]
        },
        "variants": {
            "edges": [
                {
                    "node": {
                        "id": "gid://shopify/ProductVariant/1",
                        "price": {"amount": "89.50"},
                        "availableForSale": False,
                        "selectedOptions": [
                            {"name": "Size", "value": "L"},
                            {"name": "COLOR", "value": "Burgundy"},
                        ],
                    }
                },
                {
                    "node": {
                        "id": "gid://shopify/ProductVariant/2",
                        "price": {"amount": "89.50"},
                        "selectedOptions": [
                            {"name": "size", "value": "XL"},
                            {"name": "color", "value": "Red"},
                        ],
                    }
                },
            ]
        },
    }


@pytest.fixture
def options_payload():
    """Backend shape: {src} images, option lists and a price range."""
    return {
        "id": "55",
        "title": "Lounge Set",
        "images": [{"src": "/img/lounge-1.jpg"}, {"url": "/img/lounge-2.jpg"}],
        "options": [
            {"name": "Size", "values": ["XS", "S"]},
            {"name": "Color", "values": ["Beige", "Olive"]},
        ],
        "priceRange": {"minVariantPrice": {"amount": "45.00"}},
    }


@pytest.fixture
def colored_product():
    """A normalized product with declared colors and per-color variant images."""
    return CanonicalProduct(
        id="P1",
        name="Swivel Allure - Black",
        price=120.0,
        images=["/img/default-1.jpg", "/img/default-2.jpg"],
        sizes=["S", "M"],
        colors=[
            ColorOption(name="Black", code="#000000"),
            ColorOption(name="Red", code="#FF0000"),
        ],
        variants=[
            {"id": "V1", "color": "Red", "images": ["/img/red-1.jpg", "/img/red-2.jpg"]},
            {"id": "V2", "color": "Red", "images": ["/img/red-3.jpg"]},
            {"id": "V3", "color": "Black"},
        ],
    )


@pytest.fixture
def sibling_entries():
    """Tag-search results for model-swivel-allure."""
    return [
        {
            "id": "P1",
            "title": "Swivel Allure - Black",
            "tags": ["model-swivel-allure", "color-black"],
            "images": ["/s/1.jpg", "/s/2.jpg", "/s/3.jpg", "/s/4.jpg", "/s/swatch-black.jpg"],
            "price": "120.00",
        },
        {
            "id": "P2",
            "title": "Swivel Allure - Navy Blue",
            "image": "/s/navy.jpg",
            "price": {"amount": "125.00"},
        },
        {
            "id": "P3",
            "title": "Swivel Allure",
            "tags": "model-swivel-allure,color-ivory",
            "price": "not a price",
        },
    ]


@pytest.fixture
def fetch_error():
    return CatalogFetchError(message="boom", url="http://catalog.test/api/products/id/1", status_code=503)
