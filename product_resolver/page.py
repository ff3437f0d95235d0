"""
Product page controller: slug in, render-ready state out.

One :class:`ProductPage` owns the resolution state of one page. Starting a
new load (for instance when the user jumps between color variants) cancels
the previous in-flight load, and a load that is no longer the most recently
started one never overwrites the page result.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from product_resolver.catalog import Catalog
from product_resolver.exceptions import ProductNotFoundError, ResolverError
from product_resolver.logging_config import bind_product, set_correlation_id
from product_resolver.models import CanonicalProduct, CartLine, VariantSummary
from product_resolver.normalizer import ProductNormalizer
from product_resolver.selection import (
    ColorTagInUrl,
    NavigateTo,
    ProductLoaded,
    SelectInPlace,
    Selection,
    SelectionEvent,
    UserSelectedColor,
    VariantsResolved,
    can_add_to_cart,
    cart_line,
    choose_color,
    display_images,
    reduce,
)
from product_resolver.slug import decode_slug
from product_resolver.variants import VariantResolver

logger = logging.getLogger(__name__)


class PageStatus(Enum):
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PageResult(BaseModel):
    """Everything the render layer needs for one product page."""
    status: PageStatus
    slug: Optional[str] = None
    correlation_id: Optional[str] = None
    product: Optional[CanonicalProduct] = None
    variants: list[VariantSummary] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    selection: Selection = Field(default_factory=Selection)
    error: Optional[dict] = None
    duration_ms: Optional[float] = None

    class Config:
        frozen = True


class ProductPage:
    """Loads and tracks the state of a single product page."""

    def __init__(
        self,
        catalog: Catalog,
        normalizer: Optional[ProductNormalizer] = None,
        resolver: Optional[VariantResolver] = None,
    ):
        self.catalog = catalog
        self.normalizer = normalizer or ProductNormalizer()
        self.resolver = resolver or VariantResolver(catalog)
        self.result: Optional[PageResult] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def selection(self) -> Selection:
        return self.result.selection if self.result else Selection()

    def navigate(self, slug: str) -> asyncio.Task:
        """Start loading ``slug`` in the background, cancelling any stale load."""
        if self._task is not None and not self._task.done():
            logger.info("Cancelling in-flight load", extra={"slug": slug})
            self._task.cancel()
        self._task = asyncio.create_task(self.load(slug))
        return self._task

    async def load(self, slug: str) -> PageResult:
        """
        Run a full load for ``slug``.

        Never raises for catalog failures: they come back as ``NOT_FOUND`` or
        ``FAILED`` results. A load overtaken by a newer one returns
        ``CANCELLED`` and leaves ``self.result`` alone.
        """
        self._generation += 1
        generation = self._generation
        start_time = time.perf_counter()
        correlation_id = set_correlation_id()

        result = await self._resolve(slug, generation, correlation_id)
        result = result.model_copy(
            update={"duration_ms": round((time.perf_counter() - start_time) * 1000, 2)}
        )

        if generation != self._generation:
            logger.info("Discarding stale page load", extra={"slug": slug})
            return PageResult(status=PageStatus.CANCELLED, slug=slug, correlation_id=correlation_id)

        self.result = result
        return result

    async def _resolve(self, slug: str, generation: int, correlation_id: str) -> PageResult:
        decoded = decode_slug(slug)
        if not decoded.id:
            return PageResult(
                status=PageStatus.NOT_FOUND,
                slug=slug,
                correlation_id=correlation_id,
                error={"message": "Product ID is missing"},
            )

        log = bind_product(logger, decoded.id)
        log.info("Loading product page", extra={"slug": slug})

        try:
            raw = await self.catalog.fetch_product(decoded.id)
        except ProductNotFoundError as e:
            log.warning(f"Product not found: {e.message}")
            return PageResult(
                status=PageStatus.NOT_FOUND,
                slug=slug,
                correlation_id=correlation_id,
                error=e.to_dict(),
            )
        except ResolverError as e:
            log.error(f"Failed to load product: {e.message}", extra={"metrics": e.to_dict()})
            return PageResult(
                status=PageStatus.FAILED,
                slug=slug,
                correlation_id=correlation_id,
                error=e.to_dict(),
            )
        except Exception as e:
            log.error(f"Unexpected error loading product: {e}", exc_info=True)
            return PageResult(
                status=PageStatus.FAILED,
                slug=slug,
                correlation_id=correlation_id,
                error={"type": type(e).__name__, "message": str(e)},
            )

        if generation != self._generation:
            return PageResult(status=PageStatus.CANCELLED, slug=slug, correlation_id=correlation_id)

        product = self.normalizer.normalize(raw)
        current_id = product.id or decoded.id

        selection = reduce(Selection(), ProductLoaded(product))
        if decoded.color:
            selection = reduce(selection, ColorTagInUrl(decoded.color), product)

        variants = await self.resolver.resolve(product, current_id)
        selection = reduce(selection, VariantsResolved(tuple(variants)), product)

        return PageResult(
            status=PageStatus.LOADED,
            slug=slug,
            correlation_id=correlation_id,
            product=product,
            variants=variants,
            images=display_images(product, selection.color),
            selection=selection,
        )

    def dispatch(self, event: SelectionEvent) -> Selection:
        """Apply a user event to the loaded page and refresh its images."""
        if self.result is None or self.result.product is None:
            return Selection()
        product = self.result.product
        selection = reduce(self.result.selection, event, product)
        self.result = self.result.model_copy(
            update={
                "selection": selection,
                "images": display_images(product, selection.color),
            }
        )
        return selection

    def pick_variant(self, variant: VariantSummary) -> Union[SelectInPlace, NavigateTo]:
        """
        Handle a click on a color swatch.

        Colors of the loaded product are selected in place; other catalog
        entries are returned as a navigation target for the router.
        """
        current_id = self.result.product.id if self.result and self.result.product else ""
        action = choose_color(variant, current_id)
        if isinstance(action, SelectInPlace):
            self.dispatch(UserSelectedColor(action.color))
        return action

    def can_add_to_cart(self) -> bool:
        if self.result is None or self.result.product is None:
            return False
        selection = self.result.selection
        return can_add_to_cart(self.result.product, selection.size, selection.color)

    def cart_line(self) -> CartLine:
        if self.result is None or self.result.product is None:
            raise ProductNotFoundError(message="No product loaded", product_id=None)
        return cart_line(self.result.product, self.result.selection)
