"""
Sibling color variant discovery.

Color variants of one product are separate catalog entries linked only by a
shared ``model-<base-name>`` tag. :class:`VariantResolver` finds them through
the catalog's tag search; when that yields nothing (or fails),
:class:`DefaultVariantSynthesizer` builds a minimal variant set from whatever
the product itself declares.
"""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel

from product_resolver.catalog import Catalog
from product_resolver.colors import color_from_tags
from product_resolver.logging_config import log_execution_time
from product_resolver.models import PLACEHOLDER_IMAGE, CanonicalProduct, VariantSummary
from product_resolver.normalizer import (
    ProductNormalizer,
    first_result,
    product_id,
    product_tags,
    variant_option,
)
from product_resolver.slug import encode_slug, kebab, split_title

logger = logging.getLogger(__name__)

MODEL_TAG_PREFIX = "model-"
DEFAULT_VARIANT_COLOR = "Default"

# Upstream data entry puts a clean swatch shot fifth; soft heuristic.
SWATCH_IMAGE_INDEX = 4


class ModelTag(BaseModel):
    """Tag shared by every color variant of one logical product."""
    base_model_name: str
    value: str

    class Config:
        frozen = True

    @classmethod
    def for_name(cls, name: str) -> "ModelTag":
        base, _ = split_title(name)
        base_model_name = kebab(base)
        return cls(base_model_name=base_model_name, value=f"{MODEL_TAG_PREFIX}{base_model_name}")

    @classmethod
    def for_product(cls, product: CanonicalProduct) -> "ModelTag":
        return cls.for_name(product.name)

    def __str__(self) -> str:
        return self.value


def mark_current(summaries: list[VariantSummary], current_id: str) -> list[VariantSummary]:
    """Flag the first summary whose id is ``current_id``; at most one is flagged."""
    marked = []
    found = False
    for summary in summaries:
        is_current = not found and summary.id == current_id
        found = found or is_current
        marked.append(summary.model_copy(update={"is_current_variant": is_current}))
    return marked


def find_variant_for_color(
    variants: Iterable[VariantSummary],
    color: Optional[str],
) -> Optional[VariantSummary]:
    """First variant whose color matches case-insensitively, in catalog order."""
    if not color:
        return None
    wanted = color.strip().lower()
    for variant in variants:
        if variant.color.lower() == wanted:
            return variant
    return None


def swatch_image(images: Optional[list[str]]) -> str:
    if not images:
        return PLACEHOLDER_IMAGE
    if len(images) > SWATCH_IMAGE_INDEX:
        return images[SWATCH_IMAGE_INDEX]
    return images[0]


class DefaultVariantSynthesizer:
    """Builds a usable variant list when sibling discovery finds nothing.

    Always returns at least one summary and flags exactly one as current.
    """

    def synthesize(self, product: CanonicalProduct, current_id: str) -> list[VariantSummary]:
        base_name, name_color = split_title(product.name)
        hint_color = color_from_tags(product.tags) or name_color

        if product.has_declared_colors():
            summaries = [
                self._summary(product, current_id, base_name, option.name)
                for option in product.colors
            ]
            current_index = 0
            if hint_color:
                wanted = hint_color.lower()
                current_index = next(
                    (i for i, s in enumerate(summaries) if s.color.lower() == wanted),
                    0,
                )
            logger.info(
                f"Synthesized {len(summaries)} variants from declared colors",
                extra={"product_id": product.id},
            )
            return [
                s.model_copy(update={"is_current_variant": i == current_index})
                for i, s in enumerate(summaries)
            ]

        if hint_color:
            color = hint_color
            name = product.name
        elif product.variants:
            color = variant_option(product.variants[0], "color") or DEFAULT_VARIANT_COLOR
            name = None
        else:
            color = DEFAULT_VARIANT_COLOR
            name = None

        logger.info(
            f"Synthesized single variant with color {color}",
            extra={"product_id": product.id},
        )
        summary = self._summary(product, current_id, base_name, color, name=name)
        return [summary.model_copy(update={"is_current_variant": True})]

    def _summary(
        self,
        product: CanonicalProduct,
        current_id: str,
        base_name: str,
        color: str,
        name: Optional[str] = None,
    ) -> VariantSummary:
        return VariantSummary(
            id=current_id,
            name=name or f"{base_name} - {color}",
            base_name=base_name,
            color=color,
            slug=encode_slug(base_name, color, current_id),
            image=product.primary_image,
            price=product.price,
            is_current_variant=False,
        )


class VariantResolver:
    """Discovers the sibling color entries of a product via its model tag."""

    def __init__(
        self,
        catalog: Catalog,
        synthesizer: Optional[DefaultVariantSynthesizer] = None,
    ):
        self.catalog = catalog
        self.synthesizer = synthesizer or DefaultVariantSynthesizer()

    @log_execution_time(logger)
    async def resolve(self, product: CanonicalProduct, current_id: str) -> list[VariantSummary]:
        """
        Resolve the color variants of ``product``.

        Args:
            product: The normalized product being displayed
            current_id: Catalog id of the loaded product

        Returns:
            Non-empty list of summaries, at most one flagged current
        """
        tag = ModelTag.for_product(product)
        logger.info(
            f"Searching for color variants with tag {tag}",
            extra={"model_tag": tag.value, "product_id": current_id},
        )

        try:
            entries = await self.catalog.search_by_tag(tag.value)
        except Exception as e:
            logger.warning(
                f"Tag search failed, synthesizing variants: {e}",
                extra={"model_tag": tag.value, "product_id": current_id},
            )
            entries = []

        if not isinstance(entries, list):
            entries = []
        entries = [entry for entry in entries if isinstance(entry, dict)]

        if not entries:
            return self.synthesizer.synthesize(product, current_id)

        logger.info(
            f"Found {len(entries)} potential color variants",
            extra={"model_tag": tag.value, "metrics": {"variant_count": len(entries)}},
        )
        summaries = [self.summarize_entry(entry, product) for entry in entries]
        return mark_current(summaries, current_id)

    def summarize_entry(self, entry: dict, product: CanonicalProduct) -> VariantSummary:
        """Describe one tag-search entry; ``is_current_variant`` is left unset."""
        entry_id = product_id(entry)
        title = entry.get("title") or entry.get("name") or ""
        if not isinstance(title, str):
            title = ""

        base_name, title_color = split_title(title)
        if not base_name:
            base_name, _ = split_title(product.name)

        color = (
            color_from_tags(product_tags(entry))
            or title_color
            or (product.colors[0].name if product.colors else None)
            or DEFAULT_VARIANT_COLOR
        )

        images = first_result(ProductNormalizer.IMAGE_EXTRACTORS, entry)
        price = first_result(ProductNormalizer.PRICE_EXTRACTORS, entry)

        return VariantSummary(
            id=entry_id,
            name=title or f"{base_name} - {color}",
            base_name=base_name,
            color=color,
            slug=encode_slug(base_name, color, entry_id),
            image=swatch_image(images),
            price=price if price is not None else 0.0,
            is_current_variant=False,
        )
