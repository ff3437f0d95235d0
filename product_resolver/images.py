"""Maps a selected color to the images the product page should show."""

import logging
from typing import Optional

from product_resolver.models import PLACEHOLDER_IMAGE, CanonicalProduct
from product_resolver.normalizer import OPTION_LISTS, image_url, image_urls

logger = logging.getLogger(__name__)


def variant_has_color(variant: dict, color_name: str) -> bool:
    if variant.get("color") == color_name:
        return True
    for list_key in OPTION_LISTS:
        options = variant.get(list_key)
        if not isinstance(options, list):
            continue
        for option in options:
            if (
                isinstance(option, dict)
                and isinstance(option.get("name"), str)
                and option["name"].lower() == "color"
                and option.get("value") == color_name
            ):
                return True
    return False


def variant_images(variant: dict) -> list[str]:
    """A variant's gallery, or its single image when it has no gallery."""
    gallery = variant.get("images")
    if isinstance(gallery, list) and gallery:
        return image_urls(gallery)
    url = image_url(variant.get("image"))
    return [url] if url else []


def _variant_images(product: CanonicalProduct, color_name: str) -> list[str]:
    return [
        url
        for variant in product.variants
        if variant_has_color(variant, color_name)
        for url in variant_images(variant)
    ]


def images_for(product: CanonicalProduct, color_name: Optional[str]) -> list[str]:
    """
    Images to display for ``color_name``, never empty.

    Precedence: images on variants of that color, then the product's
    color-to-images map, then the product's own gallery.
    """
    default_images = list(product.images) or [PLACEHOLDER_IMAGE]
    if not color_name:
        return default_images

    images = _variant_images(product, color_name)
    if images:
        logger.debug(
            f"Using {len(images)} variant images for color {color_name}",
            extra={"product_id": product.id},
        )
        return images

    mapped = product.color_images.get(color_name)
    if mapped:
        return list(mapped)

    return default_images
