"""
Normalizer converting raw catalog payloads into the canonical product model.

The upstream API does not commit to one response shape, so every field is
read through an ordered tuple of extractor functions. Each extractor returns
``None`` when its shape is absent; the first non-``None`` value wins and a
hard-coded default ends every chain. Nothing in this module raises on a
malformed payload.
"""

import logging
import math
import re
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from product_resolver.colors import default_color_option, make_color_option
from product_resolver.logging_config import bind_product, log_execution_time
from product_resolver.models import (
    DEFAULT_SIZES,
    PLACEHOLDER_IMAGE,
    CanonicalProduct,
    ColorOption,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Extractor = Callable[[dict], Optional[T]]

UNNAMED_PRODUCT = "Unnamed Product"
NO_DESCRIPTION = "No description available"

OPTION_LISTS = ("options", "selectedOptions")
_IMAGE_URL_KEYS = ("src", "url", "originalSrc")

# One number, optionally signed and comma-grouped, wrapped in currency text.
_PRICE_TEXT = re.compile(r"[^\d.\-]*?(-?\d[\d,]*(?:\.\d+)?)[^\d]*")


def first_result(extractors: Sequence[Extractor], raw: dict) -> Optional[T]:
    """Run ``extractors`` in order and return the first non-``None`` value."""
    for extractor in extractors:
        value = extractor(raw)
        if value is not None:
            return value
    return None


def _dedupe(values: Iterable[str]) -> list[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _non_empty(values: list) -> Optional[list]:
    return values or None


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


# --- images -----------------------------------------------------------------

def image_url(item: Any) -> Optional[str]:
    """URL of one image entry, given as a string or a ``{src|url}`` object."""
    if isinstance(item, str):
        return item.strip() or None
    if isinstance(item, dict):
        for key in _IMAGE_URL_KEYS:
            url = item.get(key)
            if isinstance(url, str) and url.strip():
                return url.strip()
    return None


def image_urls(items: Iterable[Any]) -> list[str]:
    return [url for url in (image_url(item) for item in items) if url]


def images_from_list(raw: dict) -> Optional[list[str]]:
    images = raw.get("images")
    if isinstance(images, list):
        return _non_empty(image_urls(images))
    return None


def images_from_edges(raw: dict) -> Optional[list[str]]:
    images = raw.get("images")
    if isinstance(images, dict) and isinstance(images.get("edges"), list):
        nodes = [edge.get("node") for edge in images["edges"] if isinstance(edge, dict)]
        return _non_empty(image_urls(nodes))
    return None


def images_from_collection(raw: dict) -> Optional[list[str]]:
    images = raw.get("images")
    if not isinstance(images, dict):
        return None
    items = images.get("items") or images.get("data")
    if isinstance(items, list):
        return _non_empty(image_urls(items))
    return None


def images_from_single_object(raw: dict) -> Optional[list[str]]:
    url = image_url(raw.get("images")) if isinstance(raw.get("images"), dict) else None
    return [url] if url else None


def image_from_top_level(raw: dict) -> Optional[list[str]]:
    url = image_url(raw.get("image"))
    return [url] if url else None


# --- variants and options ---------------------------------------------------

def variants_from_list(raw: dict) -> Optional[list[dict]]:
    variants = raw.get("variants")
    if isinstance(variants, list):
        return [v for v in variants if isinstance(v, dict)]
    return None


def variants_from_edges(raw: dict) -> Optional[list[dict]]:
    variants = raw.get("variants")
    if isinstance(variants, dict) and isinstance(variants.get("edges"), list):
        return [
            edge["node"]
            for edge in variants["edges"]
            if isinstance(edge, dict) and isinstance(edge.get("node"), dict)
        ]
    return None


VARIANT_EXTRACTORS: tuple[Extractor, ...] = (variants_from_list, variants_from_edges)


def variant_nodes(raw: dict) -> list[dict]:
    return first_result(VARIANT_EXTRACTORS, raw) or []


def variant_option(variant: dict, option_name: str) -> Optional[str]:
    """Value of ``option_name`` on a variant, from a direct field or an option list."""
    direct = _text(variant.get(option_name))
    if direct:
        return direct
    wanted = option_name.lower()
    for list_key in OPTION_LISTS:
        for option in _as_list(variant.get(list_key)):
            if not isinstance(option, dict):
                continue
            name = option.get("name")
            if isinstance(name, str) and name.strip().lower() == wanted:
                value = _text(option.get("value"))
                if value:
                    return value
    return None


def _product_options(raw: dict) -> list[tuple[str, list]]:
    """Top-level options as ``(lower-cased name, values)`` pairs."""
    options = raw.get("options")
    if isinstance(options, dict) and "name" not in options:
        return [(str(name).lower(), _as_list(values)) for name, values in options.items()]
    pairs = []
    for option in _as_list(options):
        if isinstance(option, dict) and isinstance(option.get("name"), str):
            pairs.append((option["name"].lower(), _as_list(option.get("values"))))
    return pairs


def _option_values(raw: dict, keyword: str) -> list:
    for name, values in _product_options(raw):
        if keyword in name and values:
            return values
    return []


def sizes_from_variants(raw: dict) -> Optional[list[str]]:
    sizes = [variant_option(v, "size") for v in variant_nodes(raw)]
    return _non_empty(_dedupe(s for s in sizes if s))


def sizes_from_options(raw: dict) -> Optional[list[str]]:
    values = [_text(v) for v in _option_values(raw, "size")]
    return _non_empty(_dedupe(v for v in values if v))


def sizes_from_field(raw: dict) -> Optional[list[str]]:
    values = [_text(v) for v in _as_list(raw.get("sizes"))]
    return _non_empty(_dedupe(v for v in values if v))


def _color_option(value: Any) -> Optional[ColorOption]:
    if isinstance(value, dict):
        name = _text(value.get("name"))
        if not name:
            return None
        in_stock = value.get("inStock", value.get("in_stock", True))
        return make_color_option(name, in_stock=bool(in_stock), code=_text(value.get("code")))
    name = _text(value)
    return make_color_option(name) if name else None


def _unique_colors(options: Iterable[Optional[ColorOption]]) -> Optional[list[ColorOption]]:
    seen = set()
    result = []
    for option in options:
        if option is None or option.name in seen:
            continue
        seen.add(option.name)
        result.append(option)
    return _non_empty(result)


def colors_from_variants(raw: dict) -> Optional[list[ColorOption]]:
    availability: dict[str, bool] = {}
    for variant in variant_nodes(raw):
        name = variant_option(variant, "color")
        if not name:
            continue
        available = variant.get("availableForSale") is not False
        availability[name] = availability.get(name, False) or available
    return _non_empty([
        make_color_option(name, in_stock=in_stock)
        for name, in_stock in availability.items()
    ])


def colors_from_options(raw: dict) -> Optional[list[ColorOption]]:
    return _unique_colors(_color_option(v) for v in _option_values(raw, "color"))


def colors_from_field(raw: dict) -> Optional[list[ColorOption]]:
    return _unique_colors(_color_option(v) for v in _as_list(raw.get("colors")))


# --- price --------------------------------------------------------------------

def parse_price(value: Any) -> Optional[float]:
    """Parse a price given as a number, a string or an ``{amount}`` object.

    Returns ``None`` when nothing usable is found so callers can try the next
    source instead of treating garbage as zero.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, dict):
        return parse_price(value.get("amount"))
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        match = _PRICE_TEXT.fullmatch(value.strip())
        if not match:
            return None
        amount = float(match.group(1).replace(",", ""))
    else:
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def price_from_first_variant(raw: dict) -> Optional[float]:
    variants = variant_nodes(raw)
    return parse_price(variants[0].get("price")) if variants else None


def price_from_field(raw: dict) -> Optional[float]:
    return parse_price(raw.get("price"))


def price_from_price_range(raw: dict) -> Optional[float]:
    price_range = raw.get("priceRange")
    if not isinstance(price_range, dict):
        return None
    min_variant = price_range.get("minVariantPrice")
    if isinstance(min_variant, dict):
        amount = parse_price(min_variant.get("amount"))
        if amount is not None:
            return amount
    return parse_price(price_range.get("min"))


# --- scalar fields --------------------------------------------------------------

def product_id(raw: dict) -> str:
    value = _text(raw.get("id"))
    if not value:
        return ""
    if value.startswith("gid://"):
        return value.rstrip("/").split("/")[-1]
    return value


def product_name(raw: dict) -> str:
    return _text(raw.get("title")) or _text(raw.get("name")) or UNNAMED_PRODUCT


def product_tags(raw: dict) -> list[str]:
    tags = raw.get("tags")
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t for t in (_text(tag) for tag in _as_list(tags)) if t]


def product_color_images(raw: dict) -> dict[str, list[str]]:
    color_images = raw.get("colorImages")
    if not isinstance(color_images, dict):
        return {}
    mapped = {}
    for color, images in color_images.items():
        urls = image_urls(_as_list(images))
        if urls:
            mapped[str(color)] = urls
    return mapped


class ProductNormalizer:
    """
    Converts one raw catalog payload into a :class:`CanonicalProduct`.

    The extractor tuples below are the precedence rules; order matters.
    """

    IMAGE_EXTRACTORS: tuple[Extractor, ...] = (
        images_from_list,
        images_from_edges,
        images_from_collection,
        images_from_single_object,
        image_from_top_level,
    )
    SIZE_EXTRACTORS: tuple[Extractor, ...] = (
        sizes_from_variants,
        sizes_from_options,
        sizes_from_field,
    )
    COLOR_EXTRACTORS: tuple[Extractor, ...] = (
        colors_from_variants,
        colors_from_options,
        colors_from_field,
    )
    PRICE_EXTRACTORS: tuple[Extractor, ...] = (
        price_from_first_variant,
        price_from_field,
        price_from_price_range,
    )

    @log_execution_time(logger)
    def normalize(self, raw: Any) -> CanonicalProduct:
        """
        Normalize a raw payload. Never raises for missing or wrong-typed fields.

        Args:
            raw: Product object as returned by the catalog API

        Returns:
            CanonicalProduct with non-empty images, sizes and colors
        """
        if not isinstance(raw, dict):
            raw = {}

        pid = product_id(raw)
        log = bind_product(logger, pid)
        defaults_applied = []

        images = first_result(self.IMAGE_EXTRACTORS, raw)
        if images is None:
            images = [PLACEHOLDER_IMAGE]
            defaults_applied.append("images")

        sizes = first_result(self.SIZE_EXTRACTORS, raw)
        if sizes is None:
            sizes = list(DEFAULT_SIZES)
            defaults_applied.append("sizes")

        colors = first_result(self.COLOR_EXTRACTORS, raw)
        if colors is None:
            colors = [default_color_option()]
            defaults_applied.append("colors")

        price = first_result(self.PRICE_EXTRACTORS, raw)
        if price is None:
            price = 0.0
            defaults_applied.append("price")

        if defaults_applied:
            log.warning(
                f"Applied defaults for {', '.join(defaults_applied)}",
                extra={"metrics": {"defaults_applied": defaults_applied}},
            )

        return CanonicalProduct(
            id=pid,
            name=product_name(raw),
            price=price,
            images=images,
            sizes=sizes,
            colors=colors,
            variants=variant_nodes(raw),
            description=_text(raw.get("description")) or NO_DESCRIPTION,
            handle=_text(raw.get("handle")),
            tags=product_tags(raw),
            color_images=product_color_images(raw),
            defaults_applied=defaults_applied,
        )


_default_normalizer = ProductNormalizer()


def normalize(raw: Any) -> CanonicalProduct:
    """Normalize ``raw`` with the default extractor chains."""
    return _default_normalizer.normalize(raw)
