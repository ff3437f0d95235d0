"""Color name to swatch value lookup."""

from typing import Iterable, Optional

from product_resolver.models import ColorOption

COLOR_TAG_PREFIX = "color-"
FALLBACK_COLOR_CODE = "#CCCCCC"

DEFAULT_COLOR_NAME = "Black"
DEFAULT_COLOR_CODE = "#000000"

COLOR_CODES = {
    "Black": "#000000",
    "White": "#FFFFFF",
    "Red": "#FF0000",
    "Green": "#008000",
    "Blue": "#0000FF",
    "Yellow": "#FFFF00",
    "Pink": "#FFC0CB",
    "Purple": "#800080",
    "Orange": "#FFA500",
    "Gray": "#808080",
    "Brown": "#A52A2A",
    "Beige": "#F5F5DC",
    "Maroon": "#800000",
    "Violet": "#8A2BE2",
    "Teal": "#008080",
    "Navy": "#000080",
    "Coral": "#FF7F50",
    "Burgundy": "#800020",
    "Olive": "#808000",
    "Turquoise": "#40E0D0",
}

_CODES_BY_LOWER = {name.lower(): code for name, code in COLOR_CODES.items()}


def color_code(name: Optional[str]) -> str:
    """Hex value for a color name; neutral gray when the name is unknown."""
    if not name:
        return FALLBACK_COLOR_CODE
    if name in COLOR_CODES:
        return COLOR_CODES[name]
    return _CODES_BY_LOWER.get(name.strip().lower(), FALLBACK_COLOR_CODE)


def make_color_option(name: str, in_stock: bool = True, code: Optional[str] = None) -> ColorOption:
    return ColorOption(name=name, code=code or color_code(name), in_stock=in_stock)


def default_color_option() -> ColorOption:
    return ColorOption(name=DEFAULT_COLOR_NAME, code=DEFAULT_COLOR_CODE, in_stock=True)


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def color_from_tags(tags: Optional[Iterable]) -> Optional[str]:
    """Color encoded in the first ``color-<value>`` tag, first letter capitalised."""
    if not tags:
        return None
    for tag in tags:
        if isinstance(tag, str) and tag.startswith(COLOR_TAG_PREFIX):
            value = tag[len(COLOR_TAG_PREFIX):].strip()
            if value:
                return capitalize_first(value)
    return None
