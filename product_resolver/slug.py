"""
Slug codec for product-page navigation.

A slug carries ``{baseName, color, id}`` as ``<base>---<color>_<id>``, or
``<base>_<id>`` when there is no color. Decoding never fails: malformed input
yields a partially filled :class:`Slug`.
"""

import re
from typing import Optional

from product_resolver.models import Slug

COLOR_SEPARATOR = "---"
ID_SEPARATOR = "_"
TITLE_SEPARATOR = " - "

_WHITESPACE = re.compile(r"\s+")


def kebab(text: Optional[str]) -> str:
    """Lower-case ``text`` and hyphenate whitespace runs."""
    if not text:
        return ""
    return _WHITESPACE.sub("-", text.strip().lower())


def split_title(title: Optional[str]) -> tuple[str, Optional[str]]:
    """Split ``"Base - Color"`` into ``("Base", "Color")``.

    A title without the separator is returned whole with no color.
    """
    if not title:
        return "", None
    if TITLE_SEPARATOR in title:
        base, _, color = title.partition(TITLE_SEPARATOR)
        color = color.strip()
        return base.strip(), color or None
    return title.strip(), None


def encode_slug(base_name: str, color: Optional[str], product_id: str) -> str:
    """Build the navigation slug for one catalog entry."""
    name_part = kebab(base_name)
    if color:
        name_part = f"{name_part}{COLOR_SEPARATOR}{kebab(color)}"
    return f"{name_part}{ID_SEPARATOR}{product_id}"


def decode_slug(slug: Optional[str]) -> Slug:
    """Best-effort parse of a slug; callers must tolerate missing fields."""
    if not slug:
        return Slug()

    if ID_SEPARATOR not in slug:
        return Slug(id=slug)

    name_part, _, product_id = slug.rpartition(ID_SEPARATOR)

    if COLOR_SEPARATOR in name_part:
        base_name, _, color = name_part.partition(COLOR_SEPARATOR)
        return Slug(
            base_name=base_name or None,
            color=color or None,
            id=product_id or None,
        )

    return Slug(base_name=name_part or None, color=None, id=product_id or None)


def title_from_slug(slug: Optional[str]) -> str:
    """Readable page title recovered from the name part of a slug."""
    decoded = decode_slug(slug)
    words = []
    for part in (decoded.base_name, decoded.color):
        if part:
            words.extend(w for w in part.split("-") if w)
    return " ".join(w.capitalize() for w in words)
