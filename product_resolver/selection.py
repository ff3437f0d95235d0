"""
Size/color selection state for a product page.

Selection changes are modelled as discrete events folded by :func:`reduce`,
so the order in which the product, the URL color and the resolved variants
arrive always produces the same selection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from product_resolver.exceptions import SelectionIncompleteError
from product_resolver.images import images_for
from product_resolver.models import CanonicalProduct, CartLine, ItemProjection, VariantSummary
from product_resolver.slug import kebab
from product_resolver.variants import find_variant_for_color


class SelectionState(Enum):
    NO_SELECTION = "no_selection"
    SIZE_ONLY = "size_only"
    COLOR_ONLY = "color_only"
    COMPLETE = "complete"


class Selection(BaseModel):
    """The user's current picks; empty strings mean nothing is picked."""
    size: str = ""
    color: str = ""

    class Config:
        frozen = True

    @property
    def state(self) -> SelectionState:
        return state_of(self)


@dataclass(frozen=True)
class ProductLoaded:
    product: CanonicalProduct


@dataclass(frozen=True)
class ColorTagInUrl:
    color: str


@dataclass(frozen=True)
class VariantsResolved:
    variants: tuple[VariantSummary, ...]


@dataclass(frozen=True)
class UserSelectedColor:
    color: str


@dataclass(frozen=True)
class UserSelectedSize:
    size: str


@dataclass(frozen=True)
class SelectionCleared:
    pass


SelectionEvent = Union[
    ProductLoaded,
    ColorTagInUrl,
    VariantsResolved,
    UserSelectedColor,
    UserSelectedSize,
    SelectionCleared,
]


@dataclass(frozen=True)
class SelectInPlace:
    """The picked color belongs to the loaded product; just reselect."""
    color: str


@dataclass(frozen=True)
class NavigateTo:
    """The picked color is another catalog entry; load its page."""
    slug: str


def can_add_to_cart(product: CanonicalProduct, selected_size: str, selected_color: str) -> bool:
    return bool(selected_size) and (not product.colors or bool(selected_color))


def display_images(product: CanonicalProduct, selected_color: Optional[str]) -> list[str]:
    return images_for(product, selected_color)


def state_of(selection: Selection, product: Optional[CanonicalProduct] = None) -> SelectionState:
    """Classify a selection; a product without colors is complete once sized."""
    if product is not None and can_add_to_cart(product, selection.size, selection.color):
        return SelectionState.COMPLETE
    if selection.size and selection.color:
        return SelectionState.COMPLETE
    if selection.size:
        return SelectionState.SIZE_ONLY
    if selection.color:
        return SelectionState.COLOR_ONLY
    return SelectionState.NO_SELECTION


def _color_from_url(product: Optional[CanonicalProduct], url_color: str) -> Optional[str]:
    if product is None or not product.colors:
        return None
    wanted = url_color.strip().lower()
    for option in product.colors:
        if option.name.lower() == wanted or kebab(option.name) == wanted:
            return option.name
    return product.colors[0].name


def reduce(
    selection: Selection,
    event: SelectionEvent,
    product: Optional[CanonicalProduct] = None,
) -> Selection:
    """
    Apply one event to a selection and return the new selection.

    ``product`` is the currently loaded product; ``ProductLoaded`` carries its
    own. Unknown events leave the selection unchanged.
    """
    if isinstance(event, ProductLoaded):
        return Selection()

    if isinstance(event, SelectionCleared):
        return Selection()

    if isinstance(event, UserSelectedSize):
        return selection.model_copy(update={"size": event.size.strip()})

    if isinstance(event, UserSelectedColor):
        return selection.model_copy(update={"color": event.color.strip()})

    if isinstance(event, ColorTagInUrl):
        if not event.color:
            return selection
        color = _color_from_url(product, event.color)
        if color is None:
            return selection
        return selection.model_copy(update={"color": color})

    if isinstance(event, VariantsResolved):
        if selection.color:
            match = find_variant_for_color(event.variants, selection.color)
            if match and match.color != selection.color:
                return selection.model_copy(update={"color": match.color})
            return selection
        current = next((v for v in event.variants if v.is_current_variant), None)
        if current is None:
            return selection
        return selection.model_copy(update={"color": current.color})

    return selection


def choose_color(variant: VariantSummary, current_id: str) -> Union[SelectInPlace, NavigateTo]:
    """Decide what clicking a color swatch does."""
    if variant.id == current_id or not variant.slug:
        return SelectInPlace(color=variant.color)
    return NavigateTo(slug=variant.slug)


def cart_line(product: CanonicalProduct, selection: Selection) -> CartLine:
    """Cart entry for the current selection."""
    if not can_add_to_cart(product, selection.size, selection.color):
        missing = []
        if not selection.size:
            missing.append("size")
        if product.colors and not selection.color:
            missing.append("color")
        raise SelectionIncompleteError(
            message=f"Cannot add to cart without {' and '.join(missing)}",
            product_id=product.id,
            missing=missing,
        )
    base_id = product.id or product.name
    return CartLine(
        id=product.id,
        name=product.name,
        price=product.price,
        image=display_images(product, selection.color)[0],
        color=selection.color or None,
        size=selection.size,
        line_id=f"{base_id}-{selection.color or 'default'}-{selection.size or 'default'}",
    )


def wishlist_item(product: CanonicalProduct, selected_color: Optional[str] = None) -> ItemProjection:
    color = selected_color or (product.colors[0].name if product.colors else None)
    return ItemProjection(
        id=product.id,
        name=product.name,
        price=product.price,
        image=product.primary_image,
        color=color,
    )
