"""
Canonical data models for the product resolution engine.
These are immutable value objects recomputed on every catalog fetch.
"""

from typing import Optional

from pydantic import BaseModel, Field

PLACEHOLDER_IMAGE = "/images/placeholder.jpg"
DEFAULT_SIZES = ("S", "M", "L")


class ColorOption(BaseModel):
    """One selectable color of a product."""
    name: str
    code: str
    in_stock: bool = Field(True, alias="inStock")

    class Config:
        frozen = True
        populate_by_name = True


class CanonicalProduct(BaseModel):
    """
    Canonical product model - the normalized representation handed to
    the render layer.

    ``normalize`` guarantees ``images``, ``sizes`` and ``colors`` are non-empty;
    the model itself accepts partial products so every engine function must
    tolerate empty lists.
    """
    id: str
    name: str
    price: float = 0.0
    images: list[str] = Field(default_factory=lambda: [PLACEHOLDER_IMAGE])
    sizes: list[str] = Field(default_factory=lambda: list(DEFAULT_SIZES))
    colors: list[ColorOption] = Field(default_factory=list)
    variants: list[dict] = Field(default_factory=list)
    description: str = "No description available"
    handle: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    color_images: dict[str, list[str]] = Field(default_factory=dict, alias="colorImages")
    defaults_applied: list[str] = Field(default_factory=list, alias="defaultsApplied")

    class Config:
        frozen = True
        populate_by_name = True

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else PLACEHOLDER_IMAGE

    def has_declared_colors(self) -> bool:
        """True when the colors came from the payload rather than the default."""
        return bool(self.colors) and "colors" not in self.defaults_applied


class VariantSummary(BaseModel):
    """Lightweight descriptor of one sibling color variant."""
    id: str
    name: str
    base_name: str = Field(..., alias="baseName")
    color: str
    slug: str
    image: str
    price: float = 0.0
    is_current_variant: bool = Field(False, alias="isCurrentVariant")

    class Config:
        frozen = True
        populate_by_name = True


class Slug(BaseModel):
    """Decoded navigation identifier. Any field may be missing."""
    base_name: Optional[str] = Field(None, alias="baseName")
    color: Optional[str] = None
    id: Optional[str] = None

    class Config:
        frozen = True
        populate_by_name = True


class ItemProjection(BaseModel):
    """The minimal product view given to the cart and wishlist stores."""
    id: str
    name: str
    price: float
    image: str
    color: Optional[str] = None

    class Config:
        frozen = True


class CartLine(ItemProjection):
    """A cart entry for one product/color/size combination."""
    size: str
    line_id: str = Field(..., alias="lineId")

    class Config:
        frozen = True
        populate_by_name = True
