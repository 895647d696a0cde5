"""
Slide Deck Models for SlideCraft

A Presentation is an ordered list of Slides. Each Slide is a tagged variant
keyed by `type`; every variant shares the same optional semantic fields plus
three per-field customization maps (positions, fontSizes, rotations) keyed by
a stable field identifier such as "title", "left_0" or "grid_2".

JSON on the wire uses camelCase (fontSizes); Python attributes are snake_case.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


class SlideType(str, Enum):
    """Slide variants understood by the renderers."""
    TITLE = "title"
    STATEMENT = "statement"
    TWO_COLUMN = "two-column"
    QUOTE = "quote"
    BIG_NUMBER = "big-number"
    GRID = "grid"
    SPLIT = "split"
    CONTENT = "content"
    IMAGE = "image"
    END = "end"


class CustomizationKind(str, Enum):
    """Per-field visual overrides a user can apply to a slide."""
    POSITION = "position"
    FONT_SIZE = "fontSize"
    ROTATION = "rotation"


class StatCard(BaseModel):
    """One side of a split (before/after) slide."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    title: str = Field("", description="Card heading")
    value: str = Field("", description="Headline value, e.g. '3x' or '$1M'")
    label: str = Field("", description="Caption under the value")


class GridItem(BaseModel):
    """A single tile in a grid slide."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    icon: str = Field("", description="Emoji or short icon name")
    label: str = Field("", description="Tile label")


class FieldOffset(BaseModel):
    """Drag offset of one field relative to its laid-out position."""
    x: float = 0.0
    y: float = 0.0


ColumnContent = Union[List[str], StatCard]


# Fields the editor may replace through a whole-field edit
SEMANTIC_FIELDS = (
    "title", "subtitle", "text", "author", "keywords",
    "left", "right",
    "number", "label", "detail",
    "items",
    "image", "caption",
    "cta",
)


class Slide(BaseModel):
    """
    One slide in a presentation.

    Unknown fields emitted by the model are kept so that they survive a
    round-trip through the editor untouched.
    """

    # Model output often has bare numbers ("number": 42); they are kept as text
    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)

    type: SlideType = Field(..., description="Slide variant")

    title: Optional[str] = None
    subtitle: Optional[str] = None
    text: Optional[str] = None
    author: Optional[str] = None
    keywords: Optional[List[str]] = None

    # Two-column slides use string lists, split slides use StatCards
    left: Optional[ColumnContent] = None
    right: Optional[ColumnContent] = None

    # Big number
    number: Optional[str] = None
    label: Optional[str] = None
    detail: Optional[str] = None

    # Grid
    items: Optional[List[GridItem]] = None

    # Image
    image: Optional[str] = None
    caption: Optional[str] = None

    # End
    cta: Optional[str] = None

    # Per-field customization
    positions: Optional[Dict[str, FieldOffset]] = None
    font_sizes: Optional[Dict[str, float]] = Field(None, alias="fontSizes")
    rotations: Optional[Dict[str, float]] = None

    @model_validator(mode="after")
    def _columns_are_homogeneous(self) -> "Slide":
        """left/right must not mix a bullet list with a stat card."""
        if self.left is not None and self.right is not None:
            if isinstance(self.left, list) != isinstance(self.right, list):
                raise ValueError(
                    "left and right must both be lists or both be records"
                )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in wire format (camelCase, absent fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def field_keys(self) -> List[str]:
        """
        Stable identifiers of the addressable text fields on this slide.

        Scalar fields use their own name; list entries use `<field>_<i>`,
        with grid tiles reported as `grid_<i>`.
        """
        keys: List[str] = []
        for name in ("title", "subtitle", "text", "author", "number",
                     "label", "detail", "caption", "cta"):
            if getattr(self, name) is not None:
                keys.append(name)
        for side in ("left", "right"):
            value = getattr(self, side)
            if isinstance(value, list):
                keys.extend(f"{side}_{i}" for i in range(len(value)))
            elif value is not None:
                keys.extend(f"{side}_{part}" for part in ("title", "value", "label"))
        if self.items:
            keys.extend(f"grid_{i}" for i in range(len(self.items)))
        if self.keywords:
            keys.extend(f"keyword_{i}" for i in range(len(self.keywords)))
        return keys


class Presentation(BaseModel):
    """A titled, ordered sequence of slides."""

    title: str = Field("", description="Deck title")
    slides: List[Slide] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def slide_count(self) -> int:
        return len(self.slides)


DEFAULT_SLIDE_TITLE = "New Slide"
DEFAULT_SLIDE_TEXT = "Click to edit this text"
DEFAULT_IMAGE_CAPTION = "Add a caption"


def new_content_slide() -> Slide:
    """Slide inserted by a plain 'add slide' action."""
    return Slide(
        type=SlideType.CONTENT,
        title=DEFAULT_SLIDE_TITLE,
        text=DEFAULT_SLIDE_TEXT
    )


def new_image_slide(image_ref: str) -> Slide:
    """Slide inserted by an 'add image' action."""
    return Slide(
        type=SlideType.IMAGE,
        image=image_ref,
        caption=DEFAULT_IMAGE_CAPTION
    )
