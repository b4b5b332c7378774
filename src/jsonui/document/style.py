"""Style records."""

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from .base import DocumentModel


class FontWeight(str, Enum):
    ULTRA_LIGHT = "ultraLight"
    THIN = "thin"
    LIGHT = "light"
    REGULAR = "regular"
    MEDIUM = "medium"
    SEMIBOLD = "semibold"
    BOLD = "bold"
    HEAVY = "heavy"
    BLACK = "black"


class TextAlignment(str, Enum):
    LEADING = "leading"
    CENTER = "center"
    TRAILING = "trailing"


class Fractional(DocumentModel):
    """Size relative to the container (`{"fractional": 0.5}`)."""

    fractional: float = Field(ge=0.0)


Dimension = float | Fractional


class Padding(DocumentModel):
    """Edge insets with `horizontal`/`vertical` shorthand.

    Explicit edges win over the shorthand. A padding with every field
    absent is an explicit clear when merged over an inherited style.
    """

    top: float | None = None
    bottom: float | None = None
    leading: float | None = None
    trailing: float | None = None
    horizontal: float | None = None
    vertical: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _uniform(cls, data: Any) -> Any:
        # `"padding": 16` means every edge
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return {"top": data, "bottom": data, "leading": data, "trailing": data}
        return data

    @property
    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.top, self.bottom, self.leading, self.trailing, self.horizontal, self.vertical)
        )

    @property
    def resolved_top(self) -> float:
        return self.top if self.top is not None else (self.vertical or 0.0)

    @property
    def resolved_bottom(self) -> float:
        return self.bottom if self.bottom is not None else (self.vertical or 0.0)

    @property
    def resolved_leading(self) -> float:
        return self.leading if self.leading is not None else (self.horizontal or 0.0)

    @property
    def resolved_trailing(self) -> float:
        return self.trailing if self.trailing is not None else (self.horizontal or 0.0)


class Shadow(DocumentModel):
    """Drop shadow. All fields absent means "clear inherited shadow"."""

    color: str | None = None
    radius: float | None = None
    x: float | None = None
    y: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.color is None and self.radius is None and self.x is None and self.y is None


class Style(DocumentModel):
    """Sparse set of visual properties, optionally inheriting from another style."""

    inherits: str | None = None

    # Typography
    font_family: str | None = None
    font_size: float | None = None
    font_weight: FontWeight | None = None
    text_color: str | None = None
    text_alignment: TextAlignment | None = None

    # Background & border
    background_color: str | None = None
    corner_radius: float | None = None
    border_width: float | None = None
    border_color: str | None = None

    shadow: Shadow | None = None
    tint_color: str | None = None

    # Sizing
    width: Dimension | None = None
    height: Dimension | None = None
    min_width: Dimension | None = None
    min_height: Dimension | None = None
    max_width: Dimension | None = None
    max_height: Dimension | None = None

    padding: Padding | None = None


class ComponentStyles(DocumentModel):
    """Per-state style references for interactive components."""

    normal: str
    selected: str | None = None
    disabled: str | None = None
