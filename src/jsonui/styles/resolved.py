"""Flattened style produced by the style resolver."""

from dataclasses import dataclass, fields, replace
from typing import Any

from pydantic.alias_generators import to_camel

from ..document import Dimension, FontWeight, Fractional, Style, TextAlignment


@dataclass(frozen=True)
class ResolvedStyle:
    """Concrete style: every property is either set or None (renderer default)."""

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

    # Shadow
    shadow_color: str | None = None
    shadow_radius: float | None = None
    shadow_x: float | None = None
    shadow_y: float | None = None

    tint_color: str | None = None

    # Sizing
    width: Dimension | None = None
    height: Dimension | None = None
    min_width: Dimension | None = None
    min_height: Dimension | None = None
    max_width: Dimension | None = None
    max_height: Dimension | None = None

    # Padding, per edge
    padding_top: float | None = None
    padding_bottom: float | None = None
    padding_leading: float | None = None
    padding_trailing: float | None = None

    def merged(self, style: Style) -> "ResolvedStyle":
        """
        Overlay a sparse style, property by property.

        An empty `shadow` or `padding` object clears the inherited values.
        Padding shorthand expands to edges; explicit edges win.
        """
        updates: dict[str, Any] = {}
        for name in _PLAIN_PROPERTIES:
            value = getattr(style, name)
            if value is not None:
                updates[name] = value

        shadow = style.shadow
        if shadow is not None:
            if shadow.is_empty:
                updates.update(shadow_color=None, shadow_radius=None, shadow_x=None, shadow_y=None)
            else:
                for field, value in (
                    ("shadow_color", shadow.color),
                    ("shadow_radius", shadow.radius),
                    ("shadow_x", shadow.x),
                    ("shadow_y", shadow.y),
                ):
                    if value is not None:
                        updates[field] = value

        padding = style.padding
        if padding is not None:
            if padding.is_empty:
                updates.update(
                    padding_top=None, padding_bottom=None, padding_leading=None, padding_trailing=None
                )
            else:
                if padding.top is not None or padding.vertical is not None:
                    updates["padding_top"] = padding.resolved_top
                if padding.bottom is not None or padding.vertical is not None:
                    updates["padding_bottom"] = padding.resolved_bottom
                if padding.leading is not None or padding.horizontal is not None:
                    updates["padding_leading"] = padding.resolved_leading
                if padding.trailing is not None or padding.horizontal is not None:
                    updates["padding_trailing"] = padding.resolved_trailing

        return replace(self, **updates) if updates else self

    @property
    def has_shadow(self) -> bool:
        return any(
            v is not None for v in (self.shadow_color, self.shadow_radius, self.shadow_x, self.shadow_y)
        )

    @property
    def has_border(self) -> bool:
        return self.border_color is not None and (self.border_width or 0) > 0

    @property
    def is_empty(self) -> bool:
        return self == EMPTY_STYLE

    def to_dict(self) -> dict[str, Any]:
        """Set properties only, camelCase keys, enums as their JSON strings."""
        out: dict[str, Any] = {}
        for name in _ALL_PROPERTIES:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, Fractional):
                value = value.to_document()
            elif hasattr(value, "value"):
                value = value.value
            out[to_camel(name)] = value
        return out


_PLAIN_PROPERTIES = (
    "font_family",
    "font_size",
    "font_weight",
    "text_color",
    "text_alignment",
    "background_color",
    "corner_radius",
    "border_width",
    "border_color",
    "tint_color",
    "width",
    "height",
    "min_width",
    "min_height",
    "max_width",
    "max_height",
)

_ALL_PROPERTIES = tuple(f.name for f in fields(ResolvedStyle))

EMPTY_STYLE = ResolvedStyle()


@dataclass(frozen=True)
class ResolvedStateStyles:
    """Per-state styles of an interactive component."""

    normal: ResolvedStyle
    selected: ResolvedStyle | None = None
    disabled: ResolvedStyle | None = None
