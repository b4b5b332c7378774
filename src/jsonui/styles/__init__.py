"""Style resolution."""

from .provider import DESIGN_SYSTEM_PREFIX, DesignSystemProvider, StaticDesignSystem
from .resolved import EMPTY_STYLE, ResolvedStateStyles, ResolvedStyle
from .resolver import StyleResolver

__all__ = [
    "DESIGN_SYSTEM_PREFIX",
    "DesignSystemProvider",
    "StaticDesignSystem",
    "EMPTY_STYLE",
    "ResolvedStateStyles",
    "ResolvedStyle",
    "StyleResolver",
]
