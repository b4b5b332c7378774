"""Resolved tree."""

from .nodes import (
    BoundAction,
    Insets,
    ResolvedComponent,
    ResolvedLayout,
    ResolvedNode,
    ResolvedSection,
    ResolvedSectionLayout,
    ResolvedSpacer,
    ResolvedTree,
    ZERO_INSETS,
)
from .resolver import TreeResolver

__all__ = [
    "BoundAction",
    "Insets",
    "ResolvedComponent",
    "ResolvedLayout",
    "ResolvedNode",
    "ResolvedSection",
    "ResolvedSectionLayout",
    "ResolvedSpacer",
    "ResolvedTree",
    "ZERO_INSETS",
    "TreeResolver",
]
