"""Document model and parser."""

from .action import Action, ActionBinding, ActionKind, ACTION_RESOLVERS_CONTEXT_KEY
from .data import DataReference, DataReferenceKind
from .style import (
    Style,
    ComponentStyles,
    Padding,
    Shadow,
    FontWeight,
    TextAlignment,
    Fractional,
    Dimension,
)
from .nodes import (
    Node,
    Component,
    Layout,
    LayoutKind,
    ForEach,
    Spacer,
    SectionLayout,
    Section,
    SectionLayoutConfig,
    SectionType,
    SnapBehavior,
)
from .definition import (
    Definition,
    RootComponent,
    RootActions,
    EdgeInsets,
    ColorScheme,
    DocumentVersion,
    CURRENT_VERSION,
)
from .parser import DocumentParser, parse_document, format_location

__all__ = [
    "Action",
    "ActionBinding",
    "ActionKind",
    "ACTION_RESOLVERS_CONTEXT_KEY",
    "DataReference",
    "DataReferenceKind",
    "Style",
    "ComponentStyles",
    "Padding",
    "Shadow",
    "FontWeight",
    "TextAlignment",
    "Fractional",
    "Dimension",
    "Node",
    "Component",
    "Layout",
    "LayoutKind",
    "ForEach",
    "Spacer",
    "SectionLayout",
    "Section",
    "SectionLayoutConfig",
    "SectionType",
    "SnapBehavior",
    "Definition",
    "RootComponent",
    "RootActions",
    "EdgeInsets",
    "ColorScheme",
    "DocumentVersion",
    "CURRENT_VERSION",
    "DocumentParser",
    "parse_document",
    "format_location",
]
