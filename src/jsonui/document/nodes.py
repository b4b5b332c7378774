"""Document tree nodes.

Routing is by the `type` field:

    vstack | hstack | zstack  -> Layout
    sectionLayout             -> SectionLayout
    forEach                   -> ForEach
    spacer                    -> Spacer
    anything else             -> Component (open kind, extra keys preserved)
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Discriminator, Field, Tag

from ..value import Value
from .action import ActionBinding
from .base import DocumentModel, OpenDocumentModel
from .data import DataReference
from .style import ComponentStyles, Padding, Style


class LayoutKind(str, Enum):
    VSTACK = "vstack"
    HSTACK = "hstack"
    ZSTACK = "zstack"


class Component(OpenDocumentModel):
    """Any non-container node. `type` is the open component kind."""

    type: str = Field(min_length=1)
    id: str | None = None
    style_id: str | None = None
    styles: ComponentStyles | None = None
    style: Style | None = None
    padding: Padding | None = None

    text: str | None = None
    placeholder: str | None = None
    bind: str | None = None
    local_bind: str | None = None
    data_source_id: str | None = None
    is_selected_binding: str | None = None
    fill_width: bool | None = None
    data: dict[str, DataReference] = Field(default_factory=dict)

    actions: dict[str, ActionBinding] = Field(default_factory=dict)
    state: dict[str, Value] | None = None


class Layout(DocumentModel):
    """Stack container."""

    type: LayoutKind
    id: str | None = None
    alignment: str | None = None
    spacing: float | None = None
    padding: Padding | None = None
    children: list["Node"] = Field(default_factory=list)
    state: dict[str, Value] | None = None


class ForEach(DocumentModel):
    """Repeats `template` once per element of the array at `items`."""

    type: Literal["forEach"]
    id: str | None = None
    items: str
    item_variable: str = "item"
    index_variable: str = "index"
    layout: LayoutKind = LayoutKind.VSTACK
    spacing: float | None = None
    alignment: str | None = None
    padding: Padding | None = None
    template: "Node"
    empty_view: "Node | None" = None
    state: dict[str, Value] | None = None


class Spacer(DocumentModel):
    type: Literal["spacer"]
    min_length: float | None = None


# ============================================================================
# Section layouts
# ============================================================================


class SectionType(str, Enum):
    HORIZONTAL = "horizontal"
    LIST = "list"
    GRID = "grid"
    FLOW = "flow"


class SnapBehavior(str, Enum):
    NONE = "none"
    VIEW_ALIGNED = "viewAligned"
    PAGING = "paging"


class AdaptiveColumns(DocumentModel):
    min_width: float = Field(gt=0)


class ColumnConfig(DocumentModel):
    adaptive: AdaptiveColumns


class ItemDimensions(DocumentModel):
    width: float | None = None
    height: float | None = None
    aspect_ratio: float | None = None


class SectionLayoutConfig(DocumentModel):
    type: SectionType
    item_spacing: float | None = None
    line_spacing: float | None = None
    content_insets: Padding | None = None
    columns: int | ColumnConfig | None = None
    item_dimensions: ItemDimensions | None = None
    shows_dividers: bool = False
    snap_behavior: SnapBehavior = SnapBehavior.NONE


class Section(DocumentModel):
    id: str | None = None
    layout: SectionLayoutConfig
    header: "Node | None" = None
    footer: "Node | None" = None
    sticky_header: bool = False
    children: list["Node"] = Field(default_factory=list)
    data_source: str | None = None
    item_template: "Node | None" = None
    item_variable: str = "item"
    index_variable: str = "index"


class SectionLayout(DocumentModel):
    type: Literal["sectionLayout"]
    id: str | None = None
    section_spacing: float | None = None
    sections: list[Section] = Field(default_factory=list)
    state: dict[str, Value] | None = None


# ============================================================================
# Node union
# ============================================================================

_TAGS = {
    "vstack": "layout",
    "hstack": "layout",
    "zstack": "layout",
    "sectionLayout": "sectionLayout",
    "forEach": "forEach",
    "spacer": "spacer",
}


def _node_tag(data: Any) -> str | None:
    if isinstance(data, dict):
        kind = data.get("type")
        if not isinstance(kind, str):
            return None
        return _TAGS.get(kind, "component")
    if isinstance(data, Layout):
        return "layout"
    if isinstance(data, SectionLayout):
        return "sectionLayout"
    if isinstance(data, ForEach):
        return "forEach"
    if isinstance(data, Spacer):
        return "spacer"
    if isinstance(data, Component):
        return "component"
    return None


Node = Annotated[
    Union[
        Annotated[Layout, Tag("layout")],
        Annotated[SectionLayout, Tag("sectionLayout")],
        Annotated[ForEach, Tag("forEach")],
        Annotated[Spacer, Tag("spacer")],
        Annotated[Component, Tag("component")],
    ],
    Discriminator(_node_tag),
]

Layout.model_rebuild()
ForEach.model_rebuild()
Section.model_rebuild()
SectionLayout.model_rebuild()
