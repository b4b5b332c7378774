"""Top-level document definition."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import Field, field_validator, model_validator

from ..core.hash import hash_string
from ..core.json import dumps_json
from ..value import Value
from .action import Action, ActionBinding
from .base import DocumentModel
from .data import DataReference
from .nodes import Node
from .style import Style

_SEMVER_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True, order=True)
class DocumentVersion:
    """Semantic version of the document format."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "DocumentVersion":
        m = _SEMVER_RE.match(text)
        if m is None:
            raise ValueError(f"Invalid document version '{text}', expected major.minor.patch")
        return cls(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    def is_compatible_with(self, other: "DocumentVersion") -> bool:
        return self.major == other.major

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


CURRENT_VERSION = DocumentVersion(0, 1, 0)


class ColorScheme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class EdgeInsets(DocumentModel):
    """Root insets. A bare number applies to every edge."""

    top: float | None = None
    bottom: float | None = None
    leading: float | None = None
    trailing: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _uniform(cls, data: Any) -> Any:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return {"top": data, "bottom": data, "leading": data, "trailing": data}
        return data


class RootActions(DocumentModel):
    on_appear: ActionBinding | None = None
    on_disappear: ActionBinding | None = None


class RootComponent(DocumentModel):
    background_color: str | None = None
    style_id: str | None = None
    color_scheme: ColorScheme | None = None
    edge_insets: EdgeInsets | None = None
    actions: RootActions | None = None
    children: list[Node]


class Definition(DocumentModel):
    """A parsed document."""

    id: str = Field(min_length=1)
    version: str | None = None
    state: dict[str, Value] = Field(default_factory=dict)
    styles: dict[str, Style] = Field(default_factory=dict)
    data_sources: dict[str, DataReference] = Field(default_factory=dict)
    actions: dict[str, Action] = Field(default_factory=dict)
    root: RootComponent

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: str | None) -> str | None:
        if v is not None:
            DocumentVersion.parse(v)
        return v

    @property
    def document_version(self) -> DocumentVersion:
        return DocumentVersion.parse(self.version) if self.version else CURRENT_VERSION

    def is_compatible(self) -> bool:
        """True if this engine can interpret the document's format version."""
        return self.document_version.is_compatible_with(CURRENT_VERSION)

    def to_json(self, indent: bool = False) -> str:
        return dumps_json(self.to_document(), indent=indent)

    def fingerprint(self) -> str:
        """Stable content hash (key order independent)."""
        return hash_string(dumps_json(self.to_document(), sort_keys=True))
