"""Data references (static values, state bindings, templates)."""

from enum import Enum

from pydantic import model_validator

from ..value import Value
from .base import DocumentModel


class DataReferenceKind(str, Enum):
    STATIC = "static"
    BINDING = "binding"
    LOCAL_BINDING = "localBinding"


class DataReference(DocumentModel):
    """
    Where a piece of displayed data comes from.

    `static` uses `value`; `binding`/`localBinding` use `path`. Any kind may
    carry a `template` instead, which takes precedence.
    """

    type: DataReferenceKind
    value: Value | None = None
    path: str | None = None
    template: str | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "DataReference":
        if self.template is not None:
            return self
        if self.type == DataReferenceKind.STATIC and self.value is None:
            raise ValueError("static data reference requires 'value' or 'template'")
        if self.type != DataReferenceKind.STATIC and not self.path:
            raise ValueError(f"{self.type.value} data reference requires 'path' or 'template'")
        return self
