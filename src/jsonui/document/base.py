"""Shared pydantic configuration for document models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator
from pydantic.alias_generators import to_camel

from ..value import Value


class DocumentModel(BaseModel):
    """Base for every decoded document record.

    JSON keys are camelCase; Python attributes are snake_case. Records are
    immutable once parsed. Unknown keys are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Encode back to the JSON wire shape (camelCase, absent fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OpenDocumentModel(DocumentModel):
    """Document record that keeps unrecognized keys.

    Keys that match no declared field are collected into
    `additional_properties` on decode and flattened back on encode.
    """

    additional_properties: dict[str, Value] = {}

    @model_validator(mode="before")
    @classmethod
    def _collect_unknown_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known: set[str] = set()
        for name, field in cls.model_fields.items():
            known.add(name)
            if field.alias:
                known.add(field.alias)
        extras = dict(data.get("additionalProperties") or data.get("additional_properties") or {})
        declared: dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                declared[key] = value
            else:
                extras[key] = value
        declared.pop("additional_properties", None)
        declared["additionalProperties"] = extras
        return declared

    @model_serializer(mode="wrap")
    def _flatten_unknown_keys(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        extras = data.pop("additionalProperties", None)
        if extras is None:
            extras = data.pop("additional_properties", None)
        for key, value in (extras or {}).items():
            data.setdefault(key, value)
        return data
