"""JSON value model.

`Value` is the closed, immutable sum type used for state, action parameters
and pass-through component properties:

    Null | Bool | Int | Double | String | Array[Value] | Object[str, Value]

Arrays are tuples and objects are read-only mappings, so a Value can be
shared between the state store, resolved trees and action definitions
without defensive copies.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .core.json import dumps_json, loads_json


class ValueKind(str, Enum):
    """Tag of a Value."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


_EMPTY_OBJECT: Mapping[str, "Value"] = MappingProxyType({})


@dataclass(frozen=True, slots=True, eq=False)
class Value:
    """Immutable JSON value. Build with `Value.of(...)`."""

    kind: ValueKind
    raw: Any = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, obj: Any) -> "Value":
        """
        Convert plain Python/JSON data into a Value.

        Args:
            obj: None, bool, int, float, str, sequence, mapping, or a Value

        Raises:
            TypeError: If obj (or anything nested in it) is not JSON-like
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return NULL
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return TRUE if obj else FALSE
        if isinstance(obj, int):
            return cls(ValueKind.INT, obj)
        if isinstance(obj, float):
            return cls(ValueKind.DOUBLE, obj)
        if isinstance(obj, str):
            return cls(ValueKind.STRING, obj)
        if isinstance(obj, Mapping):
            return cls.object({str(k): v for k, v in obj.items()})
        if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
            return cls.array(obj)
        raise TypeError(f"Cannot convert {type(obj).__name__} to Value")

    @classmethod
    def array(cls, items: Sequence[Any] = ()) -> "Value":
        return cls(ValueKind.ARRAY, tuple(cls.of(item) for item in items))

    @classmethod
    def object(cls, fields: Mapping[str, Any] | None = None) -> "Value":
        if not fields:
            return cls(ValueKind.OBJECT, _EMPTY_OBJECT)
        return cls(ValueKind.OBJECT, MappingProxyType({k: cls.of(v) for k, v in fields.items()}))

    @classmethod
    def from_json(cls, text: str | bytes) -> "Value":
        """Decode a JSON document into a Value."""
        return cls.of(loads_json(text))

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_python(self) -> Any:
        """Convert back to plain Python data (dict, list, str, ...)."""
        if self.kind is ValueKind.ARRAY:
            return [item.to_python() for item in self.raw]
        if self.kind is ValueKind.OBJECT:
            return {key: item.to_python() for key, item in self.raw.items()}
        return self.raw

    def to_json(self) -> str:
        return dumps_json(self.to_python())

    def stringify(self) -> str:
        """Render for string interpolation."""
        if self.kind is ValueKind.NULL:
            return ""
        if self.kind is ValueKind.BOOL:
            return "true" if self.raw else "false"
        if self.kind is ValueKind.DOUBLE:
            if math.isfinite(self.raw) and self.raw == int(self.raw):
                return str(int(self.raw))
            return repr(self.raw)
        if self.kind is ValueKind.STRING:
            return self.raw
        if self.kind is ValueKind.INT:
            return str(self.raw)
        return self.to_json()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    @property
    def is_number(self) -> bool:
        return self.kind in (ValueKind.INT, ValueKind.DOUBLE)

    @property
    def truthy(self) -> bool:
        """Condition semantics: null, false, 0, "" and empty containers are false."""
        if self.kind is ValueKind.NULL:
            return False
        return bool(self.raw)

    def as_bool(self) -> bool | None:
        return self.raw if self.kind is ValueKind.BOOL else None

    def as_int(self) -> int | None:
        if self.kind is ValueKind.INT:
            return self.raw
        if self.kind is ValueKind.DOUBLE and self.raw.is_integer():
            return int(self.raw)
        return None

    def as_float(self) -> float | None:
        return float(self.raw) if self.is_number else None

    def as_str(self) -> str | None:
        return self.raw if self.kind is ValueKind.STRING else None

    def as_list(self) -> tuple["Value", ...] | None:
        return self.raw if self.kind is ValueKind.ARRAY else None

    def as_dict(self) -> Mapping[str, "Value"] | None:
        return self.raw if self.kind is ValueKind.OBJECT else None

    def get(self, key: str) -> "Value":
        """Object member, or Null when absent or not an object."""
        if self.kind is ValueKind.OBJECT:
            return self.raw.get(key, NULL)
        return NULL

    def at(self, index: int) -> "Value":
        """Array element (negative indices count from the end), or Null."""
        if self.kind is ValueKind.ARRAY and -len(self.raw) <= index < len(self.raw):
            return self.raw[index]
        return NULL

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind is other.kind and self.raw == other.raw

    def __hash__(self) -> int:
        if self.kind in (ValueKind.ARRAY, ValueKind.OBJECT):
            return hash((self.kind, dumps_json(self.to_python(), sort_keys=True)))
        return hash((self.kind, self.raw))

    def __repr__(self) -> str:
        return f"Value.of({self.to_python()!r})"

    # ------------------------------------------------------------------
    # pydantic integration
    # ------------------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: value.to_python()
            ),
        )

    @classmethod
    def _validate(cls, obj: Any) -> "Value":
        try:
            return cls.of(obj)
        except TypeError as e:
            raise ValueError(str(e)) from e


NULL = Value(ValueKind.NULL, None)
TRUE = Value(ValueKind.BOOL, True)
FALSE = Value(ValueKind.BOOL, False)


__all__ = ["Value", "ValueKind", "NULL", "TRUE", "FALSE"]
