"""Action records in document form.

An action is a JSON object with a string `type`; every other key is a
parameter:

    {"type": "setState", "path": "counter", "value": 10}

`type` is an open vocabulary. What a kind's parameters must look like is
known only to the resolver registered for it. When parsing is given a
resolver registry (validation context key `action_resolvers`), each action
is checked by its resolver so a malformed action fails the whole parse.
"""

from typing import Annotated, Any, NewType, Protocol, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationInfo,
    model_serializer,
    model_validator,
)

from ..core.errors import ActionResolutionError
from ..value import Value

ActionKind = NewType("ActionKind", str)

ACTION_RESOLVERS_CONTEXT_KEY = "action_resolvers"


class SupportsActionValidation(Protocol):
    """What parsing needs from a resolver registry."""

    def validate(self, action: "Action") -> None:
        ...


class Action(BaseModel):
    """A document-form action: kind plus raw parameters."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(min_length=1)
    parameters: dict[str, Value] = Field(default_factory=dict)

    @property
    def kind(self) -> ActionKind:
        return ActionKind(self.type)

    def parameter(self, name: str) -> Value | None:
        return self.parameters.get(name)

    @classmethod
    def create(cls, kind: str, parameters: dict[str, Any] | None = None) -> "Action":
        """Build from Python values. A parameter may be named `parameters` but not `type`."""
        if not kind:
            raise ValueError("Action kind must be a non-empty string")
        if parameters and "type" in parameters:
            raise ValueError("'type' is reserved for the action kind")
        return cls.model_construct(
            type=kind, parameters={k: Value.of(v) for k, v in (parameters or {}).items()}
        )

    @model_validator(mode="before")
    @classmethod
    def _split_parameters(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if not isinstance(data.get("type"), str):
            raise ValueError("Action must have a string 'type' field")
        return {
            "type": data["type"],
            "parameters": {k: v for k, v in data.items() if k != "type"},
        }

    @model_validator(mode="after")
    def _check_with_resolver(self, info: ValidationInfo) -> "Action":
        resolvers: SupportsActionValidation | None = (info.context or {}).get(
            ACTION_RESOLVERS_CONTEXT_KEY
        )
        if resolvers is not None:
            try:
                resolvers.validate(self)
            except ActionResolutionError as e:
                raise ValueError(f"{self.type}: {e.message}") from e
        return self

    @model_serializer(mode="plain")
    def _flatten(self) -> dict[str, Any]:
        return {"type": self.type, **{k: v.to_python() for k, v in self.parameters.items()}}

    def to_document(self) -> dict[str, Any]:
        return self._flatten()


def _binding_tag(data: Any) -> str:
    return "reference" if isinstance(data, str) else "inline"


ActionBinding = Annotated[
    Union[Annotated[str, Tag("reference")], Annotated[Action, Tag("inline")]],
    Discriminator(_binding_tag),
]
"""Reference into the document's `actions` map, or an inline action."""
