"""
Base Resolver Implementation
Resolvers that validate an action's parameters with a pydantic model.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..core import get_logger
from ..core.errors import ActionResolutionError
from ..document import ACTION_RESOLVERS_CONTEXT_KEY, Action, ActionKind
from ..document.parser import format_location
from .types import ActionDefinition

if TYPE_CHECKING:
    from ..bindings import ResolutionContext
    from .registry import ActionResolverRegistry

logger = get_logger(__name__)


class ActionParameters(BaseModel):
    """Parameter schema of one action kind (camelCase keys, unknown keys ignored)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class NoParameters(ActionParameters):
    pass


P = TypeVar("P", bound=ActionParameters)


class ParameterizedResolver(ABC, Generic[P]):
    """
    Abstract base for resolvers with a declared parameter schema.

    Subclasses set `parameters_model` and implement build(); validation is
    shared between parse time and resolution time.
    """

    parameters_model: ClassVar[type[ActionParameters]] = NoParameters

    def validate(self, action: Action, registry: "ActionResolverRegistry | None" = None) -> P:
        """
        Validate an action's parameters.

        Nested actions (sequence steps, callbacks) are validated against
        the same registry.

        Raises:
            ActionResolutionError: invalidParameters with the failing field
        """
        raw = {name: value.to_python() for name, value in action.parameters.items()}
        context = {ACTION_RESOLVERS_CONTEXT_KEY: registry} if registry is not None else None
        try:
            return self.parameters_model.model_validate(raw, context=context)  # type: ignore[return-value]
        except ValidationError as e:
            first = e.errors()[0]
            location = format_location(first.get("loc", ()))
            message = f"{location}: {first['msg']}" if location else first["msg"]
            logger.debug("action_parameters_invalid", action_kind=action.type, error=message)
            raise ActionResolutionError.invalid_parameters(action.type, message) from e

    def resolve(self, action: Action, context: "ResolutionContext") -> ActionDefinition:
        params = self.validate(action, context.resolvers)
        data = {k: v for k, v in self.build(params, context).items() if v is not None}
        return ActionDefinition(ActionKind(action.type), MappingProxyType(data))

    @abstractmethod
    def build(self, params: P, context: "ResolutionContext") -> Mapping[str, Any]:
        """Produce execution data from validated parameters."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
