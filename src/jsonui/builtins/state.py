"""setState / toggleState."""

from typing import Any

from pydantic import Field

from ..actions import ActionDefinition, ActionParameters, ExecutionContext, ParameterizedResolver
from ..bindings import ResolutionContext
from ..core import get_logger
from ..value import Value
from .common import state_target

logger = get_logger(__name__)


class SetStateParameters(ActionParameters):
    path: str = Field(min_length=1)
    value: Value


class SetStateResolver(ParameterizedResolver[SetStateParameters]):
    """The value stays unevaluated until execution, so `$expr` sees current state."""

    parameters_model = SetStateParameters

    def build(self, params: SetStateParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"path": params.path, "value": params.value}


class SetStateHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        value = context.evaluate(definition.parameter("value"))
        context.store.set(path, value, scope=scope)
        logger.debug("state_set", path=path, scope=scope)


class PathParameters(ActionParameters):
    path: str = Field(min_length=1)


class ToggleStateResolver(ParameterizedResolver[PathParameters]):
    parameters_model = PathParameters

    def build(self, params: PathParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"path": params.path}


class ToggleStateHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        context.store.toggle(path, scope=scope)
