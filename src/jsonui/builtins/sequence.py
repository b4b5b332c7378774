"""sequence: run steps in order, each awaited before the next starts."""

from typing import Any

from pydantic import Field

from ..actions import ActionDefinition, ActionParameters, ExecutionContext, ParameterizedResolver
from ..bindings import ResolutionContext
from ..core import get_logger
from ..document import ActionBinding
from .common import resolve_nested

logger = get_logger(__name__)


class SequenceParameters(ActionParameters):
    steps: list[ActionBinding] = Field(default_factory=list)


class SequenceResolver(ParameterizedResolver[SequenceParameters]):
    """Resolves every step up front; one bad step fails the whole sequence."""

    parameters_model = SequenceParameters

    def build(self, params: SequenceParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"steps": tuple(resolve_nested(step, context) for step in params.steps)}


class SequenceHandler:
    """A failing step stops the sequence and propagates its error."""

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        steps: tuple[ActionDefinition, ...] = definition.parameter("steps", ())
        for position, step in enumerate(steps):
            logger.debug("sequence_step", step=position, action_kind=step.kind)
            await context.execute_definition(step)
