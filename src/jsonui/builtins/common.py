"""Helpers shared by the built-in actions."""

from ..actions import ActionDefinition, ExecutionContext
from ..bindings import ResolutionContext
from ..core.errors import ActionResolutionError
from ..document import Action, ActionBinding

LOCAL_PREFIX = "local."


def state_target(context: ExecutionContext, path: str) -> tuple[str, str | None]:
    """
    Split a state path into (path, scope).

    `local.<path>` addresses the local state of the node the action was
    bound in; anything else is global state.
    """
    if path.startswith(LOCAL_PREFIX) and context.scope_owner is not None:
        return path[len(LOCAL_PREFIX):], context.scope_owner
    return path, None


def resolve_nested(binding: ActionBinding, context: ResolutionContext) -> ActionDefinition:
    """Resolve a nested action (sequence step, callback) with the same registry."""
    if isinstance(binding, Action):
        action = binding
    else:
        action = context.document.actions.get(binding) if context.document is not None else None
        if action is None:
            raise ActionResolutionError.unknown_reference(binding)
    if context.resolvers is None:
        raise ActionResolutionError.unknown_kind(action.type)
    return context.resolvers.resolve(action, context)

