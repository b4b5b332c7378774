"""
Array actions
appendToArray, removeFromArray, toggleInArray, setArrayItem, clearArray.

Every mutation is a single StateStore.update, so a failure leaves the
array as it was and observers see one change per action.
"""

from typing import Any

from pydantic import Field, model_validator

from ..actions import ActionDefinition, ActionParameters, ExecutionContext, ParameterizedResolver
from ..bindings import ResolutionContext
from ..core.errors import StateTypeError
from ..value import Value, ValueKind
from .common import state_target


class ArrayValueParameters(ActionParameters):
    path: str = Field(min_length=1)
    value: Value


class RemoveFromArrayParameters(ActionParameters):
    path: str = Field(min_length=1)
    index: int | None = None
    value: Value | None = None

    @model_validator(mode="after")
    def _index_or_value(self) -> "RemoveFromArrayParameters":
        if self.index is None and self.value is None:
            raise ValueError("removeFromArray requires 'index' or 'value'")
        return self


class SetArrayItemParameters(ActionParameters):
    path: str = Field(min_length=1)
    index: int = Field(ge=0)
    value: Value


class ClearArrayParameters(ActionParameters):
    path: str = Field(min_length=1)


def _items(current: Value, path: str) -> tuple[Value, ...]:
    items = current.as_list()
    if items is None:
        raise StateTypeError(path, f"expected an array, found {current.kind.value}")
    return items


# ============================================================================
# Resolvers
# ============================================================================


class ArrayValueResolver(ParameterizedResolver[ArrayValueParameters]):
    parameters_model = ArrayValueParameters

    def build(self, params: ArrayValueParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"path": params.path, "value": params.value}


class RemoveFromArrayResolver(ParameterizedResolver[RemoveFromArrayParameters]):
    parameters_model = RemoveFromArrayParameters

    def build(self, params: RemoveFromArrayParameters, context: ResolutionContext) -> dict[str, Any]:
        # index wins when both are given
        if params.index is not None:
            return {"path": params.path, "index": params.index}
        return {"path": params.path, "value": params.value}


class SetArrayItemResolver(ParameterizedResolver[SetArrayItemParameters]):
    parameters_model = SetArrayItemParameters

    def build(self, params: SetArrayItemParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"path": params.path, "index": params.index, "value": params.value}


class ClearArrayResolver(ParameterizedResolver[ClearArrayParameters]):
    parameters_model = ClearArrayParameters

    def build(self, params: ClearArrayParameters, context: ResolutionContext) -> dict[str, Any]:
        return {"path": params.path}


# ============================================================================
# Handlers
# ============================================================================


class AppendToArrayHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        context.store.append(path, context.evaluate(definition.parameter("value")), scope=scope)


class RemoveFromArrayHandler:
    """Removes the item at `index`, or every item equal to `value`."""

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        index = definition.parameter("index")

        if index is not None:

            def remove_at(current: Value) -> Value:
                items = _items(current, path)
                position = index + len(items) if index < 0 else index
                if not 0 <= position < len(items):
                    raise StateTypeError(path, f"index {index} out of range for {len(items)} items")
                return Value(ValueKind.ARRAY, items[:position] + items[position + 1:])

            context.store.update(path, remove_at, scope=scope)
            return

        target = context.evaluate(definition.parameter("value"))

        def remove_matching(current: Value) -> Value:
            items = _items(current, path)
            return Value(ValueKind.ARRAY, tuple(item for item in items if item != target))

        context.store.update(path, remove_matching, scope=scope)


class ToggleInArrayHandler:
    """Removes `value` if present, appends it otherwise. A missing array counts as empty."""

    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        target = context.evaluate(definition.parameter("value"))

        def toggle(current: Value) -> Value:
            items = () if current.is_null else _items(current, path)
            if target in items:
                return Value(ValueKind.ARRAY, tuple(item for item in items if item != target))
            return Value(ValueKind.ARRAY, items + (target,))

        context.store.update(path, toggle, scope=scope)


class SetArrayItemHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        index = definition.typed_parameter("index", int)
        value = context.evaluate(definition.parameter("value"))

        def replace_item(current: Value) -> Value:
            items = _items(current, path)
            if index < len(items):
                return Value(ValueKind.ARRAY, items[:index] + (value,) + items[index + 1:])
            if index == len(items):
                return Value(ValueKind.ARRAY, items + (value,))
            raise StateTypeError(path, f"index {index} out of range for {len(items)} items")

        context.store.update(path, replace_item, scope=scope)


class ClearArrayHandler:
    async def execute(self, definition: ActionDefinition, context: ExecutionContext) -> None:
        path, scope = state_target(context, definition.typed_parameter("path", str))
        context.store.set(path, [], scope=scope)
