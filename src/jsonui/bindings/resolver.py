"""
Binding Resolver
Reads bind/localBind/dataSource/template declarations against state.

Resolution is total: anything unresolvable reads as Null.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core import get_logger
from ..core.id import SubscriptionID, new_subscription_id
from ..document import DataReference, DataReferenceKind
from ..expressions import evaluate_text, interpolate
from ..state import StateChange
from ..value import NULL, Value, ValueKind
from .context import ResolutionContext

logger = get_logger(__name__)

EXPR_KEY = "$expr"


class BindingKind(str, Enum):
    BIND = "bind"
    LOCAL_BIND = "localBind"
    DATA_SOURCE = "dataSource"
    TEMPLATE = "template"
    REFERENCE = "reference"


@dataclass(frozen=True)
class Binding:
    """A declared link between a UI property and state."""

    kind: BindingKind
    target: Any

    @classmethod
    def bind(cls, path: str) -> "Binding":
        return cls(BindingKind.BIND, path)

    @classmethod
    def local(cls, path: str) -> "Binding":
        return cls(BindingKind.LOCAL_BIND, path)

    @classmethod
    def data_source(cls, source_id: str) -> "Binding":
        return cls(BindingKind.DATA_SOURCE, source_id)

    @classmethod
    def template(cls, template: str) -> "Binding":
        return cls(BindingKind.TEMPLATE, template)

    @classmethod
    def reference(cls, ref: DataReference) -> "Binding":
        return cls(BindingKind.REFERENCE, ref)


def is_expression(value: Value) -> bool:
    """True for `{"$expr": "..."}` objects."""
    fields = value.as_dict()
    return fields is not None and len(fields) == 1 and fields.get(EXPR_KEY, NULL).kind is ValueKind.STRING


class BindingResolver:
    """Resolves bindings against a ResolutionContext."""

    def resolve(self, binding: Binding, context: ResolutionContext) -> Value:
        """One-shot read of a binding's current value."""
        if binding.kind == BindingKind.BIND:
            return context.read(binding.target)
        if binding.kind == BindingKind.LOCAL_BIND:
            return context.read_local(binding.target)
        if binding.kind == BindingKind.DATA_SOURCE:
            return self.resolve_data_source(binding.target, context)
        if binding.kind == BindingKind.TEMPLATE:
            return Value.of(interpolate(binding.target, context))
        return self.resolve_reference(binding.target, context)

    def resolve_reference(self, ref: DataReference, context: ResolutionContext) -> Value:
        if ref.template is not None:
            return Value.of(interpolate(ref.template, context))
        if ref.type == DataReferenceKind.STATIC:
            return ref.value if ref.value is not None else NULL
        if ref.type == DataReferenceKind.LOCAL_BINDING:
            return context.read_local(ref.path or "")
        return context.read(ref.path or "")

    def resolve_data_source(self, source_id: str, context: ResolutionContext) -> Value:
        if context.document is None:
            return NULL
        ref = context.document.data_sources.get(source_id)
        if ref is None:
            logger.debug("unknown_data_source", source=source_id)
            return NULL
        return self.resolve_reference(ref, context)

    def resolve_dynamic(self, value: Value, context: ResolutionContext) -> Value:
        """
        Resolve a parameter value that may embed expressions.

        `{"$expr": "..."}` objects are evaluated, containers are resolved
        recursively, everything else is returned unchanged.
        """
        if is_expression(value):
            return evaluate_text(value.raw[EXPR_KEY].raw, context)
        if value.kind is ValueKind.ARRAY:
            return Value.array([self.resolve_dynamic(item, context) for item in value.raw])
        if value.kind is ValueKind.OBJECT:
            return Value.object({k: self.resolve_dynamic(v, context) for k, v in value.raw.items()})
        return value

    def subscribe(
        self,
        binding: Binding,
        context: ResolutionContext,
        callback: Callable[[Value], None],
    ) -> "BindingSubscription":
        """Live binding: callback runs whenever the resolved value changes."""
        return BindingSubscription(self, binding, context, callback)


class BindingSubscription:
    """Re-evaluates a binding after each state change."""

    def __init__(
        self,
        resolver: BindingResolver,
        binding: Binding,
        context: ResolutionContext,
        callback: Callable[[Value], None],
    ) -> None:
        self.id: SubscriptionID = new_subscription_id()
        self.binding = binding
        self._resolver = resolver
        self._context = context
        self._callback = callback
        self.value = resolver.resolve(binding, context)
        self._observer = context.store.observe(self._on_change)
        self.active = True

    def _on_change(self, change: StateChange) -> None:
        if not self.active:
            return
        value = self._resolver.resolve(self.binding, self._context)
        if value != self.value:
            self.value = value
            self._callback(value)

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._context.store.remove_observer(self._observer)
            logger.debug("subscription_cancelled", subscription=self.id)
