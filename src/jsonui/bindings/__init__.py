"""Binding and expression resolution against state."""

from .context import ResolutionContext
from .resolver import (
    Binding,
    BindingKind,
    BindingResolver,
    BindingSubscription,
    EXPR_KEY,
    is_expression,
)

__all__ = [
    "ResolutionContext",
    "Binding",
    "BindingKind",
    "BindingResolver",
    "BindingSubscription",
    "EXPR_KEY",
    "is_expression",
]
