"""
jsonui
Resolution and action engine for declarative JSON UI documents.
"""

from .value import Value, ValueKind, NULL, TRUE, FALSE
from .core import (
    Settings,
    get_settings,
    configure_logging,
    get_logger,
    JsonUIError,
    DocumentParseError,
    ParseErrorKind,
    ActionResolutionError,
    ResolutionErrorKind,
    ActionExecutionError,
    ExecutionErrorKind,
    DuplicateRegistrationError,
    StateTypeError,
)
from .document import Action, Definition, DocumentParser, Style, parse_document
from .state import StateStore, StateChange, LocalScope
from .bindings import Binding, BindingResolver, BindingSubscription, ResolutionContext
from .styles import DesignSystemProvider, ResolvedStyle, StaticDesignSystem, StyleResolver
from .actions import (
    ActionDefinition,
    ActionEngine,
    ActionPhase,
    ActionResult,
    ExecutionContext,
    ParameterizedResolver,
    Presenters,
    create_engine,
)
from .builtins import register_builtins
from .tree import BoundAction, ResolvedTree, TreeResolver

__version__ = "0.1.0"

__all__ = [
    # Values
    "Value",
    "ValueKind",
    "NULL",
    "TRUE",
    "FALSE",
    # Core
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Errors
    "JsonUIError",
    "DocumentParseError",
    "ParseErrorKind",
    "ActionResolutionError",
    "ResolutionErrorKind",
    "ActionExecutionError",
    "ExecutionErrorKind",
    "DuplicateRegistrationError",
    "StateTypeError",
    # Document
    "Action",
    "Definition",
    "DocumentParser",
    "Style",
    "parse_document",
    # State
    "StateStore",
    "StateChange",
    "LocalScope",
    # Bindings
    "Binding",
    "BindingResolver",
    "BindingSubscription",
    "ResolutionContext",
    # Styles
    "DesignSystemProvider",
    "ResolvedStyle",
    "StaticDesignSystem",
    "StyleResolver",
    # Actions
    "ActionDefinition",
    "ActionEngine",
    "ActionPhase",
    "ActionResult",
    "ExecutionContext",
    "ParameterizedResolver",
    "Presenters",
    "create_engine",
    "register_builtins",
    # Tree
    "BoundAction",
    "ResolvedTree",
    "TreeResolver",
]
