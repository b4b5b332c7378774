"""Error taxonomy.

Parsing and actions fail loudly with the exceptions below. Bindings and
styles never raise; they degrade to Null and empty styles.
"""

from enum import Enum
from typing import Any


class JsonUIError(Exception):
    """Base class for all engine errors."""

    pass


class ParseErrorKind(str, Enum):
    """Why a document failed to parse."""

    INVALID_ENCODING = "invalidEncoding"
    DECODING_ERROR = "decodingError"


class DocumentParseError(JsonUIError):
    """Document could not be turned into a Definition."""

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        underlying: Exception | None = None,
        path: str | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.underlying = underlying
        self.path = path
        super().__init__(self.describe())

    def describe(self) -> str:
        """Human-readable description including the failing location."""
        if self.path:
            return f"{self.kind.value}: {self.message} (at {self.path})"
        return f"{self.kind.value}: {self.message}"

    @classmethod
    def invalid_encoding(cls, message: str, underlying: Exception | None = None) -> "DocumentParseError":
        return cls(ParseErrorKind.INVALID_ENCODING, message, underlying)

    @classmethod
    def decoding_error(
        cls, message: str, underlying: Exception | None = None, path: str | None = None
    ) -> "DocumentParseError":
        return cls(ParseErrorKind.DECODING_ERROR, message, underlying, path)


class ResolutionErrorKind(str, Enum):
    """Why an action could not be turned into an ActionDefinition."""

    UNKNOWN_ACTION_KIND = "unknownActionKind"
    UNKNOWN_ACTION_REFERENCE = "unknownActionReference"
    INVALID_PARAMETERS = "invalidParameters"
    RESOLUTION_FAILED = "resolutionFailed"


class ActionResolutionError(JsonUIError):
    """Action resolution failed (fatal to that action's resolution)."""

    def __init__(
        self,
        kind: ResolutionErrorKind,
        message: str,
        action_kind: str | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.action_kind = action_kind
        super().__init__(f"{kind.value}: {message}")

    @classmethod
    def unknown_kind(cls, action_kind: str) -> "ActionResolutionError":
        return cls(
            ResolutionErrorKind.UNKNOWN_ACTION_KIND,
            f"No resolver registered for action kind '{action_kind}'",
            action_kind,
        )

    @classmethod
    def unknown_reference(cls, reference: str) -> "ActionResolutionError":
        return cls(
            ResolutionErrorKind.UNKNOWN_ACTION_REFERENCE,
            f"Action '{reference}' is not defined in the document",
        )

    @classmethod
    def invalid_parameters(cls, action_kind: str, message: str) -> "ActionResolutionError":
        return cls(ResolutionErrorKind.INVALID_PARAMETERS, message, action_kind)


class ExecutionErrorKind(str, Enum):
    """Why an action failed while executing."""

    NO_HANDLER = "noHandler"
    MISSING_PARAMETER = "missingParameter"
    INVALID_PARAMETER_TYPE = "invalidParameterType"
    EXECUTION_FAILED = "executionFailed"
    CANCELLED = "cancelled"


class ActionExecutionError(JsonUIError):
    """Action execution failed (scoped to a single invocation)."""

    def __init__(
        self,
        kind: ExecutionErrorKind,
        message: str,
        action_kind: str | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.action_kind = action_kind
        super().__init__(f"{kind.value}: {message}")

    @classmethod
    def no_handler(cls, action_kind: str) -> "ActionExecutionError":
        return cls(
            ExecutionErrorKind.NO_HANDLER,
            f"No handler registered for action kind '{action_kind}'",
            action_kind,
        )

    @classmethod
    def missing_parameter(cls, name: str, action_kind: str | None = None) -> "ActionExecutionError":
        return cls(ExecutionErrorKind.MISSING_PARAMETER, f"Missing parameter '{name}'", action_kind)

    @classmethod
    def invalid_parameter_type(
        cls, name: str, expected: type, actual: Any, action_kind: str | None = None
    ) -> "ActionExecutionError":
        return cls(
            ExecutionErrorKind.INVALID_PARAMETER_TYPE,
            f"Parameter '{name}' expected {expected.__name__}, got {type(actual).__name__}",
            action_kind,
        )

    @classmethod
    def failed(cls, message: str, action_kind: str | None = None) -> "ActionExecutionError":
        return cls(ExecutionErrorKind.EXECUTION_FAILED, message, action_kind)

    @classmethod
    def cancelled(cls, message: str, action_kind: str | None = None) -> "ActionExecutionError":
        return cls(ExecutionErrorKind.CANCELLED, message, action_kind)


class DuplicateRegistrationError(JsonUIError):
    """A resolver or handler is already registered for this action kind."""

    def __init__(self, registry: str, action_kind: str) -> None:
        self.registry = registry
        self.action_kind = action_kind
        super().__init__(f"{registry}: action kind '{action_kind}' is already registered")


class StateTypeError(JsonUIError):
    """A state mutation addressed a value of the wrong shape."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")
