"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .logging_config import configure_logging, get_logger, LogContext
from .json import loads_json, dumps_json, JSONParseError
from .validate import ValidationResult, check_document_size, check_document_depth
from .hash import Algorithm, hash_string, hash_fields
from .cache import LRUCache, Stats
from .errors import (
    JsonUIError,
    ParseErrorKind,
    DocumentParseError,
    ResolutionErrorKind,
    ActionResolutionError,
    ExecutionErrorKind,
    ActionExecutionError,
    DuplicateRegistrationError,
    StateTypeError,
)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "loads_json",
    "dumps_json",
    "JSONParseError",
    # Validation
    "ValidationResult",
    "check_document_size",
    "check_document_depth",
    # Hashing
    "Algorithm",
    "hash_string",
    "hash_fields",
    # Caching
    "LRUCache",
    "Stats",
    # Errors
    "JsonUIError",
    "ParseErrorKind",
    "DocumentParseError",
    "ResolutionErrorKind",
    "ActionResolutionError",
    "ExecutionErrorKind",
    "ActionExecutionError",
    "DuplicateRegistrationError",
    "StateTypeError",
]
