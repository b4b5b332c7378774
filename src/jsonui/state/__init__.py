"""Path-addressable state."""

from .keypath import parse_keypath, format_keypath
from .store import StateStore, StateChange, StateSnapshot, LocalScope

__all__ = [
    "parse_keypath",
    "format_keypath",
    "StateStore",
    "StateChange",
    "StateSnapshot",
    "LocalScope",
]
