"""
State Store
Path-addressable state shared by bindings and action handlers.
"""

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..core import get_logger
from ..core.errors import StateTypeError
from ..core.id import ObserverID, new_observer_id
from ..value import NULL, TRUE, Value, ValueKind
from . import keypath

logger = get_logger(__name__)


@dataclass(frozen=True)
class StateChange:
    """A committed write, delivered to observers."""

    path: str
    old: Value
    new: Value
    scope: str | None = None

    @property
    def qualified_path(self) -> str:
        """Path including the local scope namespace (`local.<owner>.<path>`)."""
        return f"local.{self.scope}.{self.path}" if self.scope else self.path


Observer = Callable[[StateChange], None]


class StateStore:
    """
    Mutable state container for one document instance.

    Global state lives at the root; each local-state owner gets its own
    namespace, so a path in one scope never reaches another scope.

    Writers are serialized by a lock and never mutate in place: every write
    builds a new tree and swaps it in, so readers need no lock and a
    failing mutation leaves the store untouched.
    """

    def __init__(self, initial: Mapping[str, Any] | Value | None = None) -> None:
        self._global: Value = Value.of(initial) if initial is not None else Value.object()
        if self._global.kind is not ValueKind.OBJECT:
            raise StateTypeError("", "initial state must be an object")
        self._locals: dict[str, Value] = {}
        self._lock = threading.RLock()
        self._observers: dict[ObserverID, Observer] = {}
        self._dirty: set[str] = set()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, path: str, *, scope: str | None = None) -> Value:
        """Value at path, or Null if any segment is missing."""
        return keypath.read(self._area(scope), keypath.parse_keypath(path))

    def get_python(self, path: str, *, scope: str | None = None) -> Any:
        return self.get(path, scope=scope).to_python()

    def _area(self, scope: str | None) -> Value:
        if scope is None:
            return self._global
        return self._locals.get(scope, NULL)

    @property
    def values(self) -> Value:
        """Current global state tree."""
        return self._global

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, path: str, value: Any, *, scope: str | None = None) -> None:
        """Store value at path, materializing intermediate objects."""
        new = Value.of(value)
        self.update(path, lambda _current: new, scope=scope)

    def toggle(self, path: str, *, scope: str | None = None) -> None:
        """Flip the boolean at path; a missing value becomes true."""

        def flip(current: Value) -> Value:
            if current.is_null:
                return TRUE
            flag = current.as_bool()
            if flag is None:
                raise StateTypeError(path, f"cannot toggle a {current.kind.value}")
            return Value.of(not flag)

        self.update(path, flip, scope=scope)

    def append(self, path: str, value: Any, *, scope: str | None = None) -> None:
        """Append to the array at path."""
        item = Value.of(value)

        def add(current: Value) -> Value:
            items = current.as_list()
            if items is None:
                raise StateTypeError(path, f"cannot append to a {current.kind.value}")
            return Value(ValueKind.ARRAY, items + (item,))

        self.update(path, add, scope=scope)

    def update(
        self,
        path: str,
        fn: Callable[[Value], Any],
        *,
        scope: str | None = None,
    ) -> Value:
        """
        Atomic read-modify-write.

        Args:
            path: Keypath to update
            fn: Receives the current Value, returns the new value
            scope: Local scope owner id, None for global state

        Returns:
            The stored Value

        Raises:
            StateTypeError: If the path cannot hold a value; nothing is written
        """
        segments = keypath.parse_keypath(path)
        if not segments:
            raise StateTypeError(path, "empty keypath")

        with self._lock:
            area = self._area(scope)
            if scope is not None and area.is_null:
                area = Value.object()
            old = keypath.read(area, segments)
            new = Value.of(fn(old))
            updated = keypath.write(area, segments, new, path)
            self._swap(scope, updated)
            change = StateChange(path=path, old=old, new=new, scope=scope)
            self._dirty.add(change.qualified_path)

        self._notify(change)
        return new

    def seed(self, values: Mapping[str, Any]) -> list[str]:
        """
        Add top-level global keys that are not present yet.

        Keys are stored literally, so `"a.b"` names one key rather than a
        path. Existing keys keep their values.

        Returns:
            The keys that were added
        """
        with self._lock:
            fields = dict(self._global.raw)
            added = [key for key in values if key not in fields]
            if not added:
                return []
            changes = []
            for key in added:
                fields[key] = Value.of(values[key])
                changes.append(StateChange(path=key, old=NULL, new=fields[key]))
                self._dirty.add(key)
            self._global = Value.object(fields)

        for change in changes:
            self._notify(change)
        return added

    def remove(self, path: str, *, scope: str | None = None) -> bool:
        """Delete the entry at path. Returns False if nothing was there."""
        segments = keypath.parse_keypath(path)
        with self._lock:
            area = self._area(scope)
            old = keypath.read(area, segments)
            updated, removed = keypath.delete(area, segments)
            if not removed:
                return False
            self._swap(scope, updated)
            change = StateChange(path=path, old=old, new=NULL, scope=scope)
            self._dirty.add(change.qualified_path)

        self._notify(change)
        return True

    def _swap(self, scope: str | None, tree: Value) -> None:
        if scope is None:
            self._global = tree
        else:
            self._locals[scope] = tree

    # ------------------------------------------------------------------
    # Local scopes
    # ------------------------------------------------------------------

    def declare_scope(self, owner_id: str, initial: Mapping[str, Any] | None = None) -> "LocalScope":
        """
        Create the local namespace for owner_id.

        Initial values are applied once per owner; re-declaring (for example
        on re-resolution of the same tree) keeps the current values.
        """
        with self._lock:
            if owner_id not in self._locals:
                self._locals[owner_id] = Value.object(initial or {})
                logger.debug("scope_declared", owner=owner_id, keys=list((initial or {}).keys()))
        return LocalScope(self, owner_id)

    def scope(self, owner_id: str) -> "LocalScope":
        return LocalScope(self, owner_id)

    def has_scope(self, owner_id: str) -> bool:
        return owner_id in self._locals

    def get_scope_values(self, owner_id: str) -> Value:
        """Whole local state object of an owner (Null if never declared)."""
        return self._locals.get(owner_id, NULL)

    # ------------------------------------------------------------------
    # Snapshots & dirty tracking
    # ------------------------------------------------------------------

    def snapshot(self) -> "StateSnapshot":
        with self._lock:
            return StateSnapshot(self._global, dict(self._locals))

    def restore(self, snapshot: "StateSnapshot") -> None:
        """Replace all state with a snapshot. Observers are not notified."""
        with self._lock:
            self._global = snapshot.global_state
            self._locals = dict(snapshot.local_state)
            self._dirty.clear()

    @property
    def dirty_paths(self) -> frozenset[str]:
        return frozenset(self._dirty)

    def consume_dirty_paths(self) -> "set[str]":
        """Return and clear the paths written since the last call."""
        with self._lock:
            dirty, self._dirty = self._dirty, set()
        return dirty

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def observe(self, callback: Observer) -> ObserverID:
        token = new_observer_id()
        with self._lock:
            self._observers[token] = callback
        return token

    def remove_observer(self, token: ObserverID) -> None:
        with self._lock:
            self._observers.pop(token, None)

    def _notify(self, change: StateChange) -> None:
        for callback in list(self._observers.values()):
            try:
                callback(change)
            except Exception as e:
                logger.error("observer_failed", path=change.qualified_path, error=str(e))


@dataclass(frozen=True)
class StateSnapshot:
    """Point-in-time copy of a store (cheap: trees are immutable)."""

    global_state: Value
    local_state: Mapping[str, Value]


class LocalScope:
    """State API bound to one local-state owner."""

    def __init__(self, store: StateStore, owner_id: str) -> None:
        self.store = store
        self.owner_id = owner_id

    def get(self, path: str) -> Value:
        return self.store.get(path, scope=self.owner_id)

    def set(self, path: str, value: Any) -> None:
        self.store.set(path, value, scope=self.owner_id)

    def toggle(self, path: str) -> None:
        self.store.toggle(path, scope=self.owner_id)

    def append(self, path: str, value: Any) -> None:
        self.store.append(path, value, scope=self.owner_id)

    def update(self, path: str, fn: Callable[[Value], Any]) -> Value:
        return self.store.update(path, fn, scope=self.owner_id)

    def remove(self, path: str) -> bool:
        return self.store.remove(path, scope=self.owner_id)

    def __repr__(self) -> str:
        return f"LocalScope(owner_id={self.owner_id!r})"
