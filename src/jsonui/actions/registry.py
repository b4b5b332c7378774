"""
Action Registries
Kind-keyed registries for resolvers and handlers.

Registration rejects conflicts: a kind has at most one resolver and one
handler. Hosts that want to replace a registrant unregister it first.
"""

import threading
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..core import get_logger
from ..core.errors import ActionResolutionError, DuplicateRegistrationError, ResolutionErrorKind
from ..document import Action
from .types import ActionDefinition, ActionHandler, ActionResolver, HandlerFunc, as_handler

if TYPE_CHECKING:
    from ..bindings import ResolutionContext

logger = get_logger(__name__)

T = TypeVar("T")


class _KindRegistry(Generic[T]):
    name = "registry"

    def __init__(self) -> None:
        self._entries: dict[str, T] = {}
        self._lock = threading.Lock()

    def register(self, kind: str, entry: T) -> None:
        """
        Register an entry for an action kind.

        Raises:
            DuplicateRegistrationError: If the kind is already registered
        """
        with self._lock:
            if kind in self._entries:
                logger.warning("duplicate_registration", registry=self.name, action_kind=kind)
                raise DuplicateRegistrationError(self.name, kind)
            self._entries[kind] = entry
        logger.debug("registered", registry=self.name, action_kind=kind)

    def unregister(self, kind: str) -> bool:
        with self._lock:
            removed = self._entries.pop(kind, None) is not None
        if removed:
            logger.debug("unregistered", registry=self.name, action_kind=kind)
        return removed

    def get(self, kind: str) -> T | None:
        return self._entries.get(kind)

    def kinds(self) -> list[str]:
        return sorted(self._entries)

    def values(self) -> list[T]:
        with self._lock:
            return list(self._entries.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        return {"registry": self.name, "total": len(self._entries), "kinds": self.kinds()}


class ActionResolverRegistry(_KindRegistry[ActionResolver]):
    """Resolvers by action kind. Also serves as parse-time validator."""

    name = "resolvers"

    def validate(self, action: Action) -> None:
        """
        Parse-time check of an action's parameters.

        Kinds without a resolver pass; they fail later at resolution with
        unknownActionKind, so a host may register them after parsing.
        """
        resolver = self.get(action.type)
        if resolver is None:
            return
        try:
            resolver.validate(action, self)
        except ActionResolutionError:
            raise
        except Exception as e:
            raise ActionResolutionError(
                ResolutionErrorKind.RESOLUTION_FAILED, str(e), action.type
            ) from e

    def resolve(self, action: Action, context: "ResolutionContext") -> ActionDefinition:
        """
        Resolve an action with its kind's resolver.

        Raises:
            ActionResolutionError: unknownActionKind, invalidParameters, or
                resolutionFailed when the resolver itself crashes
        """
        resolver = self.get(action.type)
        if resolver is None:
            raise ActionResolutionError.unknown_kind(action.type)
        try:
            return resolver.resolve(action, context)
        except ActionResolutionError:
            raise
        except Exception as e:
            logger.error("resolver_failed", action_kind=action.type, error=str(e), exc_info=True)
            raise ActionResolutionError(
                ResolutionErrorKind.RESOLUTION_FAILED,
                f"Resolver for '{action.type}' failed: {e}",
                action.type,
            ) from e


class ActionHandlerRegistry(_KindRegistry[ActionHandler]):
    """Handlers by action kind. Coroutine functions are accepted as handlers."""

    name = "handlers"

    def register(self, kind: str, entry: ActionHandler | HandlerFunc) -> None:  # type: ignore[override]
        super().register(kind, as_handler(entry))
