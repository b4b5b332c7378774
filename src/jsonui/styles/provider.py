"""Design system collaborator."""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ..document import Style

DESIGN_SYSTEM_PREFIX = "@"


@runtime_checkable
class DesignSystemProvider(Protocol):
    """Resolves `@`-prefixed style references outside the document's style table.

    Renderers may additionally look for `can_render`/`render` hooks on the
    same object; the engine only calls `resolve_style`.
    """

    def resolve_style(self, reference: str) -> Style | None:
        """Return the style for a reference such as "@button.primary", or None."""
        ...


class StaticDesignSystem:
    """Dict-backed design system.

    Keys may be given with or without the leading "@".
    """

    def __init__(self, styles: Mapping[str, Style | Mapping[str, Any]]) -> None:
        self._styles: dict[str, Style] = {
            key.removeprefix(DESIGN_SYSTEM_PREFIX): (
                value if isinstance(value, Style) else Style.model_validate(value)
            )
            for key, value in styles.items()
        }

    def resolve_style(self, reference: str) -> Style | None:
        return self._styles.get(reference.removeprefix(DESIGN_SYSTEM_PREFIX))

    def __len__(self) -> int:
        return len(self._styles)
