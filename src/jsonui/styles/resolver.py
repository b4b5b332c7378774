"""
Style Resolver
Flattens style references, inheritance chains and inline overrides.
"""

from collections.abc import Mapping

from ..core import get_logger
from ..core.cache import LRUCache
from ..core.config import Settings, get_settings
from ..document import ComponentStyles, Definition, Style
from .provider import DESIGN_SYSTEM_PREFIX, DesignSystemProvider
from .resolved import EMPTY_STYLE, ResolvedStateStyles, ResolvedStyle

logger = get_logger(__name__)


class StyleResolver:
    """
    Resolves style ids against a document's style table and a design system.

    Resolution is total: unknown ids, missing providers and inheritance
    cycles all degrade to fewer properties, never to an error.
    """

    def __init__(
        self,
        styles: Mapping[str, Style] | None = None,
        design_system: DesignSystemProvider | None = None,
        cache: LRUCache[ResolvedStyle] | None = None,
    ) -> None:
        self.styles: Mapping[str, Style] = styles or {}
        self.design_system = design_system
        self._cache = cache

    @classmethod
    def for_document(
        cls,
        definition: Definition,
        design_system: DesignSystemProvider | None = None,
        settings: Settings | None = None,
    ) -> "StyleResolver":
        settings = settings or get_settings()
        cache = None
        if settings.enable_style_cache:
            cache = LRUCache[ResolvedStyle](
                max_size=settings.style_cache_size,
                ttl_seconds=settings.style_cache_ttl,
            )
        return cls(definition.styles, design_system, cache)

    def resolve(self, reference: str | None, inline: Style | None = None) -> ResolvedStyle:
        """
        Resolve a style id, then overlay an inline style.

        An inline style's own `inherits` is used as the reference when no
        style id is given.
        """
        if reference is None and inline is not None:
            reference = inline.inherits
        resolved = self._resolve_reference(reference) if reference else EMPTY_STYLE
        if inline is not None:
            resolved = resolved.merged(inline)
        return resolved

    def resolve_states(
        self,
        styles: ComponentStyles | None = None,
        style_id: str | None = None,
        inline: Style | None = None,
    ) -> ResolvedStateStyles:
        """Per-state styles; without a `styles` set only `normal` is filled."""
        if styles is None:
            return ResolvedStateStyles(normal=self.resolve(style_id, inline))
        return ResolvedStateStyles(
            normal=self.resolve(styles.normal, inline),
            selected=self.resolve(styles.selected, inline) if styles.selected else None,
            disabled=self.resolve(styles.disabled, inline) if styles.disabled else None,
        )

    def lookup(self, reference: str) -> Style | None:
        """Single style record, without inheritance."""
        if reference.startswith(DESIGN_SYSTEM_PREFIX):
            if self.design_system is None:
                return None
            return self.design_system.resolve_style(reference)
        return self.styles.get(reference)

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    @property
    def cache(self) -> LRUCache[ResolvedStyle] | None:
        return self._cache

    def _resolve_reference(self, reference: str) -> ResolvedStyle:
        if self._cache is not None:
            cached = self._cache.get(reference)
            if cached is not None:
                return cached

        resolved = EMPTY_STYLE
        for style in self._chain(reference):
            resolved = resolved.merged(style)

        if self._cache is not None:
            self._cache.set(reference, resolved)
        return resolved

    def _chain(self, reference: str) -> list[Style]:
        """Inheritance chain ordered root first."""
        chain: list[Style] = []
        visited: set[str] = set()
        current: str | None = reference
        while current:
            if current in visited:
                logger.warning("style_cycle", style=reference, repeated=current)
                break
            visited.add(current)
            style = self.lookup(current)
            if style is None:
                logger.debug("style_not_found", style=current)
                break
            chain.append(style)
            current = style.inherits
        chain.reverse()
        return chain
