"""Tests for cache module and style caching."""

import time
import pytest
from hypothesis import given, strategies as st

from jsonui.core.cache import LRUCache
from jsonui.document import Style
from jsonui.styles import EMPTY_STYLE, ResolvedStyle, StyleResolver


def _style(size: float) -> ResolvedStyle:
    return EMPTY_STYLE.merged(Style(font_size=size))


def test_lru_basic():
    """Test basic cache operations."""
    cache = LRUCache[ResolvedStyle](max_size=3)

    cache.set("body", _style(14))
    cache.set("title", _style(24))
    cache.set("caption", _style(11))

    assert cache.get("body").font_size == 14
    assert cache.get("title").font_size == 24
    assert cache.get("caption").font_size == 11
    assert len(cache) == 3


def test_lru_eviction():
    """Least recently used style is evicted at the size limit."""
    cache = LRUCache[ResolvedStyle](max_size=2)

    cache.set("body", _style(14))
    cache.set("title", _style(24))
    _ = cache.get("body")
    cache.set("caption", _style(11))  # Evicts "title"

    assert cache.get("title") is None
    assert cache.get("body") is not None
    assert cache.get("caption") is not None
    assert cache.stats.evictions == 1


def test_lru_ttl():
    """Test TTL expiration."""
    cache = LRUCache[ResolvedStyle](max_size=10, ttl_seconds=1)

    cache.set("body", _style(14))
    assert cache.get("body") is not None

    time.sleep(1.1)

    assert cache.get("body") is None


def test_lru_delete_and_clear():
    """Test deletion and clearing."""
    cache = LRUCache[ResolvedStyle](max_size=10)

    cache.set("body", _style(14))
    cache.set("title", _style(24))
    assert cache.delete("body") is True
    assert cache.delete("body") is False
    assert "title" in cache

    cache.clear()
    assert len(cache) == 0
    assert "title" not in cache


def test_stats_hit_miss():
    """Test statistics tracking."""
    cache = LRUCache[ResolvedStyle](max_size=10)
    cache.set("body", _style(14))

    _ = cache.get("body")  # Hit
    _ = cache.get("missing")  # Miss

    stats = cache.stats.to_dict()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5


def test_invalid_max_size():
    """Test validation."""
    with pytest.raises(ValueError):
        LRUCache[ResolvedStyle](max_size=0)


@given(st.lists(st.text(min_size=1, max_size=10), min_size=1, max_size=50))
def test_cache_preserves_values(keys):
    """Property test: cache preserves values correctly."""
    cache = LRUCache[str](max_size=100)

    for key in keys:
        cache.set(key, f"value_{key}")

    for key in keys:
        assert cache.get(key) == f"value_{key}"


# ============================================================================
# Style resolver cache
# ============================================================================

def test_resolver_caches_resolved_references():
    """Second resolution of a reference is served from the cache."""
    cache = LRUCache[ResolvedStyle](max_size=10)
    resolver = StyleResolver(
        {"base": Style(font_size=14), "title": Style(inherits="base", font_weight="bold")},
        cache=cache,
    )

    first = resolver.resolve("title")
    second = resolver.resolve("title")

    assert first is second
    assert cache.stats.hits == 1
    assert cache.stats.misses == 1


def test_resolver_inline_override_not_cached():
    """Inline overrides apply on top of the cached reference, not into it."""
    cache = LRUCache[ResolvedStyle](max_size=10)
    resolver = StyleResolver({"base": Style(font_size=14)}, cache=cache)

    overridden = resolver.resolve("base", Style(font_size=20))
    plain = resolver.resolve("base")

    assert overridden.font_size == 20
    assert plain.font_size == 14


def test_resolver_clear_cache():
    """clear_cache drops every cached style."""
    cache = LRUCache[ResolvedStyle](max_size=10)
    resolver = StyleResolver({"base": Style(font_size=14)}, cache=cache)
    resolver.resolve("base")

    resolver.clear_cache()

    assert len(cache) == 0
