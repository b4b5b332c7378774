"""Tests for hash module and document fingerprints."""

import pytest
from hypothesis import given, strategies as st

from jsonui.core.hash import (
    Algorithm,
    hash_string,
    hash_fields,
    create_hasher,
)
from jsonui.document import Definition


@pytest.mark.unit
def test_hash_string_algorithms():
    """xxhash64 yields 16 hex chars, sha256 yields 64."""
    assert len(hash_string("counter", Algorithm.XXHASH64)) == 16
    assert len(hash_string("counter", Algorithm.SHA256)) == 64
    assert hash_string("counter") == hash_string("counter", Algorithm.XXHASH64)


@pytest.mark.unit
def test_hash_string_truncate():
    """Test hash truncation."""
    full = hash_string("counter", Algorithm.SHA256)
    truncated = hash_string("counter", Algorithm.SHA256, truncate=16)

    assert len(truncated) == 16
    assert full.startswith(truncated)


@pytest.mark.unit
def test_hash_fields_order_matters():
    """Field order is significant and the separator prevents ambiguity."""
    assert hash_fields("a", "b") != hash_fields("b", "a")
    assert hash_fields("ab", "c") != hash_fields("a", "bc")
    assert hash_fields("a", "b") == hash_fields("a", "b")


@pytest.mark.unit
def test_create_hasher_invalid():
    """Test invalid algorithm."""
    with pytest.raises(ValueError):
        create_hasher("invalid")  # type: ignore


@pytest.mark.unit
def test_fingerprint_ignores_key_order(document_factory):
    """Documents differing only in key order share a fingerprint."""
    first = Definition.model_validate(document_factory(state={"a": 1, "b": 2}))
    second = Definition.model_validate(document_factory(state={"b": 2, "a": 1}))

    assert first.fingerprint() == second.fingerprint()


@pytest.mark.unit
def test_fingerprint_changes_with_content(document_factory):
    """Any content change produces a different fingerprint."""
    first = Definition.model_validate(document_factory(state={"a": 1}))
    second = Definition.model_validate(document_factory(state={"a": 2}))

    assert first.fingerprint() != second.fingerprint()


@given(st.text(min_size=1, max_size=1000))
def test_hash_deterministic(text):
    """Property test: hashing is deterministic."""
    assert hash_string(text) == hash_string(text)
