"""Tests for ID generation system."""

import time
from datetime import datetime, timezone

import pytest

from jsonui.core.id import (
    Prefix,
    extract_prefix,
    extract_timestamp,
    is_valid,
    new_invocation_id,
    new_observer_id,
    new_request_id,
    new_subscription_id,
)


@pytest.mark.unit
class TestTypedGeneration:
    """Test typed ID generation."""

    @pytest.mark.parametrize(
        "factory,prefix",
        [
            (new_invocation_id, Prefix.INVOCATION),
            (new_subscription_id, Prefix.SUBSCRIPTION),
            (new_observer_id, Prefix.OBSERVER),
            (new_request_id, Prefix.REQUEST),
        ],
    )
    def test_prefix_and_validity(self, factory, prefix):
        """Each factory produces a valid ULID with its prefix."""
        id_str = factory()
        assert id_str.startswith(f"{prefix}_")
        assert extract_prefix(id_str) == prefix
        assert is_valid(id_str)
        assert len(id_str.split("_")[1]) == 26

    def test_unique_under_load(self):
        """Should generate unique IDs under load."""
        count = 1000
        ids = {new_invocation_id() for _ in range(count)}
        assert len(ids) == count

    def test_invocation_ids_sort_by_time(self):
        """Invocation ids generated later sort later."""
        first = new_invocation_id()
        time.sleep(0.002)
        second = new_invocation_id()
        assert first < second


@pytest.mark.unit
class TestValidation:
    """Test ID validation."""

    def test_invalid_ids(self):
        """Invalid IDs should fail validation."""
        assert not is_valid("")
        assert not is_valid("invalid")
        assert not is_valid("inv_INVALID")
        assert not is_valid("inv_")

    def test_extract_timestamp(self):
        """Creation time is recoverable from an id."""
        before = datetime.now(timezone.utc).timestamp()
        id_str = new_invocation_id()
        after = datetime.now(timezone.utc).timestamp()

        timestamp = extract_timestamp(id_str)
        assert timestamp is not None
        assert before - 0.001 <= timestamp.timestamp() <= after + 0.001

    def test_invalid_id_returns_none(self):
        """Invalid ID should return None."""
        assert extract_timestamp("invalid") is None
        assert extract_prefix("invalid") is None
