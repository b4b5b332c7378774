"""Validation and JSON helper tests."""

import pytest
import structlog
from hypothesis import given, strategies as st
from returns.result import Failure, Success

from jsonui.core import (
    JSONParseError,
    LogContext,
    check_document_depth,
    check_document_size,
    dumps_json,
    loads_json,
)


@pytest.mark.unit
def test_document_size_within_limit():
    """Test payload at the limit passes."""
    result = check_document_size(b"x" * 10, 10)
    assert result == Success(b"x" * 10)


@pytest.mark.unit
def test_document_size_exceeded():
    """Test oversized payload fails with details."""
    result = check_document_size(b"x" * 11, 10)
    assert isinstance(result, Failure)
    assert result.failure().field == "size"
    assert result.failure().value == 11


@pytest.mark.unit
def test_document_depth():
    """Test JSON depth validation."""
    shallow = {"a": {"b": {"c": 1}}}
    assert isinstance(check_document_depth(shallow, max_depth=5), Success)

    deep = {"a": [{"b": {"c": [1]}}]}
    result = check_document_depth(deep, max_depth=3)
    assert isinstance(result, Failure)
    assert result.failure().value == 5


@pytest.mark.unit
def test_loads_json_invalid():
    """Test invalid JSON raises JSONParseError."""
    with pytest.raises(JSONParseError):
        loads_json("{broken")


@pytest.mark.unit
def test_dumps_json_options():
    """Test sorted and large-integer encoding."""
    assert dumps_json({"b": 1, "a": 2}, sort_keys=True) == '{"a":2,"b":1}'
    assert loads_json(dumps_json({"big": 2**70})) == {"big": 2**70}


@pytest.mark.unit
@given(st.recursive(
    st.none() | st.booleans() | st.integers(min_value=-2**53, max_value=2**53) | st.text(),
    lambda children: st.lists(children) | st.dictionaries(st.text(), children),
    max_leaves=20,
))
def test_json_round_trip(data):
    """Property: encoding then decoding is lossless."""
    assert loads_json(dumps_json(data)) == data


@pytest.mark.unit
def test_log_context_binds_and_unbinds():
    """Test context variables are bound only inside the block."""
    with LogContext(document="counter", invocation_id=None):
        bound = structlog.contextvars.get_contextvars()
        assert bound["document"] == "counter"
        assert "invocation_id" not in bound
    assert "document" not in structlog.contextvars.get_contextvars()
