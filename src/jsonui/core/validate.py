"""Input limits for incoming documents (Result pattern)."""

from dataclasses import dataclass
from typing import Any

from returns.result import Failure, Result, Success


@dataclass(frozen=True)
class ValidationResult:
    """Validation error with details (for Result pattern)."""

    message: str
    field: str | None = None
    value: Any | None = None


def check_document_size(payload: bytes, max_size: int) -> Result[bytes, ValidationResult]:
    """
    Reject documents larger than the configured limit.

    Args:
        payload: Raw document bytes
        max_size: Maximum allowed size in bytes

    Returns:
        Success with the payload, or Failure describing the violation
    """
    size = len(payload)
    if size > max_size:
        return Failure(
            ValidationResult(
                message=f"Document size {size} bytes exceeds maximum {max_size} bytes",
                field="size",
                value=size,
            )
        )
    return Success(payload)


def _depth(obj: Any) -> int:
    depth = 0
    stack: list[tuple[Any, int]] = [(obj, 0)]
    while stack:
        node, level = stack.pop()
        if level > depth:
            depth = level
        if isinstance(node, dict):
            stack.extend((child, level + 1) for child in node.values())
        elif isinstance(node, list):
            stack.extend((child, level + 1) for child in node)
    return depth


def check_document_depth(obj: Any, max_depth: int) -> Result[Any, ValidationResult]:
    """
    Reject documents nested deeper than the configured limit.

    Args:
        obj: Decoded JSON value
        max_depth: Maximum allowed nesting depth

    Returns:
        Success with the value, or Failure describing the violation
    """
    depth = _depth(obj)
    if depth > max_depth:
        return Failure(
            ValidationResult(
                message=f"JSON nesting depth {depth} exceeds maximum {max_depth}",
                field="depth",
                value=depth,
            )
        )
    return Success(obj)
