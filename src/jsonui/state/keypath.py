"""Keypath parsing and copy-on-write access into Value trees.

Paths are dot-separated with optional bracket indices:

    counter
    user.profile.name
    items[0].title
    items.0.title        (numeric segment addresses arrays too)
"""

from functools import lru_cache
from types import MappingProxyType

from ..core.errors import StateTypeError
from ..value import NULL, Value, ValueKind

Segment = str | int


@lru_cache(maxsize=1024)
def parse_keypath(path: str) -> tuple[Segment, ...]:
    """
    Split a keypath into segments.

    Bracket indices become ints; everything else stays a string key.
    Malformed brackets are kept as literal key text.
    """
    segments: list[Segment] = []
    buffer = ""
    i = 0
    while i < len(path):
        char = path[i]
        if char == ".":
            if buffer:
                segments.append(buffer)
                buffer = ""
        elif char == "[":
            close = path.find("]", i)
            inner = path[i + 1:close] if close != -1 else ""
            if close != -1 and inner.lstrip("-").isdigit():
                if buffer:
                    segments.append(buffer)
                    buffer = ""
                segments.append(int(inner))
                i = close
            else:
                buffer += char
        else:
            buffer += char
        i += 1
    if buffer:
        segments.append(buffer)
    return tuple(segments)


def format_keypath(segments: tuple[Segment, ...]) -> str:
    """Inverse of parse_keypath (canonical bracket form for indices)."""
    out = ""
    for segment in segments:
        if isinstance(segment, int):
            out += f"[{segment}]"
        else:
            out += f".{segment}" if out else segment
    return out


def _array_index(segment: Segment) -> int | None:
    if isinstance(segment, int):
        return segment
    if segment.isdigit():
        return int(segment)
    return None


def read(root: Value, segments: tuple[Segment, ...]) -> Value:
    """Read the value at segments; any missing step yields Null."""
    current = root
    for segment in segments:
        if current.kind is ValueKind.OBJECT:
            current = current.raw.get(str(segment), NULL)
        elif current.kind is ValueKind.ARRAY:
            index = _array_index(segment)
            if index is None:
                return NULL
            current = current.at(index)
        else:
            return NULL
    return current


def write(root: Value, segments: tuple[Segment, ...], value: Value, path: str = "") -> Value:
    """
    Return a new tree with value stored at segments.

    Missing intermediate steps are materialized as objects. Untouched
    branches are shared with the input tree.

    Raises:
        StateTypeError: If a step addresses into a scalar, or an array
            index is out of range (index == len appends)
    """
    if not segments:
        return value

    head, rest = segments[0], segments[1:]

    if root.kind is ValueKind.NULL:
        if isinstance(head, int):
            raise StateTypeError(path, f"cannot index [{head}] into a missing array")
        root = Value.object()

    if root.kind is ValueKind.OBJECT:
        key = str(head)
        child = root.raw.get(key, NULL)
        fields = dict(root.raw)
        fields[key] = write(child, rest, value, path)
        return Value(ValueKind.OBJECT, MappingProxyType(fields))

    if root.kind is ValueKind.ARRAY:
        index = _array_index(head)
        items = list(root.raw)
        if index is None:
            raise StateTypeError(path, f"'{head}' is not an array index")
        if index < 0:
            index += len(items)
        if 0 <= index < len(items):
            items[index] = write(items[index], rest, value, path)
        elif index == len(items):
            items.append(write(NULL, rest, value, path))
        else:
            raise StateTypeError(path, f"index {head} out of range for array of {len(items)}")
        return Value(ValueKind.ARRAY, tuple(items))

    raise StateTypeError(path, f"cannot address '{head}' inside a {root.kind.value}")


def delete(root: Value, segments: tuple[Segment, ...]) -> tuple[Value, bool]:
    """Return (new tree without the addressed entry, whether anything was removed)."""
    if not segments:
        return root, False

    head, rest = segments[0], segments[1:]

    if root.kind is ValueKind.OBJECT:
        key = str(head)
        if key not in root.raw:
            return root, False
        fields = dict(root.raw)
        if rest:
            fields[key], removed = delete(fields[key], rest)
        else:
            del fields[key]
            removed = True
        return Value(ValueKind.OBJECT, MappingProxyType(fields)), removed

    if root.kind is ValueKind.ARRAY:
        index = _array_index(head)
        if index is None or not -len(root.raw) <= index < len(root.raw):
            return root, False
        items = list(root.raw)
        if rest:
            items[index], removed = delete(items[index], rest)
        else:
            del items[index]
            removed = True
        return Value(ValueKind.ARRAY, tuple(items)), removed

    return root, False
