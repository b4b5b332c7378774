"""Fast JSON decoding and encoding for documents and state."""

from typing import Any

import msgspec
import orjson


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


_decoder = msgspec.json.Decoder()


def loads_json(data: bytes | str) -> Any:
    """
    Decode a JSON payload with msgspec.

    Args:
        data: UTF-8 bytes or text

    Returns:
        Decoded Python value (dict, list, str, int, float, bool or None)

    Raises:
        JSONParseError: If the payload is not valid JSON
    """
    payload = data.encode("utf-8") if isinstance(data, str) else data
    try:
        return _decoder.decode(payload)
    except msgspec.DecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e) from e


def dumps_json(obj: Any, *, sort_keys: bool = False, indent: bool = False) -> str:
    """
    Encode object to a JSON string with orjson.

    Args:
        obj: Object to encode
        sort_keys: Emit object keys in sorted order (canonical form)
        indent: Pretty-print with two-space indentation

    Returns:
        JSON string
    """
    option = 0
    if sort_keys:
        option |= orjson.OPT_SORT_KEYS
    if indent:
        option |= orjson.OPT_INDENT_2
    try:
        return orjson.dumps(obj, option=option).decode("utf-8")
    except TypeError:
        # Integers outside the 64-bit range
        return msgspec.json.encode(obj, order="sorted" if sort_keys else None).decode("utf-8")
