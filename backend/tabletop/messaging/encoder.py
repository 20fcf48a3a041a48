"""
Wire codecs for WebSocket frames.

Binary frames carry MessagePack maps; text frames carry JSON objects. Both
decoders enforce size limits and require the top-level value to be a map.
"""

import json
from enum import StrEnum
from typing import Any

import msgpack


class WireFormat(StrEnum):
    MSGPACK = "msgpack"
    JSON = "json"


class DecodeError(Exception):
    """Error raised when a frame cannot be decoded into a message map."""


# Size limits to prevent resource exhaustion from malicious payloads.
MAX_FRAME_LEN = 64 * 1024
MAX_STR_LEN = 16 * 1024
MAX_ARRAY_LEN = 256  # a mahjong hand reorder is the largest legitimate array
MAX_MAP_LEN = 64


def encode_msgpack(data: dict[str, Any]) -> bytes:
    return msgpack.packb(data)


def encode_json(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def encode(data: dict[str, Any], wire_format: WireFormat) -> bytes | str:
    if wire_format is WireFormat.JSON:
        return encode_json(data)
    return encode_msgpack(data)


def _require_map(result: object) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise DecodeError(f"expected map, got {type(result).__name__}")
    return result


def decode_msgpack(data: bytes) -> dict[str, Any]:
    """Decode a MessagePack frame. Raises DecodeError on malformed or oversized input."""
    if len(data) > MAX_FRAME_LEN:
        raise DecodeError(f"payload too large: {len(data)} bytes (max {MAX_FRAME_LEN})")
    try:
        result = msgpack.unpackb(
            data,
            raw=False,
            max_str_len=MAX_STR_LEN,
            max_bin_len=0,
            max_array_len=MAX_ARRAY_LEN,
            max_map_len=MAX_MAP_LEN,
            max_ext_len=0,
        )
    except (msgpack.UnpackException, ValueError) as e:
        raise DecodeError(f"failed to decode MessagePack data: {e}") from e
    return _require_map(result)


def decode_json(data: str) -> dict[str, Any]:
    """Decode a JSON frame. Raises DecodeError on malformed or oversized input."""
    if len(data) > MAX_FRAME_LEN:
        raise DecodeError(f"payload too large: {len(data)} chars (max {MAX_FRAME_LEN})")
    try:
        result = json.loads(data)
    except ValueError as e:
        raise DecodeError(f"failed to decode JSON data: {e}") from e
    return _require_map(result)


def decode(data: bytes | str) -> dict[str, Any]:
    """Decode a frame by its kind: bytes are MessagePack, text is JSON."""
    if isinstance(data, bytes):
        return decode_msgpack(data)
    return decode_json(data)
