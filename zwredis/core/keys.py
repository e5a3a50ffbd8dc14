"""Store key and channel naming.

Identifiers are rendered as zero-padded lowercase hex at a fixed width per
identifier size, so keys never collide at field boundaries.
"""

from __future__ import annotations

from zwredis.core.errors import KeyFormatError
from zwredis.core.model import ValueID

HOME_PREFIX = "zw_home"
NODE_PREFIX = "zw_node"
VALUE_PREFIX = "zw_value"
PORT_KEY = "port"

CHANNEL_VALUE_ADD = "zw_value_add"
CHANNEL_VALUE_DELETE = "zw_value_delete"
CHANNEL_VALUE_UPDATE = "zw_value_update"
CHANNEL_NODE_ADD = "zw_node_add"
CHANNEL_NODE_DELETE = "zw_node_delete"
CHANNEL_NODE_UPDATE = "zw_node_update"
CHANNEL_NODE_NAMED = "zw_node_named"


def hex8(value: int) -> str:
    return f"{value & 0xFF:02x}"


def hex16(value: int) -> str:
    return f"{value & 0xFFFF:04x}"


def hex32(value: int) -> str:
    return f"{value & 0xFFFFFFFF:08x}"


def hex64(value: int) -> str:
    return f"{value & 0xFFFFFFFFFFFFFFFF:016x}"


def network_key(home_id: int) -> str:
    return f"{HOME_PREFIX}:{hex32(home_id)}"


def node_key(home_id: int, node_id: int) -> str:
    return f"{NODE_PREFIX}:{hex32(home_id)}:{hex8(node_id)}"


def value_key(home_id: int, node_id: int, value: ValueID | int) -> str:
    canonical = value.canonical_id if isinstance(value, ValueID) else value
    return f"{VALUE_PREFIX}:{hex32(home_id)}:{hex8(node_id)}:{hex64(canonical)}"


def _decode(part: str, width: int, key: str) -> int:
    if len(part) != width:
        raise KeyFormatError(f"Field '{part}' in key '{key}' must be {width} hex characters")
    try:
        return int(part, 16)
    except ValueError as exc:
        raise KeyFormatError(f"Field '{part}' in key '{key}' is not hexadecimal") from exc


def parse_key(key: str) -> tuple[str, int, int | None, int | None]:
    """Split a derived key back into ``(prefix, home_id, node_id, value_id)``."""
    prefix, _, rest = key.partition(":")
    parts = rest.split(":") if rest else []
    if prefix == HOME_PREFIX and len(parts) == 1:
        return prefix, _decode(parts[0], 8, key), None, None
    if prefix == NODE_PREFIX and len(parts) == 2:
        return prefix, _decode(parts[0], 8, key), _decode(parts[1], 2, key), None
    if prefix == VALUE_PREFIX and len(parts) == 3:
        return (
            prefix,
            _decode(parts[0], 8, key),
            _decode(parts[1], 2, key),
            _decode(parts[2], 16, key),
        )
    raise KeyFormatError(f"Unrecognised store key '{key}'")
