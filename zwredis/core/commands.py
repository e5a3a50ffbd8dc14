"""Command message grammar: ``<home hex>:<node hex>[:<argument>]``.

Parsing is lenient: a field that is missing, not hexadecimal, or too wide
for its identifier reads as zero, and text arguments stop at the next colon.
"""

from __future__ import annotations

import re

from zwredis.core import keys
from zwredis.core.model import CommandMessage

CHANNEL_SET_NODE_NAME = "zw_set_node_name"
CHANNEL_SET_NODE_LOCATION = "zw_set_node_location"
CHANNEL_CONTROL = "zw_control"
CHANNEL_TURN_ON_NODE = "zw_turn_on_node"
CHANNEL_TURN_OFF_NODE = "zw_turn_off_node"
CHANNEL_SET_NODE_LEVEL = "zw_set_node_level"

COMMAND_CHANNELS = (
    CHANNEL_SET_NODE_NAME,
    CHANNEL_SET_NODE_LOCATION,
    CHANNEL_CONTROL,
    CHANNEL_TURN_ON_NODE,
    CHANNEL_TURN_OFF_NODE,
    CHANNEL_SET_NODE_LEVEL,
)
CONTROL_EXIT = "exit"

_HEX_PREFIX_RE = re.compile(r"^\s*(?:0[xX])?([0-9a-fA-F]+)")


def message_field(message: str, index: int) -> str:
    parts = message.split(":")
    return parts[index] if index < len(parts) else ""


def parse_hex(text: str, bits: int) -> int:
    match = _HEX_PREFIX_RE.match(text)
    if not match:
        return 0
    value = int(match.group(1), 16)
    if value >= 1 << bits:
        return 0
    return value


def parse_home_id(message: str) -> int:
    return parse_hex(message_field(message, 0), 32)


def parse_node_id(message: str) -> int:
    return parse_hex(message_field(message, 1), 8)


def parse_level(message: str) -> int:
    return parse_hex(message_field(message, 2), 8)


def parse_message(channel: str, message: str) -> CommandMessage:
    return CommandMessage(
        channel=channel,
        payload=message,
        home_id=parse_home_id(message),
        node_id=parse_node_id(message),
        argument=message_field(message, 2),
    )


def format_command(channel: str, home_id: int, node_id: int, argument: int | str | None = None) -> str:
    """Build the payload the listener expects on ``channel``."""
    if channel == CHANNEL_CONTROL:
        return str(argument) if argument is not None else CONTROL_EXIT
    parts = [keys.hex32(home_id), keys.hex8(node_id)]
    if isinstance(argument, int):
        parts.append(keys.hex8(argument))
    elif argument is not None:
        parts.append(argument)
    return ":".join(parts)
