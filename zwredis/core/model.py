"""Core data models shared by the dispatcher, listener, and service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

COMMAND_CLASS_BASIC = 0x20
# Basic device classes 0x01 and 0x02 are controllers.
CONTROLLER_BASIC_MAX = 0x02


class ValueGenre(IntEnum):
    BASIC = 0
    USER = 1
    CONFIG = 2
    SYSTEM = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class ValueType(IntEnum):
    BOOL = 0
    BYTE = 1
    DECIMAL = 2
    INT = 3
    LIST = 4
    SCHEDULE = 5
    SHORT = 6
    STRING = 7
    BUTTON = 8
    RAW = 9

    @property
    def label(self) -> str:
        return self.name.lower()


class NotificationType(str, Enum):
    VALUE_ADDED = "value_added"
    VALUE_REMOVED = "value_removed"
    VALUE_CHANGED = "value_changed"
    VALUE_REFRESHED = "value_refreshed"
    GROUP = "group"
    NODE_NEW = "node_new"
    NODE_ADDED = "node_added"
    NODE_REMOVED = "node_removed"
    NODE_PROTOCOL_INFO = "node_protocol_info"
    NODE_NAMING = "node_naming"
    NODE_EVENT = "node_event"
    POLLING_DISABLED = "polling_disabled"
    POLLING_ENABLED = "polling_enabled"
    DRIVER_READY = "driver_ready"
    DRIVER_FAILED = "driver_failed"
    DRIVER_RESET = "driver_reset"
    ESSENTIAL_NODE_QUERIES_COMPLETE = "essential_node_queries_complete"
    NODE_QUERIES_COMPLETE = "node_queries_complete"
    AWAKE_NODES_QUERIED = "awake_nodes_queried"
    ALL_NODES_QUERIED = "all_nodes_queried"
    NOTIFICATION = "notification"


class BarrierState(str, Enum):
    WAITING = "waiting"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ValueID:
    home_id: int
    node_id: int
    command_class_id: int
    instance: int = 1
    index: int = 0
    type: ValueType = ValueType.BYTE
    genre: ValueGenre = ValueGenre.BASIC

    @property
    def canonical_id(self) -> int:
        """64-bit identifier used as the value key suffix."""
        low = (
            (self.node_id & 0xFF) << 24
            | (int(self.genre) & 0x03) << 22
            | (self.command_class_id & 0xFF) << 14
            | (self.instance & 0xFF) << 4
            | (int(self.type) & 0x0F)
        )
        high = (self.index & 0xFFFF) << 16
        return (high << 32) | low


@dataclass(frozen=True)
class Notification:
    type: NotificationType
    home_id: int
    node_id: int = 0
    value_id: ValueID | None = None
    byte: int = 0


@dataclass(frozen=True)
class DriverStatistics:
    sof_count: int = 0
    ack_waiting: int = 0
    read_aborts: int = 0
    bad_checksums: int = 0
    reads: int = 0
    writes: int = 0
    can_count: int = 0
    nak_count: int = 0
    ack_count: int = 0
    out_of_frame: int = 0
    dropped: int = 0
    retries: int = 0


@dataclass(frozen=True)
class CommandMessage:
    channel: str
    payload: str
    home_id: int
    node_id: int
    argument: str


@dataclass(frozen=True)
class RedisSettings:
    host: str = "localhost"
    port: int = 6379
    db: int = 0


@dataclass(frozen=True)
class DriverSettings:
    port: str = "/dev/ttyUSB0"
    hid_name: str = "HID Controller"

    @property
    def is_usb(self) -> bool:
        return self.port.lower() == "usb"

    @property
    def driver_name(self) -> str:
        return self.hid_name if self.is_usb else self.port


@dataclass(frozen=True)
class RuntimeOptions:
    config_path: str | None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BridgeConfig:
    redis: RedisSettings
    driver: DriverSettings
    runtime_factory: str | None
    runtime_options: dict[str, Any]
    poll_intensity: int = 2
    init_timeout_s: float | None = None
