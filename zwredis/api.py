"""Stable public API for embedding the bridge in other tooling.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from zwredis.core.barrier import InitBarrier
from zwredis.core.commands import (
    CHANNEL_SET_NODE_LEVEL,
    CHANNEL_SET_NODE_LOCATION,
    CHANNEL_SET_NODE_NAME,
    CHANNEL_TURN_OFF_NODE,
    CHANNEL_TURN_ON_NODE,
    COMMAND_CHANNELS,
    format_command,
    parse_message,
)
from zwredis.core.dispatcher import NotificationDispatcher
from zwredis.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    KeyFormatError,
    RuntimeLoadError,
    StoreError,
    ZwRedisError,
)
from zwredis.core.keys import network_key, node_key, parse_key, value_key
from zwredis.core.listener import CommandListener
from zwredis.core.model import (
    BarrierState,
    BridgeConfig,
    CommandMessage,
    DriverStatistics,
    Notification,
    NotificationType,
    ValueGenre,
    ValueID,
    ValueType,
)
from zwredis.core.poll_registry import PollRegistry
from zwredis.core.service import BridgeService, StoreFactory
from zwredis.network.base import ZWaveManager

__all__ = [
    "ZwRedisError",
    "ConfigLoadError",
    "ConfigValidationError",
    "KeyFormatError",
    "RuntimeLoadError",
    "StoreError",
    "BarrierState",
    "BridgeConfig",
    "CommandMessage",
    "DriverStatistics",
    "Notification",
    "NotificationType",
    "ValueGenre",
    "ValueID",
    "ValueType",
    "InitBarrier",
    "PollRegistry",
    "NotificationDispatcher",
    "CommandListener",
    "ZWaveManager",
    "COMMAND_CHANNELS",
    "format_command",
    "parse_message",
    "network_key",
    "node_key",
    "value_key",
    "parse_key",
    "Bridge",
]


class Bridge:
    """Public handle for running the bridge and sending it commands.

    A `Bridge` wraps config loading, the startup/teardown sequence, and the
    client side of the command channels behind a stable API intended for
    third-party tools (supervisors/dashboards/scripts).
    """

    def __init__(
        self,
        *,
        config: BridgeConfig | None = None,
        config_path: Path | None = None,
        manager: ZWaveManager | None = None,
        store_factory: StoreFactory | None = None,
    ) -> None:
        self._service = BridgeService(
            config=config,
            config_path=config_path,
            manager=manager,
            store_factory=store_factory,
        )

    @property
    def config(self) -> BridgeConfig:
        return self._service.config

    def run(self, port: str | None = None) -> BarrierState:
        return self._service.with_port(port).run()

    def turn_on(self, home_id: int, node_id: int) -> int:
        return self._service.publish_command(CHANNEL_TURN_ON_NODE, home_id, node_id)[1]

    def turn_off(self, home_id: int, node_id: int) -> int:
        return self._service.publish_command(CHANNEL_TURN_OFF_NODE, home_id, node_id)[1]

    def set_level(self, home_id: int, node_id: int, level: int) -> int:
        return self._service.publish_command(CHANNEL_SET_NODE_LEVEL, home_id, node_id, level)[1]

    def set_name(self, home_id: int, node_id: int, name: str) -> int:
        return self._service.publish_command(CHANNEL_SET_NODE_NAME, home_id, node_id, name)[1]

    def set_location(self, home_id: int, node_id: int, location: str) -> int:
        return self._service.publish_command(
            CHANNEL_SET_NODE_LOCATION, home_id, node_id, location
        )[1]

    def stop(self) -> int:
        return self._service.request_exit()
