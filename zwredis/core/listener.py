"""Pub/sub listener that turns command messages into device-control calls."""

from __future__ import annotations

import logging
from collections.abc import Callable

from redis import Redis

from zwredis.core import keys
from zwredis.core.commands import (
    CHANNEL_CONTROL,
    CHANNEL_SET_NODE_LEVEL,
    CHANNEL_SET_NODE_LOCATION,
    CHANNEL_SET_NODE_NAME,
    CHANNEL_TURN_OFF_NODE,
    CHANNEL_TURN_ON_NODE,
    COMMAND_CHANNELS,
    CONTROL_EXIT,
    parse_level,
    parse_message,
)
from zwredis.core.model import CommandMessage
from zwredis.network.base import ZWaveManager

LOGGER = logging.getLogger(__name__)


def _text(data: bytes | str | int) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return str(data)


class CommandListener:
    """Consumes the command channels on a dedicated store connection.

    Control calls always target ``home_id``, the network the process is
    attached to; the home id carried in a message is only echoed in logs.
    """

    def __init__(self, store: Redis, manager: ZWaveManager, home_id: int) -> None:
        self.store = store
        self.manager = manager
        self.home_id = home_id
        self._pubsub = None
        self.handlers: dict[str, Callable[[CommandMessage], None]] = {
            CHANNEL_TURN_ON_NODE: self._turn_on,
            CHANNEL_TURN_OFF_NODE: self._turn_off,
            CHANNEL_SET_NODE_LEVEL: self._set_level,
            CHANNEL_SET_NODE_NAME: self._set_name,
            CHANNEL_SET_NODE_LOCATION: self._set_location,
            CHANNEL_CONTROL: self._control,
        }

    def run(self) -> None:
        """Block until a ``zw_control`` exit message unsubscribes every channel."""
        self._pubsub = self.store.pubsub()
        try:
            self._pubsub.subscribe(*COMMAND_CHANNELS)
            for item in self._pubsub.listen():
                kind = _text(item["type"])
                channel = _text(item["channel"])
                if kind == "subscribe":
                    LOGGER.info("Subscribed to #%s (%s subscriptions)", channel, item["data"])
                elif kind == "unsubscribe":
                    LOGGER.info("Unsubscribed from #%s (%s subscriptions)", channel, item["data"])
                elif kind == "message":
                    self.handle(channel, _text(item["data"]))
        finally:
            self._pubsub.close()
            self._pubsub = None

    def handle(self, channel: str, message: str) -> None:
        LOGGER.info("%s :: %s", channel, message)
        handler = self.handlers.get(channel)
        if handler is None:
            LOGGER.warning("No handler for channel %s", channel)
            return
        try:
            handler(parse_message(channel, message))
        except Exception:
            LOGGER.exception("Command on %s failed: %s", channel, message)

    def stop(self) -> None:
        if self._pubsub is not None:
            self._pubsub.unsubscribe(*COMMAND_CHANNELS)

    def _describe(self, command: CommandMessage) -> str:
        return f"home:{keys.hex32(command.home_id)} node:{keys.hex8(command.node_id)}"

    def _turn_on(self, command: CommandMessage) -> None:
        LOGGER.info("Turning on %s", self._describe(command))
        self.manager.set_node_on(self.home_id, command.node_id)

    def _turn_off(self, command: CommandMessage) -> None:
        LOGGER.info("Turning off %s", self._describe(command))
        self.manager.set_node_off(self.home_id, command.node_id)

    def _set_level(self, command: CommandMessage) -> None:
        level = parse_level(command.payload)
        LOGGER.info("Setting level %s to:%s", self._describe(command), keys.hex8(level))
        self.manager.set_node_level(self.home_id, command.node_id, level)

    def _set_name(self, command: CommandMessage) -> None:
        LOGGER.info("Setting name %s to:%s", self._describe(command), command.argument)
        self.manager.set_node_name(self.home_id, command.node_id, command.argument)

    def _set_location(self, command: CommandMessage) -> None:
        LOGGER.info("Setting location %s to:%s", self._describe(command), command.argument)
        self.manager.set_node_location(self.home_id, command.node_id, command.argument)

    def _control(self, command: CommandMessage) -> None:
        if command.payload == CONTROL_EXIT:
            LOGGER.info("Exit requested; unsubscribing from command channels")
            self.stop()
