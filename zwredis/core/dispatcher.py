"""Translate device-network notifications into store writes and publishes."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from redis import Redis

from zwredis.core import keys
from zwredis.core.barrier import InitBarrier
from zwredis.core.model import (
    COMMAND_CLASS_BASIC,
    CONTROLLER_BASIC_MAX,
    BarrierState,
    Notification,
    NotificationType,
)
from zwredis.core.poll_registry import PollRegistry
from zwredis.network.base import ZWaveManager

LOGGER = logging.getLogger(__name__)


def _flag(value: bool) -> str:
    return "true" if value else "false"


class NotificationDispatcher:
    """Runtime watcher; every call runs under one re-entrant lock."""

    def __init__(
        self,
        store: Redis,
        manager: ZWaveManager,
        *,
        registry: PollRegistry | None = None,
        barrier: InitBarrier | None = None,
    ) -> None:
        self.lock = threading.RLock()
        self.store = store
        self.manager = manager
        self.registry = registry if registry is not None else PollRegistry(self.lock)
        self.barrier = barrier if barrier is not None else InitBarrier()
        self.home_id: int | None = None
        self._handlers: dict[NotificationType, Callable[[Notification], None]] = {
            NotificationType.VALUE_ADDED: self._on_value_added,
            NotificationType.VALUE_REMOVED: self._on_value_removed,
            NotificationType.VALUE_CHANGED: self._on_value_changed,
            NotificationType.NODE_ADDED: self._on_node_added,
            NotificationType.NODE_REMOVED: self._on_node_removed,
            NotificationType.NODE_EVENT: self._on_node_event,
            NotificationType.NODE_NAMING: self._on_node_naming,
            NotificationType.DRIVER_READY: self._on_driver_ready,
            NotificationType.DRIVER_FAILED: self._on_driver_failed,
            NotificationType.AWAKE_NODES_QUERIED: self._on_nodes_queried,
            NotificationType.ALL_NODES_QUERIED: self._on_nodes_queried,
            NotificationType.NOTIFICATION: self._on_notification,
        }

    def __call__(self, notification: Notification) -> None:
        handler = self._handlers.get(notification.type)
        if handler is None:
            return
        with self.lock:
            try:
                handler(notification)
            except Exception:
                LOGGER.exception(
                    "Failed to handle %s for node %s",
                    notification.type.value,
                    keys.node_key(notification.home_id, notification.node_id),
                )

    # values

    def _value_string(self, notification: Notification) -> str | None:
        return self.manager.get_value_as_string(notification.value_id)

    def _mirror_on_node(self, notification: Notification, value: str) -> None:
        label = self.manager.get_value_label(notification.value_id)
        self.store.hset(
            keys.node_key(notification.home_id, notification.node_id), f"v_{label}", value
        )

    def _value_key(self, notification: Notification) -> str:
        return keys.value_key(notification.home_id, notification.node_id, notification.value_id)

    def _on_value_added(self, notification: Notification) -> None:
        value_id = notification.value_id
        key = self._value_key(notification)
        m = self.manager
        fields: dict[str, Any] = {
            "label": m.get_value_label(value_id),
            "units": m.get_value_units(value_id),
            "help": m.get_value_help(value_id),
            "min": keys.hex32(m.get_value_min(value_id)),
            "max": keys.hex32(m.get_value_max(value_id)),
            "genre": value_id.genre.label,
            "type": value_id.type.label,
            "readOnly": _flag(m.is_value_read_only(value_id)),
            "writeOnly": _flag(m.is_value_write_only(value_id)),
            "set": _flag(m.is_value_set(value_id)),
            "commandClassId": keys.hex8(value_id.command_class_id),
        }
        self.store.hset(key, mapping=fields)

        current = self._value_string(notification)
        if current is not None:
            self.store.hset(key, "initial_value", current)
            self.store.publish(keys.CHANNEL_VALUE_ADD, key)
            self._mirror_on_node(notification, current)

        if value_id.command_class_id == COMMAND_CLASS_BASIC:
            basic = m.get_node_basic(notification.home_id, notification.node_id)
            if basic > CONTROLLER_BASIC_MAX:
                self.registry.register(value_id)

    def _on_value_removed(self, notification: Notification) -> None:
        key = self._value_key(notification)
        self.store.delete(key)
        self.store.publish(keys.CHANNEL_VALUE_DELETE, key)
        self.registry.unregister(notification.value_id)

    def _on_value_changed(self, notification: Notification) -> None:
        current = self._value_string(notification)
        if current is None:
            return
        key = self._value_key(notification)
        self.store.hset(key, "updated_value", current)
        self.store.publish(keys.CHANNEL_VALUE_UPDATE, key)
        self._mirror_on_node(notification, current)

    # nodes

    def _on_node_added(self, notification: Notification) -> None:
        home, node = notification.home_id, notification.node_id
        key = keys.node_key(home, node)
        m = self.manager
        fields = {
            "type": m.get_node_type(home, node),
            "mfgName": m.get_node_manufacturer_name(home, node),
            "prodName": m.get_node_product_name(home, node),
            "nodeName": m.get_node_name(home, node),
            "nodeLocation": m.get_node_location(home, node),
            "nodeBasic": keys.hex8(m.get_node_basic(home, node)),
            "nodeGeneric": keys.hex8(m.get_node_generic(home, node)),
            "mfgId": m.get_node_manufacturer_id(home, node),
            "prodType": m.get_node_product_type(home, node),
            "prodId": m.get_node_product_id(home, node),
            "isRoutingDevice": _flag(m.is_node_routing_device(home, node)),
            "isListeningDevice": _flag(m.is_node_listening_device(home, node)),
            "isFrequentListeningDevice": _flag(m.is_node_frequent_listening_device(home, node)),
            "isBeamingDevice": _flag(m.is_node_beaming_device(home, node)),
            "isSecurityDevice": _flag(m.is_node_security_device(home, node)),
            "isAwake": _flag(m.is_node_awake(home, node)),
            "isFailed": _flag(m.is_node_failed(home, node)),
            "isInfoReceived": _flag(m.is_node_info_received(home, node)),
            "isZWavePlus": _flag(m.is_node_zwave_plus(home, node)),
            "value": keys.hex8(notification.byte),
        }
        self.store.hset(key, mapping=fields)
        self.store.publish(keys.CHANNEL_NODE_ADD, key)

    def _on_node_removed(self, notification: Notification) -> None:
        key = keys.node_key(notification.home_id, notification.node_id)
        self.store.delete(key)
        self.store.publish(keys.CHANNEL_NODE_DELETE, key)
        self.registry.unregister_node(notification.home_id, notification.node_id)

    def _on_node_event(self, notification: Notification) -> None:
        # basic_set or hail from the device
        key = keys.node_key(notification.home_id, notification.node_id)
        self.store.hset(key, "value", keys.hex8(notification.byte))
        self.store.publish(keys.CHANNEL_NODE_UPDATE, key)

    def _on_node_naming(self, notification: Notification) -> None:
        home, node = notification.home_id, notification.node_id
        key = keys.node_key(home, node)
        self.store.hset(
            key,
            mapping={
                "nodeName": self.manager.get_node_name(home, node),
                "nodeLocation": self.manager.get_node_location(home, node),
            },
        )
        self.store.publish(keys.CHANNEL_NODE_NAMED, key)

    def _on_notification(self, notification: Notification) -> None:
        LOGGER.info("notification: %s", keys.node_key(notification.home_id, notification.node_id))

    # driver / initialization

    def _on_driver_ready(self, notification: Notification) -> None:
        self.home_id = notification.home_id
        LOGGER.info("Driver ready for home %s", keys.hex32(notification.home_id))

    def _on_driver_failed(self, notification: Notification) -> None:
        LOGGER.error("Driver failed to initialise")
        self.barrier.resolve(BarrierState.FAILED)

    def _on_nodes_queried(self, notification: Notification) -> None:
        self.barrier.resolve(BarrierState.READY)
