"""Device-network runtime interface."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from zwredis.core.model import DriverStatistics, Notification, ValueID

Watcher = Callable[[Notification], None]


class ZWaveManager(Protocol):
    """Subset of the runtime manager the bridge calls into.

    The runtime owns discovery and the wire protocol; it delivers
    notifications to registered watchers on its own thread.
    """

    # lifecycle
    def add_watcher(self, watcher: Watcher) -> None: ...
    def remove_watcher(self, watcher: Watcher) -> None: ...
    def add_driver(self, port: str, *, usb: bool = False) -> None: ...
    def remove_driver(self, port: str) -> None: ...
    def write_config(self, home_id: int) -> None: ...
    def enable_poll(self, value_id: ValueID, intensity: int) -> bool: ...
    def get_driver_statistics(self, home_id: int) -> DriverStatistics: ...
    def destroy(self) -> None: ...

    # value accessors
    def get_value_label(self, value_id: ValueID) -> str: ...
    def get_value_units(self, value_id: ValueID) -> str: ...
    def get_value_help(self, value_id: ValueID) -> str: ...
    def get_value_min(self, value_id: ValueID) -> int: ...
    def get_value_max(self, value_id: ValueID) -> int: ...
    def is_value_read_only(self, value_id: ValueID) -> bool: ...
    def is_value_write_only(self, value_id: ValueID) -> bool: ...
    def is_value_set(self, value_id: ValueID) -> bool: ...
    def get_value_as_string(self, value_id: ValueID) -> str | None:
        """Return the value's string form, or None if it has none yet."""

    # node accessors
    def get_node_type(self, home_id: int, node_id: int) -> str: ...
    def get_node_manufacturer_name(self, home_id: int, node_id: int) -> str: ...
    def get_node_product_name(self, home_id: int, node_id: int) -> str: ...
    def get_node_name(self, home_id: int, node_id: int) -> str: ...
    def get_node_location(self, home_id: int, node_id: int) -> str: ...
    def get_node_basic(self, home_id: int, node_id: int) -> int: ...
    def get_node_generic(self, home_id: int, node_id: int) -> int: ...
    def get_node_manufacturer_id(self, home_id: int, node_id: int) -> str: ...
    def get_node_product_type(self, home_id: int, node_id: int) -> str: ...
    def get_node_product_id(self, home_id: int, node_id: int) -> str: ...
    def is_node_routing_device(self, home_id: int, node_id: int) -> bool: ...
    def is_node_listening_device(self, home_id: int, node_id: int) -> bool: ...
    def is_node_frequent_listening_device(self, home_id: int, node_id: int) -> bool: ...
    def is_node_beaming_device(self, home_id: int, node_id: int) -> bool: ...
    def is_node_security_device(self, home_id: int, node_id: int) -> bool: ...
    def is_node_awake(self, home_id: int, node_id: int) -> bool: ...
    def is_node_failed(self, home_id: int, node_id: int) -> bool: ...
    def is_node_info_received(self, home_id: int, node_id: int) -> bool: ...
    def is_node_zwave_plus(self, home_id: int, node_id: int) -> bool: ...
    # control
    def set_node_on(self, home_id: int, node_id: int) -> None: ...
    def set_node_off(self, home_id: int, node_id: int) -> None: ...
    def set_node_level(self, home_id: int, node_id: int, level: int) -> None: ...
    def set_node_name(self, home_id: int, node_id: int, name: str) -> None: ...
    def set_node_location(self, home_id: int, node_id: int, location: str) -> None: ...
