from __future__ import annotations

from typing import Any

import pytest

from zwredis.core.model import DriverStatistics, Notification, ValueID


class FakePubSub:
    def __init__(self, messages: list[tuple[str, str]]) -> None:
        self.pending = list(messages)
        self.channels: list[str] = []
        self.queue: list[dict[str, Any]] = []
        self.unsubscribe_calls: list[tuple[str, ...]] = []
        self.closed = False

    def subscribe(self, *channels: str) -> None:
        for channel in channels:
            self.channels.append(channel)
            self.queue.append({"type": "subscribe", "channel": channel, "data": len(self.channels)})

    def unsubscribe(self, *channels: str) -> None:
        self.unsubscribe_calls.append(channels)
        for channel in channels:
            if channel in self.channels:
                self.channels.remove(channel)
            self.queue.append({"type": "unsubscribe", "channel": channel, "data": len(self.channels)})

    def listen(self):
        while self.channels or self.queue:
            if self.queue:
                yield self.queue.pop(0)
                continue
            if not self.pending:
                return
            channel, data = self.pending.pop(0)
            yield {"type": "message", "pattern": None, "channel": channel, "data": data}

    def close(self) -> None:
        self.closed = True


class FakeStore:
    def __init__(self, messages: list[tuple[str, str]] | None = None) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.strings: dict[str, str] = {}
        self.published: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.messages = list(messages or [])
        self.pubsubs: list[FakePubSub] = []
        self.closed = 0

    def hset(self, name, key=None, value=None, mapping=None) -> int:
        record = self.hashes.setdefault(name, {})
        if key is not None:
            record[key] = value
        for field, field_value in (mapping or {}).items():
            record[field] = field_value
        return 1

    def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            self.deleted.append(name)
            if self.hashes.pop(name, None) is not None:
                removed += 1
        return removed

    def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 1

    def set(self, name: str, value: str) -> bool:
        self.strings[name] = value
        return True

    def get(self, name: str) -> str | None:
        return self.strings.get(name)

    def pubsub(self) -> FakePubSub:
        pubsub = FakePubSub(self.messages)
        self.pubsubs.append(pubsub)
        return pubsub

    def close(self) -> None:
        self.closed += 1


class FakeManager:
    """In-memory device-network runtime; records every control call."""

    def __init__(self) -> None:
        self.watchers: list = []
        self.calls: list[tuple] = []
        self.labels: dict[ValueID, str] = {}
        self.value_strings: dict[ValueID, str] = {}
        self.node_basic: dict[int, int] = {}
        self.node_names: dict[int, str] = {}
        self.node_locations: dict[int, str] = {}
        self.on_add_driver: list[Notification] = []

    def emit(self, notification: Notification) -> None:
        for watcher in list(self.watchers):
            watcher(notification)

    # lifecycle
    def add_watcher(self, watcher) -> None:
        self.watchers.append(watcher)

    def remove_watcher(self, watcher) -> None:
        self.calls.append(("remove_watcher",))
        self.watchers.remove(watcher)

    def add_driver(self, port: str, *, usb: bool = False) -> None:
        self.calls.append(("add_driver", port, usb))
        for notification in self.on_add_driver:
            self.emit(notification)

    def remove_driver(self, port: str) -> None:
        self.calls.append(("remove_driver", port))

    def write_config(self, home_id: int) -> None:
        self.calls.append(("write_config", home_id))

    def enable_poll(self, value_id: ValueID, intensity: int) -> bool:
        self.calls.append(("enable_poll", value_id, intensity))
        return True

    def get_driver_statistics(self, home_id: int) -> DriverStatistics:
        self.calls.append(("get_driver_statistics", home_id))
        return DriverStatistics(reads=10, writes=4)

    def destroy(self) -> None:
        self.calls.append(("destroy",))

    # values
    def get_value_label(self, value_id: ValueID) -> str:
        return self.labels.get(value_id, "Level")

    def get_value_units(self, value_id: ValueID) -> str:
        return "%"

    def get_value_help(self, value_id: ValueID) -> str:
        return "Current level"

    def get_value_min(self, value_id: ValueID) -> int:
        return -1

    def get_value_max(self, value_id: ValueID) -> int:
        return 255

    def is_value_read_only(self, value_id: ValueID) -> bool:
        return False

    def is_value_write_only(self, value_id: ValueID) -> bool:
        return False

    def is_value_set(self, value_id: ValueID) -> bool:
        return True

    def get_value_as_string(self, value_id: ValueID) -> str | None:
        return self.value_strings.get(value_id)

    # nodes
    def get_node_type(self, home_id: int, node_id: int) -> str:
        return "Binary Switch"

    def get_node_manufacturer_name(self, home_id: int, node_id: int) -> str:
        return "Acme"

    def get_node_product_name(self, home_id: int, node_id: int) -> str:
        return "Plug"

    def get_node_name(self, home_id: int, node_id: int) -> str:
        return self.node_names.get(node_id, "")

    def get_node_location(self, home_id: int, node_id: int) -> str:
        return self.node_locations.get(node_id, "")

    def get_node_basic(self, home_id: int, node_id: int) -> int:
        return self.node_basic.get(node_id, 0x04)

    def get_node_generic(self, home_id: int, node_id: int) -> int:
        return 0x10

    def get_node_manufacturer_id(self, home_id: int, node_id: int) -> str:
        return "0x0086"

    def get_node_product_type(self, home_id: int, node_id: int) -> str:
        return "0x0003"

    def get_node_product_id(self, home_id: int, node_id: int) -> str:
        return "0x0006"

    def is_node_routing_device(self, home_id: int, node_id: int) -> bool:
        return True

    def is_node_listening_device(self, home_id: int, node_id: int) -> bool:
        return True

    def is_node_frequent_listening_device(self, home_id: int, node_id: int) -> bool:
        return False

    def is_node_beaming_device(self, home_id: int, node_id: int) -> bool:
        return True

    def is_node_security_device(self, home_id: int, node_id: int) -> bool:
        return False

    def is_node_awake(self, home_id: int, node_id: int) -> bool:
        return True

    def is_node_failed(self, home_id: int, node_id: int) -> bool:
        return False

    def is_node_info_received(self, home_id: int, node_id: int) -> bool:
        return True

    def is_node_zwave_plus(self, home_id: int, node_id: int) -> bool:
        return False

    # control
    def set_node_on(self, home_id: int, node_id: int) -> None:
        self.calls.append(("set_node_on", home_id, node_id))

    def set_node_off(self, home_id: int, node_id: int) -> None:
        self.calls.append(("set_node_off", home_id, node_id))

    def set_node_level(self, home_id: int, node_id: int, level: int) -> None:
        self.calls.append(("set_node_level", home_id, node_id, level))

    def set_node_name(self, home_id: int, node_id: int, name: str) -> None:
        self.calls.append(("set_node_name", home_id, node_id, name))

    def set_node_location(self, home_id: int, node_id: int, location: str) -> None:
        self.calls.append(("set_node_location", home_id, node_id, location))


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def manager() -> FakeManager:
    return FakeManager()


@pytest.fixture
def store_cls() -> type[FakeStore]:
    return FakeStore


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.delenv("ZWREDIS_RUNTIME", raising=False)
