from __future__ import annotations

import pytest

from zwredis.core import keys
from zwredis.core.dispatcher import NotificationDispatcher
from zwredis.core.model import BarrierState, Notification, NotificationType, ValueID, ValueType

HOME = 0x00C0FFEE
NODE = 0x05
SWITCH = ValueID(home_id=HOME, node_id=NODE, command_class_id=0x20, type=ValueType.BYTE)
METER = ValueID(home_id=HOME, node_id=NODE, command_class_id=0x32, index=2, type=ValueType.DECIMAL)


@pytest.fixture
def dispatcher(store, manager) -> NotificationDispatcher:
    return NotificationDispatcher(store, manager)


def _value_notification(kind: NotificationType, value: ValueID) -> Notification:
    return Notification(type=kind, home_id=value.home_id, node_id=value.node_id, value_id=value)


def test_value_added_end_to_end(dispatcher, store, manager) -> None:
    manager.labels[SWITCH] = "Switch"
    manager.value_strings[SWITCH] = "on"

    dispatcher(_value_notification(NotificationType.VALUE_ADDED, SWITCH))

    value_key = keys.value_key(HOME, NODE, SWITCH)
    record = store.hashes[value_key]
    assert record["label"] == "Switch"
    assert record["type"] == "byte"
    assert record["genre"] == "basic"
    assert record["initial_value"] == "on"
    assert record["min"] == "ffffffff"
    assert record["max"] == "000000ff"
    assert record["commandClassId"] == "20"
    assert record["readOnly"] == "false"
    assert record["set"] == "true"
    assert ("zw_value_add", value_key) in store.published
    assert store.hashes[keys.node_key(HOME, NODE)]["v_Switch"] == "on"
    assert SWITCH in dispatcher.registry


def test_value_added_without_string_skips_publish(dispatcher, store, manager) -> None:
    dispatcher(_value_notification(NotificationType.VALUE_ADDED, METER))

    record = store.hashes[keys.value_key(HOME, NODE, METER)]
    assert "initial_value" not in record
    assert store.published == []
    assert keys.node_key(HOME, NODE) not in store.hashes
    assert METER not in dispatcher.registry


def test_controller_basic_value_not_polled(dispatcher, manager) -> None:
    manager.node_basic[NODE] = 0x02
    dispatcher(_value_notification(NotificationType.VALUE_ADDED, SWITCH))
    assert len(dispatcher.registry) == 0


def test_value_changed_updates_value_and_node_mirror(dispatcher, store, manager) -> None:
    manager.labels[SWITCH] = "Switch"
    manager.value_strings[SWITCH] = "off"

    dispatcher(_value_notification(NotificationType.VALUE_CHANGED, SWITCH))

    value_key = keys.value_key(HOME, NODE, SWITCH)
    assert store.hashes[value_key] == {"updated_value": "off"}
    assert store.hashes[keys.node_key(HOME, NODE)] == {"v_Switch": "off"}
    assert store.published == [("zw_value_update", value_key)]


def test_value_changed_without_string_is_silent(dispatcher, store) -> None:
    dispatcher(_value_notification(NotificationType.VALUE_CHANGED, SWITCH))
    assert store.hashes == {}
    assert store.published == []


def test_value_removed_deletes_and_unregisters(dispatcher, store) -> None:
    dispatcher.registry.register(SWITCH)

    dispatcher(_value_notification(NotificationType.VALUE_REMOVED, SWITCH))

    value_key = keys.value_key(HOME, NODE, SWITCH)
    assert store.deleted == [value_key]
    assert store.published == [("zw_value_delete", value_key)]
    assert SWITCH not in dispatcher.registry


def test_node_added_writes_metadata(dispatcher, store, manager) -> None:
    manager.node_names[NODE] = "Lamp"
    dispatcher(Notification(type=NotificationType.NODE_ADDED, home_id=HOME, node_id=NODE, byte=0x1F))

    node_key = keys.node_key(HOME, NODE)
    record = store.hashes[node_key]
    assert record["nodeName"] == "Lamp"
    assert record["nodeBasic"] == "04"
    assert record["nodeGeneric"] == "10"
    assert record["mfgId"] == "0x0086"
    assert record["isRoutingDevice"] == "true"
    assert record["isFrequentListeningDevice"] == "false"
    assert record["value"] == "1f"
    flags = [name for name in record if name.startswith("is")]
    assert len(flags) == 9
    assert record["isInfoReceived"] == "true"
    assert record["isZWavePlus"] == "false"
    assert store.published == [("zw_node_add", node_key)]


def test_node_removed_end_to_end(dispatcher, store) -> None:
    other_node = ValueID(home_id=HOME, node_id=NODE + 1, command_class_id=0x20)
    for value in (SWITCH, METER, other_node):
        dispatcher.registry.register(value)
    store.hset(keys.node_key(HOME, NODE), "nodeName", "Lamp")

    dispatcher(Notification(type=NotificationType.NODE_REMOVED, home_id=HOME, node_id=NODE))

    node_key = keys.node_key(HOME, NODE)
    assert node_key not in store.hashes
    assert store.published == [("zw_node_delete", node_key)]
    assert dispatcher.registry.snapshot() == (other_node,)


def test_node_event_and_naming(dispatcher, store, manager) -> None:
    manager.node_names[NODE] = "Porch"
    manager.node_locations[NODE] = "Outside"
    node_key = keys.node_key(HOME, NODE)

    dispatcher(Notification(type=NotificationType.NODE_EVENT, home_id=HOME, node_id=NODE, byte=0xFF))
    dispatcher(Notification(type=NotificationType.NODE_NAMING, home_id=HOME, node_id=NODE))

    assert store.hashes[node_key] == {"value": "ff", "nodeName": "Porch", "nodeLocation": "Outside"}
    assert store.published == [("zw_node_update", node_key), ("zw_node_named", node_key)]


def test_driver_ready_records_home_id(dispatcher) -> None:
    dispatcher(Notification(type=NotificationType.DRIVER_READY, home_id=HOME))
    assert dispatcher.home_id == HOME
    assert dispatcher.barrier.state is BarrierState.WAITING


@pytest.mark.parametrize(
    "kind", [NotificationType.AWAKE_NODES_QUERIED, NotificationType.ALL_NODES_QUERIED]
)
def test_nodes_queried_releases_barrier(dispatcher, kind) -> None:
    dispatcher(Notification(type=kind, home_id=HOME))
    assert dispatcher.barrier.wait(timeout_s=1) is BarrierState.READY


def test_failure_is_terminal(dispatcher) -> None:
    dispatcher(Notification(type=NotificationType.DRIVER_FAILED, home_id=HOME))
    dispatcher(Notification(type=NotificationType.ALL_NODES_QUERIED, home_id=HOME))
    assert dispatcher.barrier.wait(timeout_s=1) is BarrierState.FAILED


@pytest.mark.parametrize(
    "kind",
    [
        NotificationType.GROUP,
        NotificationType.POLLING_ENABLED,
        NotificationType.POLLING_DISABLED,
        NotificationType.NODE_PROTOCOL_INFO,
        NotificationType.DRIVER_RESET,
        NotificationType.NODE_QUERIES_COMPLETE,
        NotificationType.ESSENTIAL_NODE_QUERIES_COMPLETE,
        NotificationType.NOTIFICATION,
    ],
)
def test_ignored_notifications_touch_nothing(dispatcher, store, kind) -> None:
    dispatcher(Notification(type=kind, home_id=HOME, node_id=NODE))
    assert store.hashes == {}
    assert store.published == []
    assert dispatcher.barrier.state is BarrierState.WAITING


def test_handler_failure_is_contained(dispatcher, store, manager, monkeypatch, caplog) -> None:
    def broken(value_id):
        raise RuntimeError("runtime went away")

    monkeypatch.setattr(manager, "get_value_label", broken)
    dispatcher(_value_notification(NotificationType.VALUE_ADDED, SWITCH))
    assert "Failed to handle value_added" in caplog.text

    dispatcher(Notification(type=NotificationType.NODE_EVENT, home_id=HOME, node_id=NODE, byte=1))
    assert store.published == [("zw_node_update", keys.node_key(HOME, NODE))]


def test_reentrant_delivery_does_not_deadlock(store, manager) -> None:
    dispatcher = NotificationDispatcher(store, manager)
    manager.add_watcher(dispatcher)

    def label_with_side_effect(value_id):
        manager.emit(Notification(type=NotificationType.NODE_EVENT, home_id=HOME, node_id=NODE, byte=2))
        return "Switch"

    manager.get_value_label = label_with_side_effect
    dispatcher(_value_notification(NotificationType.VALUE_ADDED, SWITCH))

    assert ("zw_node_update", keys.node_key(HOME, NODE)) in store.published
    assert keys.value_key(HOME, NODE, SWITCH) in store.hashes
