"""Bridge startup and teardown sequence used by the CLI and API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from redis import Redis, RedisError

from zwredis.core import keys
from zwredis.core.commands import CHANNEL_CONTROL, format_command
from zwredis.core.config_loader import load_config
from zwredis.core.dispatcher import NotificationDispatcher
from zwredis.core.errors import StoreError
from zwredis.core.listener import CommandListener
from zwredis.core.model import BarrierState, BridgeConfig, DriverStatistics
from zwredis.network.base import ZWaveManager
from zwredis.network.loader import create_manager

LOGGER = logging.getLogger(__name__)

StoreFactory = Callable[[BridgeConfig], Redis]


def _redis_client(config: BridgeConfig) -> Redis:
    return Redis(
        host=config.redis.host,
        port=config.redis.port,
        db=config.redis.db,
        decode_responses=True,
    )


class BridgeService:
    def __init__(
        self,
        *,
        config: BridgeConfig | None = None,
        config_path: Path | None = None,
        manager: ZWaveManager | None = None,
        store_factory: StoreFactory | None = None,
    ) -> None:
        self.config = config or load_config(config_path)
        self._store_factory = store_factory or _redis_client
        self._manager = manager
        self.dispatcher: NotificationDispatcher | None = None
        self.listener: CommandListener | None = None

    def with_port(self, port: str | None) -> BridgeService:
        """Override the configured driver port (serial path or ``usb``)."""
        if port:
            self.config = replace(self.config, driver=replace(self.config.driver, port=port))
        return self

    def run(self) -> BarrierState:
        """Attach to the network, serve commands until exit, then tear down."""
        manager = self._manager or create_manager(
            self.config.runtime_factory, self.config.runtime_options
        )
        try:
            store = self._store_factory(self.config)
            try:
                return self._attach(manager, store)
            finally:
                store.close()
        finally:
            manager.destroy()

    def _attach(self, manager: ZWaveManager, store: Redis) -> BarrierState:
        dispatcher = NotificationDispatcher(store, manager)
        self.dispatcher = dispatcher
        driver = self.config.driver

        manager.add_watcher(dispatcher)
        try:
            manager.add_driver(driver.driver_name, usb=driver.is_usb)
            try:
                self._record_port(store, driver.port)
                state = dispatcher.barrier.wait(self.config.init_timeout_s)
                if state is BarrierState.READY:
                    self._serve(manager, dispatcher)
                else:
                    LOGGER.error("Network initialisation failed; skipping config write and polling")
                return state
            finally:
                manager.remove_driver(driver.driver_name)
        finally:
            manager.remove_watcher(dispatcher)

    def _record_port(self, store: Redis, port: str) -> None:
        try:
            store.set(keys.PORT_KEY, port)
            LOGGER.info("port: %s", store.get(keys.PORT_KEY))
        except RedisError as exc:
            raise StoreError(f"Could not write '{keys.PORT_KEY}' to the store: {exc}") from exc

    def _serve(self, manager: ZWaveManager, dispatcher: NotificationDispatcher) -> None:
        home_id = dispatcher.home_id or 0
        manager.write_config(home_id)

        # Snapshot under the registry lock, call the runtime outside it.
        polled = dispatcher.registry.snapshot()
        for value_id in polled:
            manager.enable_poll(value_id, self.config.poll_intensity)
        LOGGER.info("Polling enabled for %d value(s)", len(polled))

        listen_store = self._store_factory(self.config)
        self.listener = CommandListener(listen_store, manager, home_id)
        try:
            self.listener.run()
        except RedisError as exc:
            raise StoreError(f"Command channel connection failed: {exc}") from exc
        finally:
            listen_store.close()
            log_driver_statistics(manager.get_driver_statistics(home_id))

    def publish_command(
        self,
        channel: str,
        home_id: int,
        node_id: int,
        argument: int | str | None = None,
    ) -> tuple[str, int]:
        """Publish one command message; returns the payload and receiver count."""
        payload = format_command(channel, home_id, node_id, argument)
        store = self._store_factory(self.config)
        try:
            receivers = store.publish(channel, payload)
        except RedisError as exc:
            raise StoreError(f"Could not publish to {channel}: {exc}") from exc
        finally:
            store.close()
        return payload, receivers

    def request_exit(self) -> int:
        """Ask a running listener to unsubscribe and stop."""
        _, receivers = self.publish_command(CHANNEL_CONTROL, 0, 0)
        return receivers


def log_driver_statistics(data: DriverStatistics) -> None:
    LOGGER.info(
        "SOF: %d ACK Waiting: %d Read Aborts: %d Bad Checksums: %d",
        data.sof_count,
        data.ack_waiting,
        data.read_aborts,
        data.bad_checksums,
    )
    LOGGER.info(
        "Reads: %d Writes: %d CAN: %d NAK: %d ACK: %d Out of Frame: %d",
        data.reads,
        data.writes,
        data.can_count,
        data.nak_count,
        data.ack_count,
        data.out_of_frame,
    )
    LOGGER.info("Dropped: %d Retries: %d", data.dropped, data.retries)
