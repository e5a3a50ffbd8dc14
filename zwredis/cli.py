"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from zwredis.core import keys
from zwredis.core.commands import (
    CHANNEL_SET_NODE_LEVEL,
    CHANNEL_SET_NODE_LOCATION,
    CHANNEL_SET_NODE_NAME,
    CHANNEL_TURN_OFF_NODE,
    CHANNEL_TURN_ON_NODE,
)
from zwredis.core.errors import ZwRedisError
from zwredis.core.service import BridgeService

app = typer.Typer(help="Z-Wave network to Redis bridge")
send_app = typer.Typer(help="Publish control commands to a running bridge")
app.add_typer(send_app, name="send")

_CONFIG_OPTION = typer.Option(None, "--config", help="YAML config overriding the defaults")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_service(config: Path | None) -> BridgeService:
    return BridgeService(config_path=config)


def _hex(value: str) -> int:
    try:
        return int(value, 16)
    except ValueError:
        raise typer.BadParameter(f"'{value}' is not hexadecimal") from None


@app.command("run")
def run_bridge(
    port: str | None = typer.Argument(None, help="Serial device path, or 'usb' for a HID controller"),
    config: Path | None = _CONFIG_OPTION,
    log_level: str = typer.Option("info", "--log-level", help="Python logging level"),
) -> None:
    """Attach to the network and mirror it into Redis until told to exit."""
    _configure_logging(log_level)
    try:
        service = _build_service(config).with_port(port)
        state = service.run()
        typer.echo(f"Bridge stopped ({state.value})")
    except ZwRedisError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("key")
def describe_key(key: str) -> None:
    """Decode a zw_home/zw_node/zw_value store key."""
    try:
        prefix, home_id, node_id, value_id = keys.parse_key(key)
    except ZwRedisError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"{prefix}: home={keys.hex32(home_id)}")
    if node_id is not None:
        typer.echo(f"  node={keys.hex8(node_id)}")
    if value_id is not None:
        typer.echo(f"  value={keys.hex64(value_id)}")


def _publish(config: Path | None, channel: str, home: str, node: str, argument: int | str | None = None) -> None:
    try:
        service = _build_service(config)
        payload, receivers = service.publish_command(channel, _hex(home), _hex(node), argument)
        typer.echo(f"Published {channel} {payload} ({receivers} receivers)")
    except ZwRedisError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@send_app.command("on")
def send_on(home: str, node: str, config: Path | None = _CONFIG_OPTION) -> None:
    """Turn a node on. HOME and NODE are hexadecimal."""
    _publish(config, CHANNEL_TURN_ON_NODE, home, node)


@send_app.command("off")
def send_off(home: str, node: str, config: Path | None = _CONFIG_OPTION) -> None:
    """Turn a node off. HOME and NODE are hexadecimal."""
    _publish(config, CHANNEL_TURN_OFF_NODE, home, node)


@send_app.command("level")
def send_level(
    home: str,
    node: str,
    level: str,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Set a node's level. LEVEL is hexadecimal, 00-ff."""
    value = _hex(level)
    if not 0 <= value <= 0xFF:
        raise typer.BadParameter(f"'{level}' is outside 00-ff")
    _publish(config, CHANNEL_SET_NODE_LEVEL, home, node, value)


@send_app.command("name")
def send_name(home: str, node: str, name: str, config: Path | None = _CONFIG_OPTION) -> None:
    """Rename a node. Text after a ':' is dropped by the bridge."""
    _publish(config, CHANNEL_SET_NODE_NAME, home, node, name)


@send_app.command("location")
def send_location(home: str, node: str, location: str, config: Path | None = _CONFIG_OPTION) -> None:
    """Set a node's location. Text after a ':' is dropped by the bridge."""
    _publish(config, CHANNEL_SET_NODE_LOCATION, home, node, location)


@send_app.command("exit")
def send_exit(config: Path | None = _CONFIG_OPTION) -> None:
    """Stop a running bridge's command listener."""
    try:
        receivers = _build_service(config).request_exit()
        typer.echo(f"Exit requested ({receivers} receivers)")
    except ZwRedisError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
