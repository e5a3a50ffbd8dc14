"""Configuration loading and validation for the bridge."""

from __future__ import annotations

import json
import logging
import os
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from zwredis.core.errors import ConfigLoadError, ConfigValidationError
from zwredis.core.model import BridgeConfig, DriverSettings, RedisSettings

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# No implicit booleans: runtime option values such as "on"/"off" stay strings.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _normalize_option(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return value


def _load_schema_validator() -> Any:
    schema_text = resources.files("zwredis.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def user_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "zwredis/config.yaml"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _validate(doc: dict[str, Any], source: Path | Traversable) -> None:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _build_config(doc: dict[str, Any]) -> BridgeConfig:
    redis_doc = doc["redis"]
    driver_doc = doc["driver"]
    runtime_doc = doc["runtime"]
    timeout = doc.get("init_timeout_s")
    return BridgeConfig(
        redis=RedisSettings(
            host=redis_doc["host"],
            port=int(redis_doc["port"]),
            db=int(redis_doc["db"]),
        ),
        driver=DriverSettings(port=driver_doc["port"], hid_name=driver_doc["hid_name"]),
        runtime_factory=runtime_doc.get("factory"),
        runtime_options={
            name: _normalize_option(value) for name, value in runtime_doc.get("options", {}).items()
        },
        poll_intensity=int(doc["polling"]["intensity"]),
        init_timeout_s=float(timeout) if timeout is not None else None,
    )


def load_config(path: Path | None = None) -> BridgeConfig:
    """Load packaged defaults, then overlay ``path`` or the user config file."""
    default_path = resources.files("zwredis.defaults").joinpath("bridge.yaml")
    doc = _read_yaml(default_path)
    _validate(doc, default_path)

    override_path = path
    if override_path is None:
        candidate = user_config_path()
        if candidate.is_file():
            override_path = candidate
    elif not override_path.is_file():
        raise ConfigLoadError(f"Config file {override_path} does not exist")

    if override_path is not None:
        override = _read_yaml(override_path)
        _validate(override, override_path)
        LOGGER.info("Using config overrides from %s", override_path)
        doc = _merge(doc, override)

    return _build_config(doc)
