"""Resolve and instantiate the device-network runtime."""

from __future__ import annotations

import importlib
import logging
import os
from collections.abc import Callable

from zwredis.core.errors import RuntimeLoadError
from zwredis.core.model import RuntimeOptions
from zwredis.network.base import ZWaveManager

RUNTIME_ENV = "ZWREDIS_RUNTIME"
CONFIG_PATH_ENV = "OPEN_ZWAVE_CONFIG"
LOGGER = logging.getLogger(__name__)

ManagerFactory = Callable[[RuntimeOptions], ZWaveManager]


def resolve_factory(spec: str | None) -> ManagerFactory:
    """Import a ``module:attr`` factory; the environment overrides ``spec``."""
    spec = os.environ.get(RUNTIME_ENV) or spec
    if not spec:
        raise RuntimeLoadError(
            f"No device-network runtime configured. Set runtime.factory or {RUNTIME_ENV}."
        )
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise RuntimeLoadError(f"Runtime factory '{spec}' must look like 'package.module:factory'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RuntimeLoadError(f"Could not import runtime module '{module_name}': {exc}") from exc

    factory = module
    for part in attr.split("."):
        try:
            factory = getattr(factory, part)
        except AttributeError as exc:
            raise RuntimeLoadError(f"Runtime module '{module_name}' has no attribute '{attr}'") from exc
    if not callable(factory):
        raise RuntimeLoadError(f"Runtime factory '{spec}' is not callable")
    return factory


def runtime_options(options: dict[str, object]) -> RuntimeOptions:
    config_path = os.environ.get(CONFIG_PATH_ENV)
    if config_path is None:
        LOGGER.warning("%s is not set; the runtime will use its built-in config path", CONFIG_PATH_ENV)
    return RuntimeOptions(config_path=config_path, options=dict(options))


def create_manager(spec: str | None, options: dict[str, object]) -> ZWaveManager:
    factory = resolve_factory(spec)
    try:
        return factory(runtime_options(options))
    except Exception as exc:
        raise RuntimeLoadError(f"Runtime factory failed: {exc}") from exc
