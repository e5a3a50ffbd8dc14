"""Domain-specific errors for zwredis."""


class ZwRedisError(Exception):
    """Base error for zwredis."""


class ConfigValidationError(ZwRedisError):
    """Raised when a config file does not conform to schema or semantics."""


class ConfigLoadError(ZwRedisError):
    """Raised when reading config sources fails."""


class RuntimeLoadError(ZwRedisError):
    """Raised when the device-network runtime cannot be resolved or created."""


class KeyFormatError(ZwRedisError):
    """Raised when a store key does not follow the zw_* naming scheme."""


class StoreError(ZwRedisError):
    """Raised when a store operation needed for startup fails."""
