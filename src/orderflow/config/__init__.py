"""orderflow config."""

from .exceptions import ConfigError, ConfigErrorCodes
from .loader import apply_env_overrides, load, merge_layers
from .models import (
    AppConfig,
    BrokerSection,
    LogSection,
    RetrySection,
    UsersSection,
)

__all__ = [
    "AppConfig",
    "BrokerSection",
    "ConfigError",
    "ConfigErrorCodes",
    "LogSection",
    "RetrySection",
    "UsersSection",
    "apply_env_overrides",
    "load",
    "merge_layers",
]
