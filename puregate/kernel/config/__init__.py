"""Configuration loading and management for puregate."""

from puregate.kernel.config.loader import ConfigLoader, get_default_config, load_config
from puregate.kernel.config.models import LoggingConfig, PureGateConfig

__all__ = [
    "ConfigLoader",
    "LoggingConfig",
    "PureGateConfig",
    "get_default_config",
    "load_config",
]
