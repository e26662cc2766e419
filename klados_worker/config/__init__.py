"""Configuration package for runtime settings and startup validation."""

from .logging_setup import config_configure_logging
from .settings import (
    SettingsLoadError,
    WorkerConfigurationError,
    WorkerSettings,
    config_load_settings,
)

__all__ = [
    "SettingsLoadError",
    "WorkerConfigurationError",
    "WorkerSettings",
    "config_configure_logging",
    "config_load_settings",
]
