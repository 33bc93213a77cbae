"""Configuration helpers for the preview server."""

from .loader import (
    ConfigError,
    ConfigValidationError,
    YamlConfigLoader,
    deep_merge,
    normalise_settings_payload,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "YamlConfigLoader",
    "deep_merge",
    "normalise_settings_payload",
]
