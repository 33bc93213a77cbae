"""Utilities for loading the preview settings file."""

from __future__ import annotations

import logging
import threading
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Generic, Mapping, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Base exception for loader errors."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration on disk is invalid."""

    def __init__(self, message: str, errors: Any) -> None:
        super().__init__(message)
        self.errors = errors


def deep_merge(base: Mapping[str, Any], update: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``update`` into ``base`` without mutating either."""

    merged: Dict[str, Any] = deepcopy(dict(base))
    for key, value in update.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def normalise_settings_payload(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Map shorthand keys onto the settings schema.

    ``analytics_key`` may be given at the top level and a single
    ``template_dir`` string is accepted in place of ``template_dirs``.
    """

    data: Dict[str, Any] = deepcopy(dict(raw))
    defaults = dict(data.get("preview_defaults") or {})

    if "analytics_key" in data and "analytics_key" not in defaults:
        defaults["analytics_key"] = data.pop("analytics_key")
    if "template_dir" in data and "template_dirs" not in data:
        data["template_dirs"] = [data.pop("template_dir")]

    if defaults:
        data["preview_defaults"] = defaults
    return data


class YamlConfigLoader(Generic[T]):
    """Load a YAML settings file into a pydantic model."""

    def __init__(
        self,
        path: Optional[Path],
        model: Type[T],
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.path = path
        self.model = model
        self._lock = threading.Lock()
        self._log = log or logger

    def load(self) -> T:
        """Load configuration from disk, merging defaults from the schema."""

        with self._lock:
            defaults = self.model().model_dump()
            data: Dict[str, Any] = {}
            if self.path is not None and self.path.exists():
                try:
                    raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
                except yaml.YAMLError as exc:
                    raise ConfigError(f"Could not parse {self.path}: {exc}") from exc
                if raw is None:
                    raw = {}
                if not isinstance(raw, Mapping):
                    raise ConfigError(f"{self.path} must contain a YAML mapping")
                data = normalise_settings_payload(raw)
            elif self.path is not None:
                self._log.info("Settings file %s not found, using defaults", self.path)
            merged = deep_merge(defaults, data)
            try:
                return self.model(**merged)
            except ValidationError as exc:
                raise ConfigValidationError(
                    f"{self.path} does not match the settings schema", exc.errors()
                ) from exc


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "YamlConfigLoader",
    "deep_merge",
    "normalise_settings_payload",
]
