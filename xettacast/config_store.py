"""A YAML-backed key/value configuration file with a default fallback."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, TypeVar

import yaml

log = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigError(Exception):
    """Raised when the configuration cannot be read, parsed, written or queried."""


class ConfigItem(ABC):
    """A typed configuration entry that knows the key it is stored under."""

    @abstractmethod
    def save(self) -> tuple[str, Any]:
        """Return the key and the YAML value this item is stored as."""


class ConfigStore:
    """Configuration kept in a YAML file, created from a default text when missing."""

    def __init__(self, path: str | os.PathLike[str], default: str | None = None) -> None:
        self.path = Path(path)
        self.default = default
        self.data: Any = None
        self.changed = False
        self.reload()

    def _mapping(self) -> dict[Any, Any]:
        if self.data is None:
            self.data = {}
        if not isinstance(self.data, dict):
            raise ConfigError("Config data is not a mapping")
        return self.data

    def set_raw(self, key: str, value: str) -> None:
        """Store a plain string under ``key``."""
        self._mapping()[key] = str(value)
        self.changed = True

    def set(self, item: ConfigItem) -> None:
        """Store a typed item under the key it reports."""
        key, value = item.save()
        self._mapping()[key] = value
        self.changed = True

    def _lookup(self, key: str) -> Any:
        if isinstance(self.data, dict):
            return self.data.get(key)
        return None

    def get_raw(self, key: str) -> str:
        """Return the string stored under ``key``."""
        value = self._lookup(key)
        if not isinstance(value, str):
            raise ConfigError("Failed to get value as string")
        return value

    def get(self, key: str, loader: Callable[[str, Any], T]) -> T:
        """Build a typed item from the value under ``key`` with ``loader(key, value)``."""
        return loader(key, self._lookup(key))

    def reload(self) -> None:
        """Read the file again, or fall back to the default when it does not exist."""
        if not self.path.exists():
            self.reset()
            return
        log.info("Loading config from: %s", self.path)
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read config: {exc}") from exc
        try:
            self.data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse config: {exc}") from exc
        self.changed = False

    def reset(self) -> None:
        """Replace the data with the default text and write it out."""
        if self.default is None:
            raise ConfigError("No default config provided")
        try:
            self.data = yaml.safe_load(self.default)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse default config: {exc}") from exc
        self.changed = False
        self.save()

    def save(self) -> None:
        """Write the current data to the file, creating its directory if needed."""
        try:
            text = yaml.safe_dump(self.data, sort_keys=False)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to serialize data: {exc}") from exc

        directory = self.path.parent
        if not directory.exists():
            log.info("Creating directory: %s", directory)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ConfigError(f"Failed to create directory: {exc}") from exc

        log.info("Saving config to: %s", self.path)
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write config: {exc}") from exc
        self.changed = False