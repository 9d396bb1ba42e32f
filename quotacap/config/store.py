"""YAML-backed settings store with typed, described entries.

The store file is a two-level mapping::

    General:
      EnableDebug: true
    Quota Caps:
      Alpha_Cap: 4000

Values read from disk that no entry has been bound to yet are kept and written
back on save, so settings for categories that are not currently known survive.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

import yaml
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from quotacap.config.constants import CORRUPT_STORE_SUFFIX

logger = logging.getLogger(__name__)

T = TypeVar("T", bool, int, float, str)

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}

FILE_HEADER = "# Dynamic Quota Cap settings. Set a cap to -1 to leave the quota uncapped.\n"


class ConfigStoreError(Exception):
    """The store file exists but is not a valid settings document."""


def coerce_value(raw: Any, kind: type) -> Any:
    """Convert a persisted value to ``kind``.

    Raises ``TypeError`` or ``ValueError`` when the value cannot represent the
    requested type (e.g. ``"abc"`` for an int, ``True`` for an int, ``2`` for a bool).
    """
    if kind is bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, int) and raw in (0, 1):
            return bool(raw)
        if isinstance(raw, str):
            lowered = raw.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"not a boolean: {raw!r}")
        raise TypeError(f"cannot read {type(raw).__name__} as bool")

    if kind is int:
        if isinstance(raw, bool):
            raise TypeError("bool is not an int value")
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        if isinstance(raw, str):
            return int(raw.strip())
        raise TypeError(f"cannot read {type(raw).__name__} as int")

    if kind is float:
        if isinstance(raw, bool):
            raise TypeError("bool is not a float value")
        return float(raw)

    if kind is str:
        if raw is None:
            raise TypeError("missing string value")
        return str(raw)

    raise TypeError(f"unsupported setting type: {kind.__name__}")


class ConfigEntry(Generic[T]):
    """A single bound setting. Assigning ``value`` persists through the owning store."""

    def __init__(
        self,
        store: "ConfigStore",
        section: str,
        key: str,
        default_value: T,
        description: str,
        value: T,
    ) -> None:
        self._store = store
        self.section = section
        self.key = key
        self.default_value = default_value
        self.description = description
        self._value = value

    @property
    def setting_type(self) -> type:
        return type(self.default_value)

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        coerced = coerce_value(new_value, self.setting_type)
        if coerced == self._value:
            return
        self._value = coerced
        self._store._entry_changed(self)

    def reset(self) -> None:
        """Restore the default value."""
        self.value = self.default_value

    def __repr__(self) -> str:
        return f"ConfigEntry({self.section!r}, {self.key!r}, value={self._value!r})"


class ConfigStore:
    """Persisted ``(section, key) -> value`` mapping.

    Usage:
        store = ConfigStore("BepInEx/config/com.example.dynamicquotacap.yaml")
        entry = store.bind("Quota Caps", "Alpha_Cap", 4000, "Quota cap for Alpha")
        entry.value = 2500   # saved immediately when save_on_config_set is on
    """

    def __init__(self, path: str | Path, save_on_config_set: bool = True) -> None:
        self.path = Path(path)
        self.save_on_config_set = save_on_config_set
        self._entries: Dict[Tuple[str, str], ConfigEntry] = {}
        self._raw: Dict[str, Dict[str, Any]] = self._read() if self.path.exists() else {}

    @classmethod
    def open_or_recover(cls, path: str | Path, save_on_config_set: bool = True) -> ConfigStore:
        """Open the store, setting an unreadable file aside instead of failing.

        A corrupt file is renamed to ``<name>.corrupt`` (replacing an older
        one) and an empty store is returned, so every entry starts from its
        default. Errors moving the file propagate.
        """
        path = Path(path)
        try:
            return cls(path, save_on_config_set)
        except ConfigStoreError as e:
            backup = path.with_name(path.name + CORRUPT_STORE_SUFFIX)
            logger.error("%s; moving it to %s and starting from defaults", e, backup)
            path.replace(backup)
        return cls(path, save_on_config_set)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def bind(self, section: str, key: str, default_value: T, description: str = "") -> ConfigEntry[T]:
        """Return the entry for ``(section, key)``, creating it if needed.

        A new entry takes its value from the store file when one is present and
        readable as the default's type, otherwise the default. An existing
        entry is returned as-is.
        """
        existing = self._entries.get((section, key))
        if existing is not None:
            return existing

        value = self._persisted_or_default(section, key, default_value)
        entry: ConfigEntry[T] = ConfigEntry(self, section, key, default_value, description, value)
        self._entries[(section, key)] = entry
        return entry

    def get_entry(self, section: str, key: str) -> Optional[ConfigEntry]:
        return self._entries.get((section, key))

    def entries(self) -> List[ConfigEntry]:
        return list(self._entries.values())

    def orphaned_keys(self) -> List[Tuple[str, str]]:
        """Keys present in the store file that no entry is bound to."""
        return [
            (section, key)
            for section, values in self._raw.items()
            for key in values
            if (section, key) not in self._entries
        ]

    def __contains__(self, item: Tuple[str, str]) -> bool:
        return item in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Document as it would be written by ``save()``."""
        data: Dict[str, Dict[str, Any]] = {
            section: dict(values) for section, values in self._raw.items()
        }
        for entry in self._entries.values():
            data.setdefault(entry.section, {})[entry.key] = entry.value
        return data

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def save(self) -> None:
        """Write every bound and orphaned value to the store file."""
        data = self.to_dict()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        body = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        tmp_path.write_text(FILE_HEADER + body, encoding="utf-8")
        tmp_path.replace(self.path)

        self._raw = data
        logger.debug("Saved %d settings to %s", len(self._entries), self.path)

    def reload(self) -> None:
        """Re-read the store file and refresh every bound entry."""
        self._raw = self._read() if self.path.exists() else {}
        for entry in self._entries.values():
            # Direct assignment: reloading must not trigger a save
            entry._value = self._persisted_or_default(entry.section, entry.key, entry.default_value)
        logger.debug("Reloaded %d settings from %s", len(self._entries), self.path)

    def _read(self) -> Dict[str, Dict[str, Any]]:
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise ConfigStoreError(f"Invalid YAML in {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigStoreError(f"{self.path} must contain a mapping of sections")

        raw: Dict[str, Dict[str, Any]] = {}
        for section, values in data.items():
            if values is None:
                values = {}
            if not isinstance(values, dict):
                raise ConfigStoreError(f"Section {section!r} in {self.path} is not a mapping")
            raw[str(section)] = {str(k): v for k, v in values.items()}
        return raw

    def _persisted_or_default(self, section: str, key: str, default_value: Any) -> Any:
        values = self._raw.get(section, {})
        if key not in values:
            return default_value
        try:
            return coerce_value(values[key], type(default_value))
        except (TypeError, ValueError):
            logger.warning(
                "Ignoring invalid value %r for %s.%s; using default %r",
                values[key], section, key, default_value,
            )
            return default_value

    def _entry_changed(self, entry: ConfigEntry) -> None:
        if self.save_on_config_set:
            self.save()
