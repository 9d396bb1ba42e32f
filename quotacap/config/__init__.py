"""Settings store, category registry, and key formatting."""

from quotacap.config.registry import CategoryConfigRegistry
from quotacap.config.store import ConfigEntry, ConfigStore, ConfigStoreError

__all__ = ["CategoryConfigRegistry", "ConfigEntry", "ConfigStore", "ConfigStoreError"]
