"""Per-category cap settings backed by the settings store."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, TypeVar

from quotacap.config.constants import (
    DEFAULT_CAP_ENABLED,
    DEFAULT_CATEGORY_WORD,
    DEFAULT_DEBUG_ENABLED,
    DEFAULT_QUOTA_CAP,
    DESCRIPTION_ENABLE_DEBUG,
    DISABLED_QUOTA_CAP,
    KEY_ENABLE_DEBUG,
    SECTION_GENERAL,
    SECTION_QUOTA_CAP_TOGGLES,
    SECTION_QUOTA_CAPS,
)
from quotacap.config.keys import cap_description, cap_key, enabled_description, enabled_key
from quotacap.config.store import ConfigEntry, ConfigStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bool, int, float, str)


class CategoryConfigRegistry:
    """Holds the cap and enabled entries for every known category.

    ``caps`` and ``enabled`` are keyed by category name. Entries are only ever
    added through ``create_category_entries``; re-creating a known category
    returns the existing entries and leaves their values alone.
    """

    def __init__(self, store: ConfigStore) -> None:
        self.store = store
        self.caps: Dict[str, ConfigEntry[int]] = {}
        self.enabled: Dict[str, ConfigEntry[bool]] = {}
        self.enable_debug: Optional[ConfigEntry[bool]] = None

    # ------------------------------------------------------------------
    # Store lifecycle
    # ------------------------------------------------------------------

    def load_configuration(self) -> None:
        """Bind the general settings."""
        try:
            logger.info("Loading configuration from %s", self.store.path)
            self.enable_debug = self.get_config_entry(
                SECTION_GENERAL,
                KEY_ENABLE_DEBUG,
                DEFAULT_DEBUG_ENABLED,
                DESCRIPTION_ENABLE_DEBUG,
            )
            logger.info("Configuration loaded")
        except Exception as e:
            logger.error("Error loading configuration: %s", e)
            raise

    def save_configuration(self) -> None:
        try:
            self.store.save()
            logger.info("Configuration saved")
        except Exception as e:
            logger.error("Error saving configuration: %s", e)
            raise

    def reload_configuration(self) -> None:
        try:
            self.store.reload()
            logger.info("Configuration reloaded")
        except Exception as e:
            logger.error("Error reloading configuration: %s", e)
            raise

    @property
    def save_on_config_set(self) -> bool:
        return self.store.save_on_config_set

    @save_on_config_set.setter
    def save_on_config_set(self, value: bool) -> None:
        self.store.save_on_config_set = value

    @property
    def debug_enabled(self) -> bool:
        if self.enable_debug is None:
            return DEFAULT_DEBUG_ENABLED
        return self.enable_debug.value

    def get_config_entry(self, section: str, key: str, default_value: T, description: str) -> ConfigEntry[T]:
        try:
            return self.store.bind(section, key, default_value, description)
        except Exception as e:
            logger.error("Error getting config entry '%s.%s': %s", section, key, e)
            raise

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def create_category_entries(self, name: str, word: Optional[str] = None) -> bool:
        """Get or create the cap and enabled entries for ``name``.

        Returns False when the name is empty or the store refused the entries.
        """
        if not name:
            logger.error("Category name cannot be empty")
            return False
        word = word or DEFAULT_CATEGORY_WORD

        try:
            cap = self.get_config_entry(
                SECTION_QUOTA_CAPS,
                cap_key(name),
                DEFAULT_QUOTA_CAP,
                cap_description(name, word),
            )
            enabled = self.get_config_entry(
                SECTION_QUOTA_CAP_TOGGLES,
                enabled_key(name),
                DEFAULT_CAP_ENABLED,
                enabled_description(name, word),
            )
            self.caps[name] = cap
            self.enabled[name] = enabled
        except Exception as e:
            logger.error("Error creating config entries for %s '%s': %s", word.lower(), name, e)
            return False

        logger.debug(
            "Config entries ready for %s '%s' (cap=%d, enabled=%s)",
            word.lower(), name, self.caps[name].value, self.enabled[name].value,
        )
        return True

    def category_names(self) -> List[str]:
        return list(self.caps)

    def validate_config(self) -> bool:
        """Check that the general settings are loaded and report suspicious caps."""
        logger.info("Validating configuration...")
        if self.enable_debug is None:
            logger.error("Debug configuration entry is not loaded")
            return False

        for name, entry in self.caps.items():
            if entry.value < DISABLED_QUOTA_CAP:
                logger.warning("Cap value for '%s' is invalid: %d", name, entry.value)

        for name in self.caps:
            if name not in self.enabled:
                logger.error("Category '%s' has a cap entry but no enabled entry", name)
                return False

        logger.info("Configuration validation completed for %d categories", len(self.caps))
        return True

    def __len__(self) -> int:
        return len(self.caps)

    def __contains__(self, name: object) -> bool:
        return name in self.caps
