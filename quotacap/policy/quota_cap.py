"""Quota cap enforcement: clamp the host's profit quota per active category."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from quotacap.config.constants import (
    DEFAULT_CAP_ENABLED,
    DEFAULT_QUOTA_CAP,
    DISABLED_QUOTA_CAP,
    MAX_REASONABLE_QUOTA,
)
from quotacap.config.registry import CategoryConfigRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapStatus:
    """Effective cap settings for one category."""

    cap: int
    enabled: bool

    def to_dict(self) -> dict[str, int | bool]:
        return {"cap": self.cap, "enabled": self.enabled}


def validate_quota_value(value: int) -> bool:
    """Return True if ``value`` is usable as a cap.

    ``-1`` (uncapped) and any non-negative value are valid. Values above one
    million are accepted but logged as suspicious.
    """
    if value == DISABLED_QUOTA_CAP:
        return True
    if value < 0:
        logger.warning("Invalid quota value %d: caps must be non-negative or -1", value)
        return False
    if value > MAX_REASONABLE_QUOTA:
        logger.warning("Quota value %d seems unusually high; consider reviewing the configuration", value)
    return True


class QuotaCapPolicy:
    """Clamp incoming quota values using the registry's per-category caps.

    ``clamp_quota`` runs on the host's quota recompute path: it only reads
    in-memory registry state and never raises.
    """

    def __init__(self, registry: CategoryConfigRegistry) -> None:
        self.registry = registry

    def clamp_quota(self, active_category: Optional[str], raw_value: int) -> int:
        """Return ``raw_value`` limited to the active category's cap."""
        try:
            if not active_category:
                logger.debug("No active category, quota %d left unchanged", raw_value)
                return raw_value

            if len(self.registry) == 0:
                logger.debug("No category settings generated yet, quota %d left unchanged", raw_value)
                return raw_value

            cap = self.get_category_cap(active_category)
            enabled = self.is_cap_enabled(active_category)
            logger.debug("Category '%s': cap=%d, enabled=%s", active_category, cap, enabled)

            return self._apply_cap(active_category, raw_value, cap, enabled)
        except Exception as e:
            logger.error("Error applying quota cap for '%s': %s", active_category, e)
            return raw_value

    def _apply_cap(self, category: str, raw_value: int, cap: int, enabled: bool) -> int:
        if not enabled:
            logger.debug("Quota cap disabled for '%s', quota %d left unchanged", category, raw_value)
            return raw_value

        if cap == DISABLED_QUOTA_CAP:
            logger.debug("Quota cap set to -1 for '%s', quota %d left unchanged", category, raw_value)
            return raw_value

        if not validate_quota_value(cap):
            logger.warning("Invalid cap %d for '%s', using default %d", cap, category, DEFAULT_QUOTA_CAP)
            cap = DEFAULT_QUOTA_CAP

        if raw_value > cap:
            logger.info("Quota capped for '%s': %d -> %d", category, raw_value, cap)
            return cap

        logger.debug("Quota %d within cap %d for '%s'", raw_value, cap, category)
        return raw_value

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_category_cap(self, category: str) -> int:
        entry = self.registry.caps.get(category)
        if entry is None:
            logger.debug("No cap configured for '%s', using default %d", category, DEFAULT_QUOTA_CAP)
            return self.default_quota_cap()
        return entry.value

    def is_cap_enabled(self, category: str) -> bool:
        entry = self.registry.enabled.get(category)
        if entry is None:
            logger.debug("No enabled flag configured for '%s', defaulting to enabled", category)
            return DEFAULT_CAP_ENABLED
        return entry.value

    def default_quota_cap(self) -> int:
        return DEFAULT_QUOTA_CAP

    def validate_quota_value(self, value: int) -> bool:
        return validate_quota_value(value)

    # ------------------------------------------------------------------
    # Inspection and reset
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, CapStatus]:
        """Return the effective cap settings of every known category."""
        status: Dict[str, CapStatus] = {}
        try:
            for category in self.registry.category_names():
                status[category] = CapStatus(
                    cap=self.get_category_cap(category),
                    enabled=self.is_cap_enabled(category),
                )
        except Exception as e:
            logger.error("Error collecting quota cap status: %s", e)
        return status

    def reset_all_to_defaults(self) -> bool:
        """Set every cap to the default and every category to enabled, then save."""
        logger.info("Resetting all quota caps to default values")
        store = self.registry.store
        autosave = store.save_on_config_set
        # One save at the end instead of one per entry
        store.save_on_config_set = False
        try:
            for category in self.registry.category_names():
                self.registry.caps[category].value = DEFAULT_QUOTA_CAP
                enabled = self.registry.enabled.get(category)
                if enabled is not None:
                    enabled.value = DEFAULT_CAP_ENABLED
                logger.debug("Reset '%s' to cap=%d, enabled=%s", category, DEFAULT_QUOTA_CAP, DEFAULT_CAP_ENABLED)

            self.registry.save_configuration()
        except Exception as e:
            logger.error("Error resetting quota caps to defaults: %s", e)
            return False
        finally:
            store.save_on_config_set = autosave

        logger.info("All quota caps reset to default values (%d categories)", len(self.registry))
        return True
