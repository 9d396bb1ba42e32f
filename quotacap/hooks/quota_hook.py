"""Adapter the host calls whenever it recomputes its profit quota.

The host owns the interception mechanism (a patch on its quota setter, an
event, a callback). It forwards the freshly computed value to
``QuotaHook.on_new_quota`` and stores whatever comes back.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from quotacap.policy.quota_cap import QuotaCapPolicy

logger = logging.getLogger(__name__)

# Read-only query for the host's currently active category (None/"" outside any)
ActiveCategoryQuery = Callable[[], Optional[str]]


def no_active_category() -> Optional[str]:
    return None


class QuotaHook:
    """Apply the quota cap policy to values produced by the host."""

    def __init__(self, policy: QuotaCapPolicy, active_category: ActiveCategoryQuery = no_active_category) -> None:
        self.policy = policy
        self.active_category = active_category

    def on_new_quota(self, raw_value: int) -> int:
        """Return the value the host should use as its new quota. Never raises."""
        try:
            category = self.active_category()
            logger.debug("New quota %d computed in category '%s'", raw_value, category)

            capped = self.policy.clamp_quota(category, raw_value)
            if capped != raw_value:
                logger.info("Quota modified by hook: %d -> %d", raw_value, capped)
            return capped
        except Exception as e:
            logger.error("Error in quota hook, keeping quota %d: %s", raw_value, e)
            return raw_value

    def validate_prerequisites(self) -> bool:
        """Check that the active category can be queried."""
        if not callable(self.active_category):
            logger.error("Active category query is not callable: %r", self.active_category)
            return False
        try:
            self.active_category()
        except Exception as e:
            logger.error("Active category query failed: %s", e)
            return False
        logger.info("Quota hook prerequisites validated")
        return True

    def current_category_for_debug(self) -> str:
        try:
            return self.active_category() or "Unknown"
        except Exception:
            return "Error"
