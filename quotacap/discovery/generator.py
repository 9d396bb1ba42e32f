"""Generate per-category cap settings from the discovered category list."""

from __future__ import annotations

import logging
from typing import List

from quotacap.config.constants import MAX_RETRIES, RETRY_DELAY_SECONDS
from quotacap.config.registry import CategoryConfigRegistry
from quotacap.discovery.parser import CategoryDiscoveryParser

logger = logging.getLogger(__name__)


class CategoryConfigGenerator:
    """Create cap/enabled entries for every category the parser finds.

    Failed runs count against a bounded retry budget. The generator never
    schedules a retry itself: callers check ``can_retry()`` and either call
    ``immediate_retry()`` or run ``generate()`` again later. Calls must not
    overlap; a run mutates the registry and saves the store.
    """

    max_retries = MAX_RETRIES
    retry_delay_seconds = RETRY_DELAY_SECONDS

    def __init__(self, registry: CategoryConfigRegistry, parser: CategoryDiscoveryParser) -> None:
        self.registry = registry
        self.parser = parser
        self._retry_count = 0
        self.last_categories: List[str] = []

    def generate(self) -> bool:
        """Discover categories and materialize their settings.

        Returns True only if at least one category was found and every entry
        was created and saved. Failures are logged and counted, never raised.
        """
        try:
            logger.info("Generating category cap settings from %s", self.parser.list_path)

            word = self.parser.resolve_category_word()
            logger.info("Using category word: %s", word)

            names = self.parser.parse_category_names(word)
            if not names:
                logger.warning("No %s entries found in %s", word.lower(), self.parser.list_path)
                return self._register_failure()

            logger.info("Found %d categories, creating config entries", len(names))
            failed = [name for name in names if not self.registry.create_category_entries(name, word)]
            if failed:
                logger.error("Could not create config entries for: %s", ", ".join(failed))
                return self._register_failure()

            self.registry.save_configuration()

            self.last_categories = names
            self._retry_count = 0
            logger.info("Category cap settings generated and saved (%d categories)", len(names))
            return True
        except Exception as e:
            logger.error("Error generating category cap settings: %s", e)
            return self._register_failure()

    def _register_failure(self) -> bool:
        """Count a failed run. Always returns False."""
        if self._retry_count >= self.max_retries:
            logger.error("Max retry attempts (%d) reached for category config generation", self.max_retries)
            self._retry_count = 0
            return False

        self._retry_count += 1
        logger.info(
            "Category config generation can be retried in %ds (attempt %d/%d)",
            self.retry_delay_seconds, self._retry_count, self.max_retries,
        )
        return False

    @property
    def retry_count(self) -> int:
        return self._retry_count

    def reset_retry_count(self) -> None:
        self._retry_count = 0

    def can_retry(self) -> bool:
        return self._retry_count < self.max_retries

    def immediate_retry(self) -> bool:
        """Run one more generation attempt right away, if the budget allows."""
        if not self.can_retry():
            return False
        return self.generate()
