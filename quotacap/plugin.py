"""Composition root: wires the store, registry, generator, policy, and hook.

Usage:
    plugin = DynamicQuotaCapPlugin("BepInEx/config", active_category=lambda: collections.current)
    plugin.start()
    new_quota = plugin.hook.on_new_quota(raw_quota)
    ...
    plugin.shutdown()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from quotacap.config.constants import DEFAULT_STORE_FILE
from quotacap.config.registry import CategoryConfigRegistry
from quotacap.config.store import ConfigStore
from quotacap.discovery.generator import CategoryConfigGenerator
from quotacap.discovery.parser import CategoryDiscoveryParser
from quotacap.hooks.quota_hook import ActiveCategoryQuery, QuotaHook, no_active_category
from quotacap.logging_setup import apply_debug_setting
from quotacap.policy.quota_cap import QuotaCapPolicy

logger = logging.getLogger(__name__)


class DynamicQuotaCapPlugin:
    """Owns the add-on's services for the lifetime of the host process.

    Components are built by ``start()``; until it succeeds they are None. A
    corrupt settings file does not stop start-up: it is set aside and the
    add-on runs on defaults.
    """

    def __init__(
        self,
        config_dir: str | Path,
        store_path: Optional[str | Path] = None,
        active_category: ActiveCategoryQuery = no_active_category,
        debug: Optional[bool] = None,
    ) -> None:
        self.config_dir = Path(config_dir)
        self.store_path = Path(store_path) if store_path else self.config_dir / DEFAULT_STORE_FILE
        self.active_category = active_category
        # Overrides the stored EnableDebug flag when set
        self.debug = debug

        self.store: Optional[ConfigStore] = None
        self.registry: Optional[CategoryConfigRegistry] = None
        self.generator: Optional[CategoryConfigGenerator] = None
        self.policy: Optional[QuotaCapPolicy] = None
        self.hook: Optional[QuotaHook] = None
        self.generated = False

    @property
    def started(self) -> bool:
        return self.hook is not None

    def start(self) -> bool:
        """Load settings, build services, and generate category settings.

        Returns True if the services are ready (category generation may still
        have failed). Errors are logged, never raised.
        """
        logger.info("Initializing Dynamic Quota Cap")
        try:
            self.store = ConfigStore.open_or_recover(self.store_path)
            self.registry = CategoryConfigRegistry(self.store)
            self.registry.load_configuration()
            apply_debug_setting(self.registry.debug_enabled if self.debug is None else self.debug)

            self.policy = QuotaCapPolicy(self.registry)
            self.generator = CategoryConfigGenerator(
                self.registry, CategoryDiscoveryParser(self.config_dir)
            )
            self.hook = QuotaHook(self.policy, self.active_category)

            if not self.hook.validate_prerequisites():
                logger.error("Quota hook prerequisites not met; caps may not apply")
        except Exception as e:
            logger.error("Failed to initialize Dynamic Quota Cap: %s", e)
            self.hook = None
            return False

        self.generate_configs()
        self.registry.validate_config()
        logger.info("Dynamic Quota Cap initialized")
        return True

    def generate_configs(self) -> bool:
        """Run category generation, with one immediate retry on failure.

        Also the manual trigger for hosts that want to regenerate later.
        """
        if self.generator is None or self.registry is None:
            logger.error("Cannot generate category settings before start()")
            return False

        try:
            success = self.generator.generate()
            if success:
                logger.info("Configuration generation completed for %d categories", len(self.registry))
                self.generated = True
                return True

            logger.error(
                "Configuration generation failed (%d categories known); retry may be attempted",
                len(self.registry),
            )
            if self.generator.can_retry():
                logger.info("Attempting immediate retry of category config generation")
                success = self.generator.immediate_retry()
                if success:
                    logger.info("Configuration generation completed for %d categories", len(self.registry))
                else:
                    logger.error("Failed to generate category settings after retry")
            self.generated = success
            return success
        except Exception as e:
            logger.error("Error generating category settings: %s", e)
            return False

    def shutdown(self) -> None:
        """Save settings one last time."""
        logger.info("Dynamic Quota Cap shutting down")
        if self.registry is None:
            return
        try:
            self.registry.save_configuration()
        except Exception as e:
            logger.error("Error during shutdown: %s", e)
            return
        logger.info("Dynamic Quota Cap shutdown complete")
