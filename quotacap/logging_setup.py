"""Logging setup: rich console output and the stored debug toggle."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "quotacap"


def configure_logging(console: Optional[Console] = None, debug: bool = False) -> None:
    """Send log records to a rich console handler."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )
    apply_debug_setting(debug)


def apply_debug_setting(enabled: bool) -> None:
    """Show debug traces from this package only when ``EnableDebug`` is on."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if enabled else logging.INFO)
