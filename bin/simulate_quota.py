#!/usr/bin/env python3
"""Quick check: run a few quota recalculations through the hook. Run from project root.

    python bin/simulate_quota.py BepInEx/config Alpha
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root is on path
root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(root))

from rich.console import Console

from quotacap.logging_setup import configure_logging
from quotacap.plugin import DynamicQuotaCapPlugin

# Roughly how the host grows its quota after each deadline
BASE_QUOTA = 130
GROWTH = 1.6


def main() -> None:
    if len(sys.argv) < 3:
        print("usage: simulate_quota.py CONFIG_DIR CATEGORY [ROUNDS]", file=sys.stderr)
        sys.exit(1)

    config_dir, category = sys.argv[1], sys.argv[2]
    rounds = int(sys.argv[3]) if len(sys.argv) > 3 else 12

    console = Console()
    configure_logging(console=console)

    plugin = DynamicQuotaCapPlugin(config_dir, active_category=lambda: category)
    if not plugin.start():
        sys.exit(1)

    quota = BASE_QUOTA
    for i in range(1, rounds + 1):
        raw = int(quota * GROWTH)
        quota = plugin.hook.on_new_quota(raw)
        marker = " [yellow](capped)" if quota != raw else ""
        console.print(f"Round {i:2d}: computed {raw:6d} -> quota {quota:6d}{marker}")

    plugin.shutdown()


if __name__ == "__main__":
    main()
