"""CLI for inspecting and driving the Dynamic Quota Cap add-on outside the host.

Usage:
    python -m quotacap.cli generate
    python -m quotacap.cli --config-dir BepInEx/config status
    python -m quotacap.cli clamp "Alpha" 5200
    python -m quotacap.cli reset
    python -m quotacap.cli validate -- -2
"""

from __future__ import annotations

import sys
import time
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from quotacap.config.constants import RETRY_DELAY_SECONDS
from quotacap.logging_setup import configure_logging
from quotacap.plugin import DynamicQuotaCapPlugin
from quotacap.policy.quota_cap import validate_quota_value

console = Console()

DEFAULT_CONFIG_DIR = "BepInEx/config"


def start_plugin(ctx, category: Optional[str] = None) -> DynamicQuotaCapPlugin:
    """Start the add-on the way the host would, or exit on failure.

    The returned plugin has every component built.
    """
    plugin = DynamicQuotaCapPlugin(
        config_dir=ctx.obj["config_dir"],
        store_path=ctx.obj["store_path"],
        active_category=lambda: category,
        debug=ctx.obj["debug"],
    )
    started = plugin.start()
    components = (plugin.registry, plugin.generator, plugin.policy, plugin.hook)
    if not started or any(c is None for c in components):
        console.print("[red]Error:[/red] could not load settings, see log output")
        sys.exit(1)
    return plugin


@click.group()
@click.option("--config-dir", default=DEFAULT_CONFIG_DIR, help="Host config directory")
@click.option("--store", "store_path", default=None, help="Settings file (default: <config-dir>/com.example.dynamicquotacap.yaml)")
@click.option("--debug/--no-debug", default=None, help="Override the stored EnableDebug setting")
@click.pass_context
def cli(ctx, config_dir: str, store_path: Optional[str], debug: Optional[bool]):
    """Dynamic Quota Cap CLI."""
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    ctx.obj["store_path"] = store_path
    ctx.obj["debug"] = debug
    configure_logging(console=console, debug=bool(debug))


@cli.command()
@click.option("--retry-delay", default=RETRY_DELAY_SECONDS, type=float, show_default=True,
              help="Seconds to wait between retries")
@click.pass_context
def generate(ctx, retry_delay: float):
    """Generate per-category cap settings, retrying while attempts remain."""
    plugin = start_plugin(ctx)

    success = plugin.generated
    while not success and plugin.generator.can_retry():
        with console.status(f"[bold yellow]Retrying in {retry_delay:g}s..."):
            time.sleep(retry_delay)
        success = plugin.generate_configs()

    if not success:
        console.print("[red]No categories generated.[/red] Check the LethalConstellations config files.")
        sys.exit(1)

    console.print(
        f"[green]Generated settings for {len(plugin.generator.last_categories)} categories:[/green] "
        + ", ".join(plugin.generator.last_categories)
    )


@cli.command()
@click.pass_context
def status(ctx):
    """Show the cap settings of every known category."""
    plugin = start_plugin(ctx)

    rows = plugin.policy.get_status()
    if not rows:
        console.print("[yellow]No categories configured. Run generate first.[/yellow]")
        return

    console.print(f"\n[bold]Settings file:[/bold] {plugin.store_path}")
    table = Table(title="Quota Caps")
    table.add_column("Category", style="cyan")
    table.add_column("Cap", justify="right")
    table.add_column("Enabled")

    for category, cap_status in rows.items():
        cap = "uncapped" if cap_status.cap == -1 else str(cap_status.cap)
        table.add_row(
            category,
            cap,
            "[green]yes" if cap_status.enabled else "[red]no",
        )
    console.print(table)


@cli.command()
@click.argument("category")
@click.argument("value", type=int)
@click.pass_context
def clamp(ctx, category: str, value: int):
    """Show the quota the host would get for VALUE inside CATEGORY."""
    plugin = start_plugin(ctx, category=category)

    result = plugin.hook.on_new_quota(value)
    if result != value:
        console.print(f"{category}: {value} -> [bold]{result}[/bold] (capped)")
    else:
        console.print(f"{category}: {value} (unchanged)")


@cli.command()
@click.confirmation_option(prompt="Reset every category to the default cap?")
@click.pass_context
def reset(ctx):
    """Reset every category to the default cap and enable it."""
    plugin = start_plugin(ctx)

    if not plugin.policy.reset_all_to_defaults():
        console.print("[red]Reset failed, see log output[/red]")
        sys.exit(1)
    console.print("[green]All quota caps reset to defaults")


@cli.command()
@click.argument("value", type=int)
def validate(value: int):
    """Check whether VALUE is a usable cap setting."""
    if validate_quota_value(value):
        console.print(f"[green]{value} is a valid cap")
    else:
        console.print(f"[red]{value} is not a valid cap[/red] (use -1 or a value >= 0)")
        sys.exit(1)


def main():
    cli()


if __name__ == "__main__":
    main()
