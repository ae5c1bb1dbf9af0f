"""Click-based CLI for commodity-pulse.

Thin presentation layer with no business logic. Every command delegates to
QuoteSyncCoordinator operations and renders the resulting state.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from commodity_pulse.core.models import (
    ChartRange,
    Commodity,
    CoordinatorState,
    QuoteFilter,
    resolve_commodity,
)

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from commodity_pulse.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _create_data_source(config):
    from commodity_pulse.quotes import YahooFinanceDataSource

    return YahooFinanceDataSource(config.data_source)


@asynccontextmanager
async def _open_coordinator(ctx: click.Context) -> AsyncIterator:
    """Yield a coordinator wired to the configured store and data source."""
    from commodity_pulse.storage import create_store
    from commodity_pulse.sync import QuoteSyncCoordinator

    config = _load_config(ctx)
    store = create_store(config.storage)
    async with _create_data_source(config) as source:
        yield QuoteSyncCoordinator(source, store)


def _resolve_symbol(value: str) -> Commodity:
    try:
        return resolve_commodity(value)
    except ValueError:
        choices = ", ".join(f"{c.name.lower()} ({c.value})" for c in Commodity)
        raise click.BadParameter(f"{value!r}. Choose from: {choices}") from None


def _print_messages(state: CoordinatorState) -> None:
    if state.error_message:
        console.print(f"[red]{state.error_message}[/red]")
    if state.info_message:
        console.print(f"[yellow]{state.info_message}[/yellow]")


def _render_quotes(state: CoordinatorState) -> None:
    quotes = state.displayed_quotes
    if not quotes:
        if state.active_filter == QuoteFilter.FAVORITES and not state.favorites:
            console.print(
                "[yellow]No favorites yet. Use 'favorite SYMBOL' to add one.[/yellow]"
            )
        else:
            console.print("[yellow]No quotes available.[/yellow]")
        return

    table = Table(title=f"Commodity Prices ({state.active_filter.value})")
    table.add_column("", width=1)
    table.add_column("Commodity", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Change %", justify="right")
    table.add_column("Unit")

    for q in quotes:
        style = "green" if q.change >= 0 else "red"
        table.add_row(
            "★" if q.symbol in state.favorites else "",
            q.commodity.display_name,
            f"{q.price:,.2f}",
            f"[{style}]{q.change:+,.2f}[/{style}]",
            f"[{style}]{q.change_percent:+.2f}%[/{style}]",
            q.commodity.unit,
        )

    console.print(table)
    updated = (
        state.last_updated.astimezone().strftime("%H:%M:%S")
        if state.last_updated
        else "--"
    )
    console.print(f"Updated {updated}")


def _quotes_json(state: CoordinatorState) -> str:
    output = {
        "last_updated": state.last_updated,
        "filter": state.active_filter.value,
        "error": state.error_message,
        "info": state.info_message,
        "quotes": [
            {
                **q.model_dump(mode="json"),
                "name": q.commodity.display_name,
                "unit": q.commodity.unit,
                "favorite": q.symbol in state.favorites,
            }
            for q in state.displayed_quotes
        ],
    }
    return json.dumps(output, indent=2, default=str)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="COMMODITY_PULSE_CONFIG",
    default=None,
    help="Path to commodity-pulse.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="commodity-pulse")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Commodity Pulse: live commodity prices with an offline cache."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# ---------------------------------------------------------------------------
# quotes
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def quotes(ctx: click.Context, output_format: str) -> None:
    """Refresh and show current quotes."""

    async def _run() -> CoordinatorState:
        async with _open_coordinator(ctx) as coordinator:
            await coordinator.refresh()
            return coordinator.state()

    state = _run_async(_run())

    if output_format == "json":
        click.echo(_quotes_json(state))
    else:
        _print_messages(state)
        _render_quotes(state)

    if state.error_message and not state.quotes:
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option(
    "--range",
    "-r",
    "chart_range",
    type=click.Choice([r.value for r in ChartRange], case_sensitive=False),
    default=ChartRange.ONE_MONTH.value,
    help="Chart range.",
)
@click.option("--force", is_flag=True, default=False, help="Bypass the history cache.")
@click.option(
    "--limit",
    "-n",
    type=int,
    default=10,
    show_default=True,
    help="Number of most recent points to list.",
)
@click.pass_context
def history(
    ctx: click.Context,
    symbol: str,
    chart_range: str,
    force: bool,
    limit: int,
) -> None:
    """Show historical closes for one commodity."""
    commodity = _resolve_symbol(symbol)
    selected_range = ChartRange(chart_range.upper())

    async def _run() -> CoordinatorState:
        async with _open_coordinator(ctx) as coordinator:
            await coordinator.load_history(commodity, selected_range, force=force)
            return coordinator.state()

    state = _run_async(_run())
    points = state.visible_history

    if state.history_error_message:
        console.print(f"[red]{state.history_error_message}[/red]")
    if not points:
        raise SystemExit(1)

    first, last = points[0], points[-1]
    change = last.price - first.price
    pct = change / first.price * 100 if first.price else 0.0
    style = "green" if change >= 0 else "red"

    table = Table(title=f"{commodity.display_name} ({selected_range.value})")
    table.add_column("Time")
    table.add_column("Close", justify="right")
    for point in points[-limit:] if limit > 0 else points:
        table.add_row(
            point.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"),
            f"{point.price:,.2f}",
        )
    console.print(table)
    console.print(
        f"{len(points)} points, "
        f"[{style}]{change:+,.2f} ({pct:+.2f}%)[/{style}] over {selected_range.value}"
    )


# ---------------------------------------------------------------------------
# watch
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--interval",
    "-i",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between refreshes. Default: refresh.interval_seconds from config.",
)
@click.option(
    "--cycles",
    type=int,
    default=0,
    help="Stop after this many completed refreshes (0 = run until interrupted).",
)
@click.pass_context
def watch(ctx: click.Context, interval: float | None, cycles: int) -> None:
    """Refresh periodically and re-render after every update."""
    from commodity_pulse.sync import RefreshScheduler

    config = _load_config(ctx)
    every = interval if interval is not None else config.refresh.interval_seconds

    async def _run() -> None:
        async with _open_coordinator(ctx) as coordinator:
            done = asyncio.Event()
            completed = 0
            was_loading = False

            def on_change(state: CoordinatorState) -> None:
                nonlocal completed, was_loading
                if was_loading and not state.is_loading:
                    completed += 1
                    _print_messages(state)
                    _render_quotes(state)
                    if cycles and completed >= cycles:
                        done.set()
                was_loading = state.is_loading

            unsubscribe = coordinator.subscribe(on_change)
            scheduler = RefreshScheduler(coordinator.refresh, interval=every)
            try:
                await coordinator.refresh()
                scheduler.start()
                await done.wait()
            finally:
                task = scheduler.stop()
                if task is not None:
                    await task
                unsubscribe()

    try:
        _run_async(_run())
    except KeyboardInterrupt:
        console.print("Stopped.")


# ---------------------------------------------------------------------------
# preferences
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.pass_context
def favorite(ctx: click.Context, symbol: str) -> None:
    """Toggle a commodity's favorite flag."""
    commodity = _resolve_symbol(symbol)

    async def _run() -> bool:
        async with _open_coordinator(ctx) as coordinator:
            return coordinator.toggle_favorite(commodity)

    if _run_async(_run()):
        console.print(f"[green]★[/green] {commodity.display_name} added to favorites")
    else:
        console.print(f"{commodity.display_name} removed from favorites")


@cli.command(name="filter")
@click.argument(
    "value",
    type=click.Choice(["all", "favorites"], case_sensitive=False),
    required=False,
)
@click.pass_context
def filter_command(ctx: click.Context, value: str | None) -> None:
    """Show or set which quotes are displayed."""

    async def _run() -> QuoteFilter:
        async with _open_coordinator(ctx) as coordinator:
            if value is not None:
                coordinator.set_filter(
                    QuoteFilter.FAVORITES if value.lower() == "favorites" else QuoteFilter.ALL
                )
            return coordinator.active_filter

    active = _run_async(_run())
    console.print(f"Filter: [bold]{active.value}[/bold]")


@cli.command(name="clear-cache")
@click.pass_context
def clear_cache(ctx: click.Context) -> None:
    """Delete the cached quote snapshot."""

    async def _run() -> CoordinatorState:
        async with _open_coordinator(ctx) as coordinator:
            coordinator.clear_cached_quotes()
            return coordinator.state()

    _print_messages(_run_async(_run()))


@cli.command(name="reset-preferences")
@click.pass_context
def reset_preferences(ctx: click.Context) -> None:
    """Clear favorites and reset the filter to All."""

    async def _run() -> None:
        async with _open_coordinator(ctx) as coordinator:
            coordinator.reset_preferences()

    _run_async(_run())
    console.print("[green]✓[/green] Favorites and filter reset")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
