# subtrend/cli/runner.py

"""Headless CLI commands built on the trend service."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from subtrend.config.settings import Settings
from subtrend.exceptions import TrendError
from subtrend.models.trend import BiggestDropRow, TrendRow, TrendsResult
from subtrend.services.trend_service import TrendService

logger = logging.getLogger("subtrend.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _fmt_krw(value: float | None) -> str:
    return f"₩{value:,.0f}" if value is not None else "—"


def _rows_table(title: str, rows: list[TrendRow]) -> Table:
    table = Table(title=title, show_lines=False, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Country")
    table.add_column("Local", justify="right")
    table.add_column("KRW", justify="right", style="green")
    table.add_column("Savings", justify="right", style="magenta")

    for idx, r in enumerate(rows, 1):
        local = (
            f"{r.local_monthly:,} {r.currency or ''}".strip()
            if r.local_monthly is not None
            else "—"
        )
        table.add_row(
            str(idx),
            f"{r.country} ({r.country_code})",
            local,
            _fmt_krw(r.krw_price),
            f"{r.savings_percent}%",
        )
    return table


def _drops_table(rows: list[BiggestDropRow]) -> Table:
    table = Table(
        title="Biggest Changes", show_lines=False, title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Country")
    table.add_column("Previous", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Change", justify="right")

    for idx, r in enumerate(rows, 1):
        style = "green" if r.change_krw < 0 else "red" if r.change_krw > 0 else "dim"
        table.add_row(
            str(idx),
            f"{r.country} ({r.country_code})",
            _fmt_krw(r.previous_krw),
            _fmt_krw(r.current_krw),
            f"[{style}]{r.change_krw:+,.0f} ({r.change_percent:+.1f}%)[/{style}]",
        )
    return table


def _print_tables(result: TrendsResult) -> None:
    """Render the ranked views as Rich tables on stdout."""
    console = Console()
    console.print(
        f"[bold]{result.service_slug}[/bold]  "
        f"as of {result.as_of_date or '—'}  "
        f"[dim]rates {result.exchange_rate_date or '—'}, "
        f"previous {result.previous_snapshot_date or '—'}[/dim]"
    )
    console.print(_rows_table("Cheapest", result.cheapest))
    console.print(_rows_table("Highest Savings", result.highest_savings))
    if result.biggest_drops:
        console.print(_drops_table(result.biggest_drops))
    else:
        console.print("[dim]No previous snapshot to compare against.[/dim]")


def run_trends(
    slug: str,
    output_format: str = "json",
    limit: int = Settings.TOP_N,
    service: TrendService | None = None,
) -> int:
    """Print the trend view for *slug*; return an exit code (0=ok, 1=fail).

    *limit* caps each ranked list when the service is built here.
    """
    if limit < 1:
        _err.print("[red]--limit must be at least 1[/red]")
        return 1
    service = service or TrendService(limit=limit)
    try:
        result = service.get_trends(slug)
    except TrendError as exc:
        logger.warning("Trend lookup failed: %s", exc)
        _err.print(f"[red]{exc}[/red]")
        return 1

    if output_format == "table":
        _print_tables(result)
    else:
        json.dump(
            result.to_dict(), sys.stdout, ensure_ascii=False, indent=2,
        )
        sys.stdout.write("\n")
    return 0


def run_list_services(service: TrendService | None = None) -> int:
    """Print the slugs that have a price file."""
    service = service or TrendService()
    slugs = service.price_store.list_slugs()
    if not slugs:
        _err.print("[yellow]No price files found.[/yellow]")
        return 1
    for slug in slugs:
        sys.stdout.write(f"{slug}\n")
    return 0


def run_record_history(
    slug: str,
    recorded_on: str | None = None,
    service: TrendService | None = None,
) -> int:
    """Append the current prices of *slug* to its history file."""
    service = service or TrendService()
    try:
        recorded = service.record_history(slug, recorded_on=recorded_on)
    except TrendError as exc:
        logger.warning("History recording failed: %s", exc)
        _err.print(f"[red]{exc}[/red]")
        return 1

    if recorded:
        _err.print(f"[green]✓ Recorded snapshot for {slug}[/green]")
    else:
        _err.print(
            f"[yellow]Snapshot for {slug} already recorded.[/yellow]"
        )
    return 0


def run_export_chart(
    slug: str,
    open_browser: bool = False,
    service: TrendService | None = None,
) -> int:
    """Export the per-country price series of *slug* as an HTML chart."""
    from subtrend.storage.chart_exporter import export_trend_chart

    service = service or TrendService()
    try:
        result = service.get_trends(slug)
    except TrendError as exc:
        logger.warning("Chart export failed: %s", exc)
        _err.print(f"[red]{exc}[/red]")
        return 1

    path = export_trend_chart(result, open_browser=open_browser)
    if path is None:
        _err.print("[yellow]Not enough history to chart.[/yellow]")
        return 1
    _err.print(f"[dim]Chart saved → {path}[/dim]")
    return 0
