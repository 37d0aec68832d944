# subtrend/storage/chart_exporter.py

"""Generate interactive Plotly HTML charts from per-country price series."""

import importlib
import logging
import webbrowser
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

from subtrend.config.settings import Settings
from subtrend.models.trend import CountryTimePoint, TrendsResult

logger = logging.getLogger("subtrend.chart")


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily."""
    return importlib.import_module("plotly.graph_objects")


def _ensure_charts_dir(charts_dir: Path | None = None) -> Path:
    """Create charts directory if it doesn't exist."""
    directory = charts_dir or Settings.CHARTS_DIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def build_series_chart(
    series: dict[str, list[CountryTimePoint]],
    title: str,
) -> Any:
    """Build one line per country from its recent KRW prices."""
    go = _get_plotly_go()
    fig: Any = go.Figure()
    for code, points in sorted(series.items()):
        if not points:
            continue
        fig.add_trace(go.Scatter(
            x=[p.date for p in points],
            y=[p.krw for p in points],
            mode="lines+markers",
            name=code,
            hovertemplate=(
                "%{x}<br>"
                "₩%{y:,.0f}"
                "<extra></extra>"
            ),
        ))

    fig.update_layout(
        title=title,
        xaxis_title="Date",
        yaxis_title="Monthly price (KRW)",
        hovermode="x unified",
        template="plotly_white",
        legend={"orientation": "h", "y": -0.15},
    )
    return fig


def export_trend_chart(
    result: TrendsResult,
    country_codes: list[str] | None = None,
    charts_dir: Path | None = None,
    open_browser: bool = False,
) -> Path | None:
    """Export the per-country series of *result* as an HTML chart.

    Limits the chart to *country_codes* when given, otherwise to the
    countries in the cheapest ranking.  Returns ``None`` if no selected
    country has at least one point.
    """
    codes = country_codes or [r.country_code for r in result.cheapest]
    wanted = {c.upper() for c in codes}
    series = {
        code: points
        for code, points in result.country_time_series.items()
        if code in wanted and points
    }
    if not series:
        logger.warning(
            "No series data to chart for %s",
            result.service_slug or "<unnamed>",
        )
        return None

    label = result.service_slug or "service"
    fig = build_series_chart(
        series, f"Price History: {label} (as of {result.as_of_date or '-'})",
    )

    directory = _ensure_charts_dir(charts_dir)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = directory / f"{label}_{stamp}.html"
    fig.write_html(str(filepath))
    logger.info("Chart saved to %s", filepath)

    if open_browser:
        webbrowser.open(filepath.as_uri())

    return filepath
