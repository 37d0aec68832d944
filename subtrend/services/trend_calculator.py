# subtrend/services/trend_calculator.py

"""Price-trend computation over a current snapshot and its history.

Every function here is pure: inputs are never mutated and identical
inputs always produce identical output.  Malformed rows (missing codes,
non-numeric prices) are treated as missing data and skipped rather than
raised.
"""

import logging
import math

from subtrend.config.settings import Settings
from subtrend.models.price_snapshot import (
    HistorySnapshot,
    PriceSnapshot,
    as_number,
)
from subtrend.models.trend import (
    BiggestDropRow,
    CountryTimePoint,
    TrendRow,
    TrendsResult,
)

logger = logging.getLogger("subtrend.trends")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf (``-2.5 → -2``).

    Compares the exact fractional part; adding 0.5 first would round
    0.49999999999999994 up to 1.
    """
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def _normalise_code(raw: object) -> str:
    return raw.upper() if isinstance(raw, str) else ""


# ── Rows ─────────────────────────────────────────────────

def savings_percent(
    krw: float | None, base_krw: float | None,
) -> int:
    """Integer percent saved versus the base price; 0 without both prices."""
    if krw is None or not base_krw or base_krw <= 0:
        return 0
    return round_half_up((base_krw - krw) / base_krw * 100)


def build_rows(snapshot: PriceSnapshot) -> list[TrendRow]:
    """Derive one :class:`TrendRow` per entry, keeping input order."""
    base_entry = next(
        (
            e for e in snapshot.entries
            if e.country_code == snapshot.base_country_code
        ),
        None,
    )
    base_krw = base_entry.converted_krw if base_entry else None

    return [
        TrendRow(
            country_code=e.country_code,
            country=e.country,
            continent=e.continent,
            currency=e.currency,
            local_monthly=e.local_monthly,
            usd_price=e.converted_usd,
            krw_price=e.converted_krw,
            savings_percent=savings_percent(e.converted_krw, base_krw),
        )
        for e in snapshot.entries
    ]


# ── Previous snapshot ────────────────────────────────────

def find_previous_snapshot(
    history: list[HistorySnapshot],
    current_date: str | None,
) -> HistorySnapshot | None:
    """Pick the snapshot to compare the current prices against.

    *history* must be sorted ascending by date.  An exact date match
    steps back one snapshot; a match on the oldest snapshot means there
    is no baseline.  Without a date, or when the date is not recorded,
    the most recent snapshot is used.
    """
    if not history:
        return None
    if not current_date:
        return history[-1]

    for idx, snapshot in enumerate(history):
        if snapshot.date == current_date:
            return history[idx - 1] if idx > 0 else None
    return history[-1]


def build_previous_map(
    previous: HistorySnapshot | None,
) -> dict[str, float]:
    """Map upper-cased country code → previous KRW price."""
    prices: dict[str, float] = {}
    if previous is None:
        return prices
    for entry in previous.entries:
        code = _normalise_code(entry.country_code)
        krw = as_number(entry.krw)
        if not code or krw is None:
            continue
        prices[code] = krw
    return prices


# ── Deltas & rankings ────────────────────────────────────

def compute_biggest_drops(
    rows: list[TrendRow],
    previous_prices: dict[str, float],
    previous_date: str | None,
    limit: int = Settings.TOP_N,
) -> list[BiggestDropRow]:
    """Per-country price change, biggest drop (most negative) first."""
    drops: list[BiggestDropRow] = []
    for row in rows:
        previous_krw = previous_prices.get(row.country_code.upper())
        current_krw = row.krw_price
        if previous_krw is None or current_krw is None:
            continue

        change_krw = current_krw - previous_krw
        change_percent = (
            round_half_up(change_krw / previous_krw * 1000) / 10
            if previous_krw > 0
            else 0
        )
        drops.append(BiggestDropRow(
            country=row.country,
            country_code=row.country_code,
            previous_date=previous_date,
            previous_krw=previous_krw,
            current_krw=current_krw,
            change_krw=change_krw,
            change_percent=change_percent,
        ))

    drops.sort(key=lambda d: d.change_krw)
    return drops[:limit]


def rank_cheapest(
    rows: list[TrendRow], limit: int = Settings.TOP_N,
) -> list[TrendRow]:
    """Priced rows, cheapest first; ties keep input order."""
    priced = [r for r in rows if r.krw_price is not None]
    return sorted(priced, key=lambda r: r.krw_price or 0)[:limit]


def rank_highest_savings(
    rows: list[TrendRow], limit: int = Settings.TOP_N,
) -> list[TrendRow]:
    """Priced rows with positive savings, largest saving first."""
    saving = [
        r for r in rows
        if r.krw_price is not None and r.savings_percent > 0
    ]
    return sorted(
        saving, key=lambda r: r.savings_percent, reverse=True,
    )[:limit]


# ── Sparkline series ─────────────────────────────────────

def build_country_time_series(
    rows: list[TrendRow],
    history: list[HistorySnapshot],
    current_date: str | None,
    window: int = Settings.SERIES_WINDOW,
) -> dict[str, list[CountryTimePoint]]:
    """Merge history and current prices into a recent series per country.

    The current price is appended only when a current date is known and
    the country has no point on that date yet.  Each series is sorted by
    date and keeps its last *window* points.
    """
    timeline: dict[str, list[CountryTimePoint]] = {}

    for snapshot in history:
        for entry in snapshot.entries:
            code = _normalise_code(entry.country_code)
            krw = as_number(entry.krw)
            if not code or krw is None:
                continue
            timeline.setdefault(code, []).append(
                CountryTimePoint(date=snapshot.date, krw=krw)
            )

    for row in rows:
        code = row.country_code.upper()
        if not code or row.krw_price is None:
            continue
        series = timeline.setdefault(code, [])
        if current_date and not any(
            p.date == current_date for p in series
        ):
            series.append(
                CountryTimePoint(date=current_date, krw=row.krw_price)
            )

    return {
        code: (
            sorted(series, key=lambda p: p.date)[-window:]
            if window > 0
            else []
        )
        for code, series in timeline.items()
    }


# ── Assembly ─────────────────────────────────────────────

def compute_trends(
    snapshot: PriceSnapshot,
    history: list[HistorySnapshot],
    service_slug: str | None = None,
    limit: int = Settings.TOP_N,
    window: int = Settings.SERIES_WINDOW,
) -> TrendsResult:
    """Build the full trend view for one service."""
    ordered = sorted(
        (s for s in history if isinstance(s.date, str)),
        key=lambda s: s.date,
    )
    rows = build_rows(snapshot)
    current_date = snapshot.last_updated_date or None

    previous = find_previous_snapshot(ordered, current_date)
    previous_date = previous.date if previous else None
    previous_prices = build_previous_map(previous)

    result = TrendsResult(
        as_of_date=current_date,
        exchange_rate_date=snapshot.exchange_rate_date or None,
        previous_snapshot_date=previous_date,
        cheapest=rank_cheapest(rows, limit),
        highest_savings=rank_highest_savings(rows, limit),
        biggest_drops=compute_biggest_drops(
            rows, previous_prices, previous_date, limit,
        ),
        country_time_series=build_country_time_series(
            rows, ordered, current_date, window,
        ),
        service_slug=service_slug,
    )
    logger.debug(
        "Computed trends for %s: %d rows, %d history snapshots, "
        "previous=%s",
        service_slug or "<unnamed>",
        len(rows),
        len(ordered),
        previous_date,
    )
    return result
