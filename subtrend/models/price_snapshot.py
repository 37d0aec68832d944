# subtrend/models/price_snapshot.py

"""Current and historical price snapshot models."""

import math
from dataclasses import dataclass, field


def as_number(value: object) -> float | None:
    """Return *value* unchanged if it is a finite number, else ``None``.

    Booleans, strings, ``None``, NaN and infinities all count as
    missing data.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


@dataclass
class CountryPriceEntry:
    """One country's price for a service in the current snapshot."""

    country_code: str
    country: str
    continent: str | None = None
    currency: str | None = None
    local_monthly: float | None = None
    converted_usd: float | None = None
    converted_krw: float | None = None


@dataclass
class PriceSnapshot:
    """All countries' current prices for one service."""

    entries: list[CountryPriceEntry]
    base_country_code: str
    last_updated_date: str | None = None
    exchange_rate_date: str | None = None


@dataclass
class HistoryEntry:
    """A recorded price for one country; ``krw`` is kept raw."""

    country_code: object
    krw: object


@dataclass
class HistorySnapshot:
    """A dated set of recorded per-country prices."""

    date: str
    entries: list[HistoryEntry] = field(
        default_factory=lambda: list[HistoryEntry]()
    )
