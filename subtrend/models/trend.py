# subtrend/models/trend.py

"""Derived trend rows and the assembled trend result."""

from dataclasses import dataclass, field


@dataclass
class TrendRow:
    """A country's current price plus its savings against the base country."""

    country_code: str
    country: str
    continent: str | None
    currency: str | None
    local_monthly: float | None
    usd_price: float | None
    krw_price: float | None
    savings_percent: int

    def to_dict(self) -> dict[str, object]:
        return {
            "countryCode": self.country_code,
            "country": self.country,
            "continent": self.continent,
            "currency": self.currency,
            "localMonthly": self.local_monthly,
            "usd": self.usd_price,
            "krw": self.krw_price,
            "savingsPercent": self.savings_percent,
        }


@dataclass
class BiggestDropRow:
    """Month-over-month price change for one country.

    ``change_krw`` is negative when the price dropped.
    """

    country: str
    country_code: str
    previous_date: str | None
    previous_krw: float
    current_krw: float
    change_krw: float
    change_percent: float

    def to_dict(self) -> dict[str, object]:
        return {
            "country": self.country,
            "countryCode": self.country_code,
            "previousDate": self.previous_date,
            "previousKrw": self.previous_krw,
            "currentKrw": self.current_krw,
            "changeKrw": self.change_krw,
            "changePercent": self.change_percent,
        }


@dataclass
class CountryTimePoint:
    """One sparkline point."""

    date: str
    krw: float

    def to_dict(self) -> dict[str, object]:
        return {"date": self.date, "krw": self.krw}


@dataclass
class TrendsResult:
    """Ranked views and per-country series for one service."""

    as_of_date: str | None
    exchange_rate_date: str | None
    previous_snapshot_date: str | None
    cheapest: list[TrendRow] = field(
        default_factory=lambda: list[TrendRow]()
    )
    highest_savings: list[TrendRow] = field(
        default_factory=lambda: list[TrendRow]()
    )
    biggest_drops: list[BiggestDropRow] = field(
        default_factory=lambda: list[BiggestDropRow]()
    )
    country_time_series: dict[str, list[CountryTimePoint]] = field(
        default_factory=lambda: dict[str, list[CountryTimePoint]]()
    )
    service_slug: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialise to the camelCase JSON shape served to clients."""
        return {
            "serviceSlug": self.service_slug,
            "asOf": self.as_of_date,
            "exchangeRateDate": self.exchange_rate_date,
            "previousSnapshotDate": self.previous_snapshot_date,
            "cheapest": [r.to_dict() for r in self.cheapest],
            "highestSavings": [
                r.to_dict() for r in self.highest_savings
            ],
            "biggestDrops": [r.to_dict() for r in self.biggest_drops],
            "countryChanges": {
                code: [p.to_dict() for p in points]
                for code, points in self.country_time_series.items()
            },
        }
