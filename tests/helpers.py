# tests/helpers.py

"""Builders for price and history fixtures used across tests."""

import json
from pathlib import Path

from subtrend.models.price_snapshot import (
    CountryPriceEntry,
    HistoryEntry,
    HistorySnapshot,
    PriceSnapshot,
)


def entry(
    code: str, krw: float | None, usd: float | None = None,
) -> CountryPriceEntry:
    """Create a minimal CountryPriceEntry for testing."""
    return CountryPriceEntry(
        country_code=code,
        country=f"Country {code}",
        currency="KRW" if code == "KR" else "USD",
        local_monthly=krw,
        converted_usd=usd,
        converted_krw=krw,
    )


def snapshot(
    prices: dict[str, float | None],
    base: str = "KR",
    date: str | None = "2024-03-01",
) -> PriceSnapshot:
    """Create a PriceSnapshot from a code → KRW mapping."""
    return PriceSnapshot(
        entries=[entry(code, krw) for code, krw in prices.items()],
        base_country_code=base,
        last_updated_date=date,
        exchange_rate_date=date,
    )


def history(date: str, prices: dict[str, object]) -> HistorySnapshot:
    """Create a HistorySnapshot from a code → raw KRW mapping."""
    return HistorySnapshot(
        date=date,
        entries=[HistoryEntry(country_code=c, krw=k) for c, k in prices.items()],
    )


def price_payload(
    prices: dict[str, float | None],
    base: str = "KR",
    last_updated: str | None = "2024-03-01",
) -> dict[str, object]:
    """Raw price-file JSON for a code → KRW mapping."""
    payload: dict[str, object] = {
        "baseCountry": base,
        "exchangeRateDate": last_updated,
        "prices": [
            {
                "countryCode": code,
                "country": f"Country {code}",
                "continent": "asia",
                "currency": "KRW",
                "plans": {"individual": {"monthly": krw}},
                "converted": {"individual": {"usd": None, "krw": krw}},
            }
            for code, krw in prices.items()
        ],
    }
    if last_updated is not None:
        payload["lastUpdated"] = last_updated
    return payload


def write_json(path: Path, payload: object) -> Path:
    """Write *payload* as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
