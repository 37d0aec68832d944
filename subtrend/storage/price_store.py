# subtrend/storage/price_store.py

"""Reads per-service current price files from ``data/prices``."""

import json
import logging
from pathlib import Path
from typing import cast

from subtrend.config.settings import Settings
from subtrend.exceptions import InvalidSlugError
from subtrend.models.price_snapshot import (
    CountryPriceEntry,
    PriceSnapshot,
    as_number,
)

logger = logging.getLogger("subtrend.storage")


def validate_slug(slug: str) -> str:
    """Return *slug* unchanged, or raise :class:`InvalidSlugError`."""
    if not isinstance(slug, str) or not Settings.SLUG_PATTERN.match(slug):
        raise InvalidSlugError(str(slug))
    return slug


def read_json_file(filepath: Path) -> object | None:
    """Load a JSON document, returning ``None`` if absent or unreadable."""
    if not filepath.exists():
        logger.debug("No data file at %s", filepath)
        return None
    try:
        with open(filepath, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read %s: %s", filepath.name, exc)
        return None


def _as_dict(value: object) -> dict[str, object]:
    if isinstance(value, dict):
        return cast(dict[str, object], value)
    return {}


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_price_entry(
    raw: dict[str, object], plan: str = Settings.BASE_PLAN,
) -> CountryPriceEntry | None:
    """Build a :class:`CountryPriceEntry` for *plan* from a raw JSON row.

    Rows without a string ``countryCode`` are unusable and yield ``None``.
    """
    code = raw.get("countryCode")
    if not isinstance(code, str) or not code:
        return None

    plan_prices = _as_dict(_as_dict(raw.get("plans")).get(plan))
    converted = _as_dict(_as_dict(raw.get("converted")).get(plan))
    name = raw.get("country")

    return CountryPriceEntry(
        country_code=code,
        country=name if isinstance(name, str) else code,
        continent=_optional_str(raw.get("continent")),
        currency=_optional_str(raw.get("currency")),
        local_monthly=as_number(plan_prices.get("monthly")),
        converted_usd=as_number(converted.get("usd")),
        converted_krw=as_number(converted.get("krw")),
    )


def parse_price_payload(
    payload: object, plan: str = Settings.BASE_PLAN,
) -> PriceSnapshot | None:
    """Turn a decoded price file into a :class:`PriceSnapshot`.

    Returns ``None`` when the payload is not an object or carries no
    ``prices`` array.
    """
    if not isinstance(payload, dict):
        return None
    data = cast(dict[str, object], payload)
    prices = data.get("prices")
    if not isinstance(prices, list):
        return None

    entries: list[CountryPriceEntry] = []
    skipped = 0
    for row in cast(list[object], prices):
        entry = (
            parse_price_entry(cast(dict[str, object], row), plan)
            if isinstance(row, dict)
            else None
        )
        if entry is None:
            skipped += 1
            continue
        entries.append(entry)

    if skipped:
        logger.debug("Skipped %d malformed price rows", skipped)

    base = data.get("baseCountry")
    return PriceSnapshot(
        entries=entries,
        base_country_code=base if isinstance(base, str) else "",
        last_updated_date=_optional_str(data.get("lastUpdated")),
        exchange_rate_date=_optional_str(data.get("exchangeRateDate")),
    )


class PriceStore:
    """File-backed store of current per-country prices, one file per service."""

    def __init__(
        self,
        prices_dir: Path | None = None,
        plan: str = Settings.BASE_PLAN,
    ) -> None:
        self.prices_dir: Path = prices_dir or Settings.PRICES_DIR
        self.plan = plan
        logger.debug("PriceStore initialised, prices_dir=%s", self.prices_dir)

    def path_for(self, slug: str) -> Path:
        return self.prices_dir / f"{validate_slug(slug)}.json"

    def load(self, slug: str) -> PriceSnapshot | None:
        """Read the current snapshot for *slug*, or ``None`` if unusable."""
        filepath = self.path_for(slug)
        snapshot = parse_price_payload(read_json_file(filepath), self.plan)
        if snapshot is None:
            logger.info("No usable price data for '%s'", slug)
            return None
        logger.debug(
            "Loaded %d price entries for '%s' (updated %s)",
            len(snapshot.entries),
            slug,
            snapshot.last_updated_date,
        )
        return snapshot

    def list_slugs(self) -> list[str]:
        """Services with a price file on disk, sorted by slug."""
        if not self.prices_dir.exists():
            return []
        return sorted(
            p.stem for p in self.prices_dir.glob("*.json")
            if Settings.SLUG_PATTERN.match(p.stem)
        )
