# subtrend/services/trend_service.py

"""Loads a service's prices and history and serves its trend view."""

import copy
import logging
import re

from subtrend.config.settings import Settings
from subtrend.exceptions import TrendDataNotFoundError
from subtrend.models.price_snapshot import PriceSnapshot
from subtrend.models.trend import TrendsResult
from subtrend.services.trend_calculator import compute_trends
from subtrend.storage.history_store import HistoryStore
from subtrend.storage.price_store import PriceStore, validate_slug
from subtrend.storage.ttl_cache import TTLCache

logger = logging.getLogger("subtrend.service")


class TrendService:
    """Coordinates the price/history stores, the cache and the calculator.

    The caches are owned by the service instance; nothing is shared at
    module level, so two services never see each other's entries.
    """

    def __init__(
        self,
        price_store: PriceStore | None = None,
        history_store: HistoryStore | None = None,
        prices_cache: TTLCache | None = None,
        trends_cache: TTLCache | None = None,
        limit: int = Settings.TOP_N,
        window: int = Settings.SERIES_WINDOW,
    ) -> None:
        self.price_store = price_store or PriceStore()
        self.history_store = history_store or HistoryStore()
        self.prices_cache = prices_cache or TTLCache(
            Settings.PRICES_CACHE_TTL, Settings.CACHE_MAX_SIZE,
        )
        self.trends_cache = trends_cache or TTLCache(
            Settings.TRENDS_CACHE_TTL, Settings.CACHE_MAX_SIZE,
        )
        self.limit = limit
        self.window = window

    # ── Private helpers ──────────────────────────────────

    def _load_prices(self, slug: str) -> PriceSnapshot:
        cached = self.prices_cache.get(f"prices:{slug}")
        if isinstance(cached, PriceSnapshot):
            return cached

        snapshot = self.price_store.load(slug)
        if snapshot is None or not snapshot.entries:
            raise TrendDataNotFoundError(slug)
        self.prices_cache.set(f"prices:{slug}", snapshot)
        return snapshot

    # ── Public API ───────────────────────────────────────

    def get_prices(self, slug: str) -> PriceSnapshot:
        """Current snapshot for *slug*, as a copy the caller owns.

        Raises:
            InvalidSlugError: *slug* is malformed.
            TrendDataNotFoundError: no usable price file exists.
        """
        return copy.deepcopy(self._load_prices(validate_slug(slug)))

    def get_trends(self, slug: str) -> TrendsResult:
        """Compute (or reuse) the trend view for *slug*.

        Each call returns its own copy, so callers may modify the result
        without affecting later cache hits.

        Raises:
            InvalidSlugError: *slug* is malformed.
            TrendDataNotFoundError: no usable price file exists.
        """
        validate_slug(slug)
        cached = self.trends_cache.get(f"trends:{slug}")
        if isinstance(cached, TrendsResult):
            logger.debug("Trends cache hit for '%s'", slug)
            return copy.deepcopy(cached)

        snapshot = self._load_prices(slug)
        history = self.history_store.load(slug)
        result = compute_trends(
            snapshot,
            history,
            service_slug=slug,
            limit=self.limit,
            window=self.window,
        )
        self.trends_cache.set(f"trends:{slug}", result)
        logger.info(
            "Trends for '%s' as of %s (previous %s)",
            slug,
            result.as_of_date,
            result.previous_snapshot_date,
        )
        return copy.deepcopy(result)

    def record_history(
        self, slug: str, recorded_on: str | None = None,
    ) -> bool:
        """Append today's prices for *slug* to its history file."""
        snapshot = self.get_prices(slug)
        recorded = self.history_store.record_snapshot(
            slug, snapshot, recorded_on=recorded_on,
        )
        if recorded:
            self.trends_cache.invalidate(f"^trends:{re.escape(slug)}$")
        return recorded

    def refresh(self, slug: str | None = None) -> int:
        """Drop cached data for *slug*, or for every service.

        Returns the number of cache entries removed.
        """
        if slug is None:
            return self.prices_cache.clear() + self.trends_cache.clear()
        pattern = f"^(prices|trends):{re.escape(validate_slug(slug))}$"
        return (
            self.prices_cache.invalidate(pattern)
            + self.trends_cache.invalidate(pattern)
        )
