"""Intelligence service: source selection, caching, and persistence around the engine.

Core flow:
  1. Serve the in-memory payload if it is younger than the cache TTL
  2. Otherwise take the recompute lock (concurrent callers share one run)
  3. Load a series: live sources in order, then stored replay, then synthetic fallback
  4. Persist freshly fetched live rows to the store
  5. Run the stateless engine in a worker thread
  6. Cache the result in memory and persist the payload

Rate alerts are matched against the best ranked provider rate for the
reference transfer amount and fire once each.

The engine itself never touches I/O; everything stateful lives here.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from remitiq.cache import TTLCache
from remitiq.config import AppSettings
from remitiq.data.models import AlertType, RateAlert
from remitiq.data.store import RateStore
from remitiq.exceptions import RateSourceError, StoreUnavailableError
from remitiq.intelligence.assembler import compute_intelligence
from remitiq.intelligence.models import IntelligenceData
from remitiq.logging import get_logger
from remitiq.models import DataSource
from remitiq.providers.ranking import ProviderQuote, ProviderRanker
from remitiq.sources.base import RateSeries, RateSource
from remitiq.sources.stored import StoredRateSource
from remitiq.sources.synthetic import SyntheticRateSource

logger = get_logger(__name__)

_CACHE_KEY = "intelligence"


@dataclass(frozen=True)
class AlertRun:
    """Outcome of one alert-matching pass."""

    best_rate: Decimal
    best_provider: str
    triggered: tuple[RateAlert, ...]

    def to_dict(self) -> dict:
        return {
            "best_rate": str(self.best_rate),
            "best_provider": self.best_provider,
            "alerts_triggered": len(self.triggered),
            "triggered": [a.to_dict() for a in self.triggered],
        }


class IntelligenceService:
    """Owns rate-source fallback, the intelligence cache, and persistence.

    Args:
        settings: Application settings.
        live_sources: Live sources, tried in order. Skipped when
            ``settings.rates.mode`` is "synthetic".
        store: Optional rate store for replay, persistence and alerts.
        fallback_source: Last-resort source. Defaults to a seeded SyntheticRateSource.
        cache: In-memory cache. Defaults to a TTLCache using ``settings.cache.ttl_seconds``.
        ranker: Provider ranker for quotes.
    """

    def __init__(
        self,
        settings: AppSettings,
        live_sources: Sequence[RateSource] = (),
        store: RateStore | None = None,
        fallback_source: RateSource | None = None,
        cache: TTLCache[IntelligenceData] | None = None,
        ranker: ProviderRanker | None = None,
    ) -> None:
        self._settings = settings
        self._live_sources = list(live_sources)
        self._store = store
        self._fallback_source = fallback_source or SyntheticRateSource(
            seed=settings.rates.synthetic_seed
        )
        self._cache: TTLCache[IntelligenceData] = cache or TTLCache(
            settings.cache.ttl_seconds
        )
        self._ranker = ranker or ProviderRanker()
        self._lock = asyncio.Lock()

    def _active_live_sources(self) -> list[RateSource]:
        if self._settings.rates.mode != "live":
            return []
        return self._live_sources

    def _source_chain(self) -> list[RateSource]:
        chain = list(self._active_live_sources())
        if self._store is not None:
            chain.append(
                StoredRateSource(self._store, self._settings.rates.min_history_points)
            )
        chain.append(self._fallback_source)
        return chain

    async def _latest_mid_market(self, source: RateSource, series: RateSeries) -> Decimal:
        """Current mid-market rate to pair with ``series``.

        A live series takes the first live quote available, in source order.
        Any other series asks only the source that produced it. Without a
        quote the series' last mid-market stands in.
        """
        if series.source is DataSource.LIVE:
            candidates = self._active_live_sources()
        else:
            candidates = [source]

        for candidate in candidates:
            try:
                return await candidate.fetch_latest()
            except RateSourceError as e:
                logger.warning("latest_rate_unavailable", source=candidate.name, error=str(e))

        fallback = series.latest_mid_market or self._settings.rates.fallback_mid_market
        logger.warning("latest_rate_fallback", source=source.name, using=str(fallback))
        return fallback

    async def load_series(self) -> tuple[RateSeries, Decimal]:
        """Load a rate series and the current mid-market rate.

        Walks the source chain, logging and skipping any source that raises
        RateSourceError. Live series are persisted to the store.

        Raises:
            RateSourceError: If every source in the chain fails.
        """
        days = self._settings.rates.history_days

        for source in self._source_chain():
            try:
                series = await source.fetch_history(days)
            except RateSourceError as e:
                logger.warning("rate_source_failed", source=source.name, error=str(e))
                continue

            mid_market = await self._latest_mid_market(source, series)

            if series.source is DataSource.LIVE and self._store is not None:
                await self._store.insert_daily_rates(list(series.points), source=source.name)

            logger.info(
                "rate_series_loaded",
                source=source.name,
                data_source=series.source.value,
                points=len(series),
                mid_market=str(mid_market),
            )
            return series, mid_market

        raise RateSourceError("No rate source produced a series")

    async def get_intelligence(self, force_refresh: bool = False) -> IntelligenceData:
        """Return cached intelligence, recomputing when stale or forced."""
        if not force_refresh:
            cached = self._cache.get(_CACHE_KEY)
            if cached is not None:
                return cached

        async with self._lock:
            if not force_refresh:
                cached = self._cache.get(_CACHE_KEY)
                if cached is not None:
                    return cached

            series, mid_market = await self.load_series()
            data = await asyncio.to_thread(
                compute_intelligence,
                list(series.points),
                mid_market,
                series.source,
                self._settings.engine,
            )
            self._cache.set(_CACHE_KEY, data)

            if self._store is not None:
                await self._store.cache_intelligence(
                    data.to_dict(),
                    mid_market_rate=mid_market,
                    data_source=data.data_source.value,
                )
            return data

    async def get_intelligence_payload(self) -> dict:
        """Return the intelligence payload as a JSON-safe dict.

        Prefers the in-memory cache, then a persisted payload younger than
        ``cache.persisted_freshness_hours``, and only then recomputes.
        """
        cached = self._cache.get(_CACHE_KEY)
        if cached is not None:
            return cached.to_dict()

        if self._store is not None and await self._store.is_intelligence_fresh(
            self._settings.cache.persisted_freshness_hours
        ):
            persisted = await self._store.get_cached_intelligence()
            if persisted is not None:
                logger.debug("serving_persisted_intelligence", computed_at=persisted.computed_at_ms)
                return persisted.payload

        return (await self.get_intelligence()).to_dict()

    async def get_provider_quotes(self, amount: Decimal) -> tuple[IntelligenceData, list[ProviderQuote]]:
        """Rank providers for ``amount`` at the current mid-market rate."""
        data = await self.get_intelligence()
        overrides = await self._store.get_provider_configs() if self._store is not None else None
        quotes = self._ranker.rank_providers(amount, data.mid_market_rate, overrides)
        return data, quotes

    def _require_store(self) -> RateStore:
        if self._store is None:
            raise StoreUnavailableError("Rate alerts need the rate store (STORE_ENABLED)")
        return self._store

    async def create_rate_alert(
        self,
        email: str,
        target_rate: Decimal,
        alert_type: AlertType = AlertType.BOTH,
    ) -> int:
        """Register a target-rate alert and return its id.

        Raises:
            StoreUnavailableError: If the store is disabled.
        """
        return await self._require_store().insert_rate_alert(email, target_rate, alert_type)

    async def get_alert_counts(self) -> tuple[int, int]:
        """Return (active, total) alert counts."""
        return await self._require_store().get_alert_counts()

    async def process_rate_alerts(self) -> AlertRun:
        """Fire every active alert whose target the best provider rate has reached.

        Providers are ranked for ``api.default_amount`` at the current
        mid-market rate; the top provider's offered rate is the one alerts
        compare against. Each fired alert is deactivated so it fires once.

        Raises:
            StoreUnavailableError: If the store is disabled.
        """
        store = self._require_store()
        _, quotes = await self.get_provider_quotes(self._settings.api.default_amount)
        best = quotes[0]

        triggered: list[RateAlert] = []
        for alert in await store.get_active_rate_alerts(best.rate):
            triggered_at = await store.mark_alert_triggered(alert.id, best.rate)
            triggered.append(replace(
                alert,
                is_active=False,
                triggered_at_ms=triggered_at,
                trigger_rate=best.rate,
            ))

        logger.info(
            "rate_alerts_processed",
            best_rate=str(best.rate),
            best_provider=best.provider_id,
            triggered=len(triggered),
        )
        return AlertRun(
            best_rate=best.rate,
            best_provider=best.provider_id,
            triggered=tuple(triggered),
        )

    async def close(self) -> None:
        """Release source resources."""
        for source in self._live_sources:
            await source.close()
        await self._fallback_source.close()
