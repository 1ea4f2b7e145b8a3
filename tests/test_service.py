"""Tests for IntelligenceService: source fallback, caching, and persistence.

Sources and the store are AsyncMocks so each test controls exactly which
collaborator fails.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from remitiq.config import AppSettings, RateSourceSettings, StoreSettings
from remitiq.data.models import AlertType, CachedIntelligence, DailyRate, RateAlert
from remitiq.exceptions import RateSourceError, StoreUnavailableError
from remitiq.models import DataSource
from remitiq.service import IntelligenceService
from remitiq.sources.base import RateSeries
from remitiq.sources.synthetic import generate_synthetic_series

END = date(2026, 10, 19)


def _live_settings() -> AppSettings:
    return AppSettings(
        rates=RateSourceSettings(mode="live", synthetic_seed=7),
        store=StoreSettings(enabled=False),
    )


def _series(source: DataSource) -> RateSeries:
    return RateSeries(
        points=tuple(generate_synthetic_series(120, END, seed=21)),
        source=source,
    )


def _mock_source(name: str, series: RateSeries | None = None, latest: Decimal | None = None):
    source = AsyncMock()
    source.name = name
    if series is None:
        source.fetch_history.side_effect = RateSourceError(f"{name} down")
    else:
        source.fetch_history.return_value = series
    if latest is None:
        source.fetch_latest.side_effect = RateSourceError(f"{name} latest down")
    else:
        source.fetch_latest.return_value = latest
    return source


def _mock_store(rows: list | None = None) -> AsyncMock:
    store = AsyncMock()
    store.get_recent_rates.return_value = rows or []
    store.get_provider_configs.return_value = []
    store.is_intelligence_fresh.return_value = False
    store.get_cached_intelligence.return_value = None
    return store


class TestLoadSeries:
    """Tests for the source fallback chain."""

    @pytest.mark.asyncio
    async def test_live_source_used_and_persisted(self) -> None:
        live = _mock_source("frankfurter", _series(DataSource.LIVE), Decimal("64.25"))
        store = _mock_store()
        service = IntelligenceService(_live_settings(), live_sources=[live], store=store)

        series, mid = await service.load_series()

        assert series.source is DataSource.LIVE
        assert mid == Decimal("64.25")
        store.insert_daily_rates.assert_awaited_once()
        assert store.insert_daily_rates.await_args.kwargs["source"] == "frankfurter"

    @pytest.mark.asyncio
    async def test_live_failure_falls_back_to_synthetic(self) -> None:
        live = _mock_source("frankfurter")
        service = IntelligenceService(_live_settings(), live_sources=[live])

        series, mid = await service.load_series()

        assert series.source is DataSource.FALLBACK
        assert mid == Decimal("64.10")

    @pytest.mark.asyncio
    async def test_store_replay_before_synthetic(self, make_series) -> None:
        rows = [
            DailyRate(
                date=p.date,
                mid_market=p.mid_market,
                best_rate=p.rate,
                source="frankfurter",
                fetched_at_ms=0,
            )
            for p in make_series([Decimal("63.5")] * 40)
        ]
        live = _mock_source("frankfurter")
        store = _mock_store(rows)
        store.get_latest_rate.return_value = rows[-1]
        service = IntelligenceService(_live_settings(), live_sources=[live], store=store)

        series, mid = await service.load_series()

        assert series.source is DataSource.CACHED
        assert mid == Decimal("63.70")
        store.insert_daily_rates.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_latest_failure_uses_series_mid_market(self) -> None:
        live = _mock_source("frankfurter", _series(DataSource.LIVE))
        service = IntelligenceService(_live_settings(), live_sources=[live])

        _, mid = await service.load_series()

        assert mid == Decimal("64.10")

    @pytest.mark.asyncio
    async def test_synthetic_mode_skips_live(self, app_settings) -> None:
        live = _mock_source("frankfurter", _series(DataSource.LIVE), Decimal("64.25"))
        service = IntelligenceService(app_settings, live_sources=[live])

        series, _ = await service.load_series()

        live.fetch_history.assert_not_awaited()
        assert series.source is DataSource.FALLBACK

    @pytest.mark.asyncio
    async def test_second_live_source_used_when_first_fails(self) -> None:
        wise = _mock_source("wise", latest=Decimal("64.30"))
        frankfurter = _mock_source("frankfurter", _series(DataSource.LIVE), Decimal("64.25"))
        store = _mock_store()
        service = IntelligenceService(
            _live_settings(), live_sources=[wise, frankfurter], store=store
        )

        series, mid = await service.load_series()

        assert series.source is DataSource.LIVE
        assert store.insert_daily_rates.await_args.kwargs["source"] == "frankfurter"
        # live quote order still prefers the first source
        assert mid == Decimal("64.30")

    @pytest.mark.asyncio
    async def test_live_quote_falls_through_sources(self) -> None:
        wise = _mock_source("wise", _series(DataSource.LIVE))
        frankfurter = _mock_source("frankfurter", latest=Decimal("64.25"))
        service = IntelligenceService(_live_settings(), live_sources=[wise, frankfurter])

        _, mid = await service.load_series()

        frankfurter.fetch_history.assert_not_awaited()
        assert mid == Decimal("64.25")

    @pytest.mark.asyncio
    async def test_all_sources_fail(self) -> None:
        service = IntelligenceService(
            _live_settings(),
            live_sources=[_mock_source("frankfurter")],
            fallback_source=_mock_source("synthetic"),
        )

        with pytest.raises(RateSourceError):
            await service.load_series()


class TestGetIntelligence:
    """Tests for cached intelligence retrieval."""

    @pytest.mark.asyncio
    async def test_cached_until_forced(self) -> None:
        live = _mock_source("frankfurter", _series(DataSource.LIVE), Decimal("64.25"))
        service = IntelligenceService(_live_settings(), live_sources=[live])

        first = await service.get_intelligence()
        second = await service.get_intelligence()
        assert first is second
        assert live.fetch_history.await_count == 1

        await service.get_intelligence(force_refresh=True)
        assert live.fetch_history.await_count == 2

    @pytest.mark.asyncio
    async def test_result_persisted(self) -> None:
        live = _mock_source("frankfurter", _series(DataSource.LIVE), Decimal("64.25"))
        store = _mock_store()
        service = IntelligenceService(_live_settings(), live_sources=[live], store=store)

        data = await service.get_intelligence()

        store.cache_intelligence.assert_awaited_once()
        kwargs = store.cache_intelligence.await_args.kwargs
        assert kwargs["data_source"] == "live"
        assert kwargs["mid_market_rate"] == Decimal("64.25")
        assert data.mid_market_rate == Decimal("64.25")

    @pytest.mark.asyncio
    async def test_payload_served_from_fresh_persisted_copy(self) -> None:
        live = _mock_source("frankfurter", _series(DataSource.LIVE), Decimal("64.25"))
        store = _mock_store()
        store.is_intelligence_fresh.return_value = True
        store.get_cached_intelligence.return_value = CachedIntelligence(
            computed_at_ms=0,
            mid_market_rate=Decimal("64.00"),
            data_source="live",
            payload={"persisted": True},
        )
        service = IntelligenceService(_live_settings(), live_sources=[live], store=store)

        assert await service.get_intelligence_payload() == {"persisted": True}
        live.fetch_history.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_payload_recomputed_when_stale(self, app_settings) -> None:
        service = IntelligenceService(app_settings, store=_mock_store())

        payload = await service.get_intelligence_payload()

        assert payload["data_source"] == "fallback"
        assert payload["mid_market_rate"] == "64.10"

    @pytest.mark.asyncio
    async def test_provider_quotes(self, app_settings) -> None:
        service = IntelligenceService(app_settings)

        data, quotes = await service.get_provider_quotes(Decimal("2000"))

        assert data.mid_market_rate == Decimal("64.10")
        assert len(quotes) == 6
        assert quotes[0].received >= quotes[-1].received

    @pytest.mark.asyncio
    async def test_close_releases_sources(self) -> None:
        live = _mock_source("frankfurter")
        fallback = _mock_source("synthetic")
        service = IntelligenceService(_live_settings(), live_sources=[live], fallback_source=fallback)

        await service.close()

        live.close.assert_awaited_once()
        fallback.close.assert_awaited_once()


class TestRateAlerts:
    """Tests for alert creation and the matching pass."""

    @pytest.mark.asyncio
    async def test_process_fires_and_marks_matches(self, app_settings) -> None:
        alert = RateAlert(
            id=3,
            email="saver@example.com",
            target_rate=Decimal("60"),
            alert_type=AlertType.RATE,
            created_at_ms=0,
        )
        store = _mock_store()
        store.get_active_rate_alerts.return_value = [alert]
        store.mark_alert_triggered.return_value = 5000
        service = IntelligenceService(app_settings, store=store)

        run = await service.process_rate_alerts()
        fired = run.triggered[0]

        assert run.best_provider == "remitly"
        assert fired.id == 3
        assert not fired.is_active
        assert fired.triggered_at_ms == 5000
        assert fired.trigger_rate == run.best_rate
        store.get_active_rate_alerts.assert_awaited_once_with(run.best_rate)
        store.mark_alert_triggered.assert_awaited_once_with(3, run.best_rate)
        assert run.to_dict()["alerts_triggered"] == 1

    @pytest.mark.asyncio
    async def test_process_without_matches(self, app_settings) -> None:
        store = _mock_store()
        store.get_active_rate_alerts.return_value = []
        service = IntelligenceService(app_settings, store=store)

        run = await service.process_rate_alerts()

        assert run.triggered == ()
        store.mark_alert_triggered.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_delegates_to_store(self, app_settings) -> None:
        store = _mock_store()
        store.insert_rate_alert.return_value = 11
        service = IntelligenceService(app_settings, store=store)

        alert_id = await service.create_rate_alert("a@b.co", Decimal("66.5"))

        assert alert_id == 11
        store.insert_rate_alert.assert_awaited_once_with("a@b.co", Decimal("66.5"), AlertType.BOTH)

    @pytest.mark.asyncio
    async def test_alerts_need_store(self, app_settings) -> None:
        service = IntelligenceService(app_settings)

        with pytest.raises(StoreUnavailableError):
            await service.process_rate_alerts()
        with pytest.raises(StoreUnavailableError):
            await service.get_alert_counts()
