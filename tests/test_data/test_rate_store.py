"""Tests for the SQLite rate store against an in-memory database."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio

from remitiq.data.database import MIGRATIONS, SCHEMA_VERSION, RateDatabase
from remitiq.data.models import AlertType, ProviderConfig
from remitiq.data.store import RateStore
from remitiq.models import RateDataPoint


def _points(count: int, start: date = date(2026, 10, 1)) -> list[RateDataPoint]:
    return [
        RateDataPoint(
            date=start + timedelta(days=i),
            rate=Decimal("63.80") + Decimal("0.01") * i,
            mid_market=Decimal("64.00") + Decimal("0.01") * i,
        )
        for i in range(count)
    ]


@pytest_asyncio.fixture
async def store():
    async with RateDatabase(":memory:") as database:
        yield RateStore(database)


class TestRateDatabase:
    """Tests for RateDatabase lifecycle."""

    def test_db_before_connect_raises(self) -> None:
        with pytest.raises(RuntimeError):
            RateDatabase(":memory:").db

    @pytest.mark.asyncio
    async def test_all_migrations_applied(self) -> None:
        async with RateDatabase(":memory:") as database:
            assert database.is_connected
            assert await database.schema_version() == SCHEMA_VERSION == MIGRATIONS[-1][0]

    @pytest.mark.asyncio
    async def test_reconnect_applies_only_pending(self, tmp_path) -> None:
        path = str(tmp_path / "nested" / "rates.db")
        async with RateDatabase(path) as database:
            await RateStore(database).insert_daily_rates(_points(3))

        async with RateDatabase(path) as database:
            assert await database._migrate() == 0
            assert await RateStore(database).get_rate_count() == 3

    @pytest.mark.asyncio
    async def test_older_database_upgraded_in_place(self, tmp_path, monkeypatch) -> None:
        path = str(tmp_path / "rates.db")
        monkeypatch.setattr("remitiq.data.database.MIGRATIONS", MIGRATIONS[:2])
        async with RateDatabase(path) as database:
            assert await database.schema_version() == 2
            await RateStore(database).insert_daily_rates(_points(2))

        monkeypatch.undo()
        async with RateDatabase(path) as database:
            store = RateStore(database)
            assert await database.schema_version() == SCHEMA_VERSION
            assert await store.get_rate_count() == 2
            assert await store.insert_rate_alert("a@example.com", Decimal("64")) == 1

    @pytest.mark.asyncio
    async def test_close_disconnects(self) -> None:
        database = RateDatabase(":memory:")
        await database.connect()
        await database.close()

        assert not database.is_connected


class TestDailyRates:
    """Tests for daily rate persistence."""

    @pytest.mark.asyncio
    async def test_insert_and_count(self, store) -> None:
        assert await store.insert_daily_rates(_points(5)) == 5
        assert await store.get_rate_count() == 5

    @pytest.mark.asyncio
    async def test_duplicates_ignored(self, store) -> None:
        await store.insert_daily_rates(_points(5))

        assert await store.insert_daily_rates(_points(5)) == 0
        assert await store.insert_daily_rate(_points(1)[0]) is False
        assert await store.get_rate_count() == 5

    @pytest.mark.asyncio
    async def test_recent_rates_ascending(self, store) -> None:
        await store.insert_daily_rates(_points(10), source="synthetic")
        rows = await store.get_recent_rates(3)

        assert [r.date for r in rows] == [
            date(2026, 10, 8),
            date(2026, 10, 9),
            date(2026, 10, 10),
        ]
        assert rows[0].source == "synthetic"

    @pytest.mark.asyncio
    async def test_decimal_round_trip(self, store) -> None:
        point = RateDataPoint(
            date=date(2026, 10, 19),
            rate=Decimal("63.88"),
            mid_market=Decimal("64.1034"),
            volume=Decimal("0.42"),
        )
        await store.insert_daily_rate(point)
        latest = await store.get_latest_rate()

        assert latest is not None
        assert latest.to_point() == point

    @pytest.mark.asyncio
    async def test_latest_empty(self, store) -> None:
        assert await store.get_latest_rate() is None


class TestIntelligenceCache:
    """Tests for the single-row intelligence cache."""

    @pytest.mark.asyncio
    async def test_empty_cache(self, store) -> None:
        assert await store.get_cached_intelligence() is None
        assert await store.is_intelligence_fresh() is False

    @pytest.mark.asyncio
    async def test_replace_keeps_single_row(self, store) -> None:
        await store.cache_intelligence({"v": 1}, Decimal("64.10"), "live", computed_at_ms=1000)
        await store.cache_intelligence({"v": 2}, Decimal("64.20"), "fallback", computed_at_ms=2000)
        cached = await store.get_cached_intelligence()

        assert cached is not None
        assert cached.payload == {"v": 2}
        assert cached.mid_market_rate == Decimal("64.20")
        assert cached.data_source == "fallback"

    @pytest.mark.asyncio
    async def test_freshness_window(self, store) -> None:
        await store.cache_intelligence({}, Decimal("64.10"), "live", computed_at_ms=0)
        hour = 3_600_000

        assert await store.is_intelligence_fresh(6, now_ms=5 * hour) is True
        assert await store.is_intelligence_fresh(6, now_ms=6 * hour) is False


class TestProviderConfigs:
    """Tests for provider fee overrides."""

    @pytest.mark.asyncio
    async def test_upsert_replaces(self, store) -> None:
        await store.upsert_provider_config(ProviderConfig(
            provider_id="wise",
            margin_pct=Decimal("0.1"),
            base_fee=Decimal("0.42"),
            fee_pct=Decimal("0.5"),
        ))
        await store.upsert_provider_config(ProviderConfig(
            provider_id="wise",
            margin_pct=Decimal("0.2"),
            base_fee=Decimal("0.50"),
            fee_pct=Decimal("0.6"),
            promo_cap=Decimal("1000"),
        ))
        configs = await store.get_provider_configs()

        assert len(configs) == 1
        assert configs[0].margin_pct == Decimal("0.2")
        assert configs[0].promo_margin_pct is None
        assert configs[0].promo_cap == Decimal("1000")


class TestRateAlerts:
    """Tests for rate alert persistence and matching."""

    @pytest.mark.asyncio
    async def test_insert_and_read_back(self, store) -> None:
        alert_id = await store.insert_rate_alert("a@example.com", Decimal("65.25"), AlertType.RATE)
        alert = await store.get_rate_alert(alert_id)

        assert alert is not None
        assert alert.target_rate == Decimal("65.25")
        assert alert.alert_type is AlertType.RATE
        assert alert.is_active
        assert alert.trigger_rate is None

    @pytest.mark.asyncio
    async def test_active_alerts_at_or_below_rate(self, store) -> None:
        low = await store.insert_rate_alert("low@example.com", Decimal("63.00"))
        exact = await store.insert_rate_alert("exact@example.com", Decimal("63.62"), AlertType.RATE)
        await store.insert_rate_alert("high@example.com", Decimal("64.50"))
        await store.insert_rate_alert("deal@example.com", Decimal("60.00"), AlertType.PLATFORM)

        matched = await store.get_active_rate_alerts(Decimal("63.62"))

        assert [a.id for a in matched] == [low, exact]

    @pytest.mark.asyncio
    async def test_triggered_alert_fires_once(self, store) -> None:
        alert_id = await store.insert_rate_alert("a@example.com", Decimal("63.00"))

        await store.mark_alert_triggered(alert_id, Decimal("63.62"), triggered_at_ms=5000)
        alert = await store.get_rate_alert(alert_id)

        assert alert is not None
        assert not alert.is_active
        assert alert.trigger_rate == Decimal("63.62")
        assert alert.triggered_at_ms == 5000
        assert await store.get_active_rate_alerts(Decimal("70")) == []

    @pytest.mark.asyncio
    async def test_counts(self, store) -> None:
        assert await store.get_alert_counts() == (0, 0)

        first = await store.insert_rate_alert("a@example.com", Decimal("63.00"))
        await store.insert_rate_alert("b@example.com", Decimal("66.00"))
        await store.mark_alert_triggered(first, Decimal("63.10"))

        assert await store.get_alert_counts() == (1, 2)
