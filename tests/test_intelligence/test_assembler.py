"""Tests for the intelligence assembler."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from remitiq.exceptions import InsufficientDataError
from remitiq.intelligence.assembler import CHART_WINDOW, compute_intelligence
from remitiq.models import DataSource
from remitiq.sources.synthetic import generate_synthetic_series

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def synthetic_series():
    return generate_synthetic_series(180, date(2026, 10, 19), seed=11)


class TestComputeIntelligence:
    """Tests for compute_intelligence."""

    def test_empty_series_raises(self) -> None:
        with pytest.raises(InsufficientDataError):
            compute_intelligence([], Decimal("64.10"), DataSource.LIVE)

    def test_chart_window_and_history(self, synthetic_series) -> None:
        data = compute_intelligence(synthetic_series, Decimal("64.10"), DataSource.LIVE, now=NOW)

        assert len(data.chart_data) == CHART_WINDOW
        assert data.chart_data[-1] == synthetic_series[-1]
        assert len(data.full_history) == len(synthetic_series)

    def test_short_series_chart_is_whole_series(self, flat_series) -> None:
        data = compute_intelligence(flat_series[:10], Decimal("60.20"), DataSource.CACHED, now=NOW)

        assert len(data.chart_data) == 10
        assert data.backtest.total_signals == 0

    def test_passes_through_provenance_and_mid_market(self, synthetic_series) -> None:
        """The mid-market rate and source tag are never derived from the series."""
        data = compute_intelligence(
            synthetic_series, Decimal("70.00"), DataSource.FALLBACK, now=NOW
        )

        assert data.mid_market_rate == Decimal("70.00")
        assert data.data_source is DataSource.FALLBACK
        assert data.computed_at == NOW

    def test_source_does_not_change_analysis(self, synthetic_series) -> None:
        live = compute_intelligence(synthetic_series, Decimal("64.10"), DataSource.LIVE, now=NOW)
        cached = compute_intelligence(synthetic_series, Decimal("64.10"), DataSource.CACHED, now=NOW)

        assert live.recommendation == cached.recommendation
        assert live.backtest == cached.backtest

    def test_macro_events_use_reference_day(self, synthetic_series) -> None:
        data = compute_intelligence(
            synthetic_series,
            Decimal("64.10"),
            DataSource.LIVE,
            today=date(2026, 12, 20),
            now=NOW,
        )

        assert [e.date for e in data.macro_events] == [date(2027, 2, 2)]

    def test_forecast_exposed_top_level(self, synthetic_series) -> None:
        data = compute_intelligence(synthetic_series, Decimal("64.10"), DataSource.LIVE, now=NOW)

        assert data.forecast is data.recommendation.forecast

    def test_to_dict_shape(self, synthetic_series) -> None:
        payload = compute_intelligence(
            synthetic_series, Decimal("64.10"), DataSource.LIVE, now=NOW
        ).to_dict()

        assert set(payload) == {
            "chart_data",
            "full_history",
            "stats",
            "recommendation",
            "forecast",
            "backtest",
            "macro_events",
            "mid_market_rate",
            "data_source",
            "computed_at",
        }
        assert payload["data_source"] == "live"
        assert payload["chart_data"][-1]["rate"] == "63.88"
        assert payload["computed_at"] == NOW.isoformat()
