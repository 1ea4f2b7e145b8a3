"""Shared test fixtures for the RemitIQ rate intelligence service."""

from collections.abc import Callable
from datetime import date, timedelta
from decimal import Decimal

import pytest

from remitiq.config import AppSettings, CacheSettings, RateSourceSettings, StoreSettings
from remitiq.models import RateDataPoint

SERIES_START = date(2026, 1, 1)
MID_SPREAD = Decimal("0.20")


def build_series(rates: list[Decimal], start: date = SERIES_START) -> list[RateDataPoint]:
    """Wrap raw rates into consecutive daily points with mid-market 0.20 above."""
    return [
        RateDataPoint(
            date=start + timedelta(days=i),
            rate=rate,
            mid_market=rate + MID_SPREAD,
        )
        for i, rate in enumerate(rates)
    ]


def rise_rates(plateau: int = 0) -> list[Decimal]:
    """30 days flat at 60, 20 days rising 0.1/day to 62.0, then ``plateau`` days flat."""
    flat = [Decimal("60")] * 30
    rising = [Decimal("60") + Decimal("0.1") * i for i in range(1, 21)]
    return flat + rising + [Decimal("62.0")] * plateau


@pytest.fixture
def make_series() -> Callable[..., list[RateDataPoint]]:
    """Factory fixture turning a list of Decimal rates into a rate series."""
    return build_series


@pytest.fixture
def flat_series() -> list[RateDataPoint]:
    """40 days pinned at 60.00."""
    return build_series([Decimal("60")] * 40)


@pytest.fixture
def rise_series() -> list[RateDataPoint]:
    """Flat base followed by a steady 20-day climb, ending on the high."""
    return build_series(rise_rates())


@pytest.fixture
def plateau_series() -> list[RateDataPoint]:
    """The steady climb followed by 10 flat days at the high."""
    return build_series(rise_rates(plateau=10))


@pytest.fixture
def drop_series() -> list[RateDataPoint]:
    """40 flat days at 60 followed by a one-day drop to 59."""
    return build_series([Decimal("60")] * 40 + [Decimal("59")])


@pytest.fixture
def app_settings() -> AppSettings:
    """Return AppSettings with test defaults (synthetic rates, no store)."""
    return AppSettings(
        log_level="DEBUG",
        rates=RateSourceSettings(mode="synthetic", synthetic_seed=7),
        cache=CacheSettings(ttl_seconds=3600),
        store=StoreSettings(enabled=False, db_path=":memory:"),
    )
