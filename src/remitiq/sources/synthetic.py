"""Synthetic AUD/INR series generator used when no real data is reachable.

Produces a plausible weekday-only series: a small random daily return scaled
by a day-of-week activity factor, a per-month seasonal drift, and mean
reversion toward 63.5, clamped to [59, 68]. Mid-market sits 0.15-0.27 above
the best rate. The last point is pinned to 63.88 / 64.10 so fallback
payloads always show a recognizable current rate.

Seeded through ``random.Random`` so tests and repeated fallbacks are
reproducible.
"""

import random
from datetime import date, timedelta
from decimal import Decimal

from remitiq.intelligence.indicators import round_half_up
from remitiq.models import DataSource, RateDataPoint
from remitiq.sources.base import RateSeries, RateSource

_START_RATE = Decimal("62.5")
_MEAN_RATE = Decimal("63.5")
_MEAN_REVERSION = Decimal("0.02")
_BASE_VOLATILITY = Decimal("0.003")
_RANDOM_CENTER = Decimal("0.48")
_RATE_FLOOR = Decimal("59.0")
_RATE_CEILING = Decimal("68.0")
_MID_SPREAD_MIN = Decimal("0.15")
_MID_SPREAD_RANGE = Decimal("0.12")
_INTERNAL_QUANTIZE = Decimal("0.000001")

PINNED_RATE = Decimal("63.88")
PINNED_MID_MARKET = Decimal("64.10")

# Seasonal drift by calendar month (Jan..Dec).
_SEASONAL_BIAS = (
    Decimal("0.0008"), Decimal("0.0005"), Decimal("0.0002"), Decimal("-0.0002"),
    Decimal("-0.0004"), Decimal("-0.0003"), Decimal("-0.0005"), Decimal("-0.0004"),
    Decimal("-0.0001"), Decimal("0.0003"), Decimal("0.0006"), Decimal("0.0004"),
)

# Activity by weekday (Mon..Fri); weekends are skipped entirely.
_WEEKDAY_FACTOR = (
    Decimal("0.8"), Decimal("1.0"), Decimal("1.0"), Decimal("1.0"), Decimal("0.8"),
)


def _uniform(rng: random.Random) -> Decimal:
    return Decimal(str(round(rng.random(), 6)))


def generate_synthetic_series(
    days: int,
    end: date,
    seed: int | None = None,
) -> list[RateDataPoint]:
    """Generate a weekday-only synthetic series covering ``days`` calendar days.

    Args:
        days: Calendar days to cover, ending at ``end`` inclusive.
        end: Last calendar day of the series.
        seed: Seed for ``random.Random``. None draws from system entropy.

    Returns:
        Ascending RateDataPoint list with ``rate <= mid_market`` on every point.
    """
    rng = random.Random(seed)
    rate = _START_RATE
    points: list[RateDataPoint] = []

    for offset in range(days - 1, -1, -1):
        day = end - timedelta(days=offset)
        weekday = day.weekday()
        if weekday >= 5:
            continue

        seasonal = _SEASONAL_BIAS[day.month - 1]
        reversion = (_MEAN_RATE - rate) * _MEAN_REVERSION
        noise = (_uniform(rng) - _RANDOM_CENTER) * _BASE_VOLATILITY * _WEEKDAY_FACTOR[weekday]
        rate = (rate * (1 + noise + seasonal + reversion)).quantize(_INTERNAL_QUANTIZE)
        rate = max(_RATE_FLOOR, min(_RATE_CEILING, rate))

        mid_market = rate + _MID_SPREAD_MIN + _uniform(rng) * _MID_SPREAD_RANGE
        diwali_season = day.month in (10, 11)
        if diwali_season:
            volume = Decimal("0.7") + _uniform(rng) * Decimal("0.3")
        else:
            volume = Decimal("0.3") + _uniform(rng) * Decimal("0.4")

        points.append(RateDataPoint(
            date=day,
            rate=round_half_up(rate, 2),
            mid_market=round_half_up(mid_market, 2),
            volume=round_half_up(volume, 2),
        ))

    if points:
        last = points[-1]
        points[-1] = RateDataPoint(
            date=last.date,
            rate=PINNED_RATE,
            mid_market=PINNED_MID_MARKET,
            volume=last.volume,
        )

    return points


class SyntheticRateSource(RateSource):
    """Deterministic fallback source. Never fails.

    Args:
        seed: Seed for the generator.
        today_fn: Returns the series end date. Defaults to ``date.today``.
    """

    data_source = DataSource.FALLBACK
    name = "synthetic"

    def __init__(self, seed: int | None = None, today_fn=date.today) -> None:
        self._seed = seed
        self._today_fn = today_fn

    async def fetch_history(self, days: int) -> RateSeries:
        points = generate_synthetic_series(days, self._today_fn(), self._seed)
        return RateSeries(points=tuple(points), source=self.data_source)

    async def fetch_latest(self) -> Decimal:
        return PINNED_MID_MARKET
