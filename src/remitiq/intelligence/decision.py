"""Timing decision engine: aggregates factors into SEND_NOW / WAIT / URGENT.

Core flow:
  1. Score the eight factors for the statistics snapshot
  2. Sum bullish and bearish weights and counts
  3. Convert the sums into each camp's share of the directional weight
  4. Walk the priority-ordered gates; the first match wins
  5. Attach the independently scored forecast

Gates (first match wins):
  1. URGENT    - bullish consensus, rate above its 30-day average, and a spike
                 (30-day percentile above 85 with a strong weekly gain)
  2. SEND_NOW  - the same bullish consensus without the spike
  3. WAIT      - bearish consensus
  4. Mixed     - lean to the better-supported side with a compressed
                 confidence band; a true split defaults to SEND_NOW at 50

CRITICAL: All computations use Decimal. Never use float.
"""

from dataclasses import dataclass
from decimal import Decimal

from remitiq.config import DecisionSettings, EngineSettings
from remitiq.intelligence.factors import FACTOR_COUNT, extract_factors
from remitiq.intelligence.forecast import compute_forecast
from remitiq.intelligence.indicators import round_half_up
from remitiq.intelligence.models import (
    FactorSignal,
    RateStatistics,
    SignalFactor,
    TimingRecommendation,
    TimingSignal,
)
from remitiq.models import RateDataPoint

_ZERO = Decimal("0")
_FIFTY = Decimal("50")
_HUNDRED = Decimal("100")

NEUTRAL_REASON = "Rate is average, no strong signal either way"


@dataclass(frozen=True)
class FactorTally:
    """Weighted bullish/bearish aggregate over a factor list."""

    bullish_score: Decimal
    bearish_score: Decimal
    bullish_count: int
    bearish_count: int
    bullish_pct: Decimal
    bearish_pct: Decimal


def tally_factors(factors: list[SignalFactor]) -> FactorTally:
    """Aggregate factor weights and counts into bullish/bearish shares.

    Shares are each camp's weight as a percentage of ``bullish + bearish``
    weight; neutral factors are counted in neither. With no directional
    weight both shares fall back to 50.
    """
    bullish_score = _ZERO
    bearish_score = _ZERO
    bullish_count = 0
    bearish_count = 0

    for factor in factors:
        if factor.signal is FactorSignal.BULLISH:
            bullish_score += factor.weight
            bullish_count += 1
        elif factor.signal is FactorSignal.BEARISH:
            bearish_score += factor.weight
            bearish_count += 1

    directional = bullish_score + bearish_score
    if directional > 0:
        bullish_pct = bullish_score / directional * _HUNDRED
        bearish_pct = bearish_score / directional * _HUNDRED
    else:
        bullish_pct = _FIFTY
        bearish_pct = _FIFTY

    return FactorTally(
        bullish_score=bullish_score,
        bearish_score=bearish_score,
        bullish_count=bullish_count,
        bearish_count=bearish_count,
        bullish_pct=bullish_pct,
        bearish_pct=bearish_pct,
    )


def _confidence(value: Decimal) -> int:
    """Round half-up to an integer and clamp to [0, 100]."""
    return max(0, min(int(round_half_up(value, 0)), 100))


def _decide(
    stats: RateStatistics,
    tally: FactorTally,
    cfg: DecisionSettings,
) -> tuple[TimingSignal, int, str, str]:
    """Apply the priority-ordered gates. Returns (signal, confidence, reason, details)."""
    above_average = stats.current > stats.avg_30d
    bulls = tally.bullish_count
    bears = tally.bearish_count

    bullish_consensus = (
        bulls >= cfg.min_consensus_factors
        and tally.bullish_pct >= cfg.bullish_share_threshold
        and above_average
    )
    if bullish_consensus:
        spike = (
            stats.percentile_30d > cfg.spike_percentile
            and stats.week_change > cfg.spike_week_change
        )
        if spike:
            return (
                TimingSignal.URGENT,
                _confidence(min(tally.bullish_pct + cfg.urgent_bonus, cfg.urgent_ceiling)),
                "Today's rate is unusually good and it may not last",
                f"At ₹{stats.current} the rate sits at the {stats.percentile_30d} percentile "
                f"of the last month, well above the 30-day average of ₹{stats.avg_30d}, and "
                f"rose ₹{stats.week_change} this week. {bulls} of {FACTOR_COUNT} indicators "
                f"agree. Rates this high rarely stick around.",
            )
        return (
            TimingSignal.SEND_NOW,
            _confidence(min(tally.bullish_pct + cfg.send_bonus, cfg.send_ceiling)),
            "The rate looks good right now",
            f"Today's rate of ₹{stats.current} is above the 30-day average of "
            f"₹{stats.avg_30d}. {bulls} of {FACTOR_COUNT} indicators suggest the rate "
            f"is in your favour.",
        )

    bearish_consensus = (
        bears >= cfg.min_consensus_factors
        and tally.bearish_pct >= cfg.bearish_share_threshold
    )
    if bearish_consensus:
        return (
            TimingSignal.WAIT,
            _confidence(min(tally.bearish_pct, cfg.wait_ceiling)),
            "The rate might get better in a few days",
            f"Today's rate of ₹{stats.current} compares with a 30-day average of "
            f"₹{stats.avg_30d}. {bears} of {FACTOR_COUNT} indicators suggest the rate "
            f"could improve. If you can wait 3-7 days you might get a better deal.",
        )

    diff = abs(tally.bullish_pct - tally.bearish_pct)
    mixed_confidence = _confidence(
        min(cfg.mixed_base + diff / cfg.mixed_divisor, cfg.mixed_ceiling)
    )

    if above_average and tally.bullish_pct > tally.bearish_pct and bulls >= cfg.mixed_min_factors:
        return (
            TimingSignal.SEND_NOW,
            mixed_confidence,
            "Rate is okay and slightly in your favour",
            f"Today's rate of ₹{stats.current} is near the 30-day average of "
            f"₹{stats.avg_30d}. Signals are mixed ({bulls} bullish, {bears} bearish) "
            f"but lean positive. Today is a reasonable day to send, with no rush.",
        )

    if tally.bearish_pct > tally.bullish_pct and bears >= cfg.mixed_min_factors:
        return (
            TimingSignal.WAIT,
            mixed_confidence,
            "Rate is okay but might improve slightly",
            f"Today's rate of ₹{stats.current} is near the 30-day average of "
            f"₹{stats.avg_30d}. Signals are mixed ({bulls} bullish, {bears} bearish) "
            f"but lean negative. Waiting a few days may pay off.",
        )

    return (
        TimingSignal.SEND_NOW,
        _confidence(cfg.neutral_confidence),
        NEUTRAL_REASON,
        f"Today's rate of ₹{stats.current} is right around the 30-day average of "
        f"₹{stats.avg_30d}. Indicators don't agree on a direction ({bulls} bullish, "
        f"{bears} bearish), which usually means the rate stays in this range. "
        f"Sending now is fine.",
    )


def generate_recommendation(
    stats: RateStatistics,
    series: list[RateDataPoint],
    settings: EngineSettings | None = None,
) -> TimingRecommendation:
    """Produce the timing recommendation and forecast for a rate series.

    Args:
        stats: Statistics snapshot for ``series``.
        series: Rate points in ascending date order.
        settings: Engine settings. Defaults to EngineSettings().

    Returns:
        A fully populated TimingRecommendation with confidence in [0, 100].
    """
    cfg = settings or EngineSettings()
    factors = extract_factors(stats, series, cfg.factors)
    tally = tally_factors(factors)
    signal, confidence, reason, details = _decide(stats, tally, cfg.decision)
    forecast = compute_forecast(stats, series, cfg.forecast)

    return TimingRecommendation(
        signal=signal,
        confidence=confidence,
        reason=reason,
        details=details,
        factors=tuple(factors),
        forecast=forecast,
        bullish_count=tally.bullish_count,
        bearish_count=tally.bearish_count,
        bullish_pct=round_half_up(tally.bullish_pct, 1),
        bearish_pct=round_half_up(tally.bearish_pct, 1),
    )
