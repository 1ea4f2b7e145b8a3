"""Short-horizon rate direction forecast.

Scored independently from the timing decision: the recommendation answers
"should I act now", the forecast answers "which way is the rate heading".
A signed direction score starts at zero and collects fixed-size
contributions from four indicators:

- oscillator extremity, read as mean reversion (overbought lowers the score,
  oversold raises it, with an extra tier for extreme readings)
- MACD trend line vs signal line
- SMA7 vs SMA20 outside a small band
- last-3 vs last-7 average (needs at least 7 points)

Scores above +20 are "rising", below -20 "falling", otherwise "steady".
"""

from decimal import Decimal

from remitiq.config import ForecastSettings
from remitiq.intelligence.indicators import compute_sma
from remitiq.intelligence.models import ForecastDirection, RateForecast, RateStatistics
from remitiq.logging import get_logger
from remitiq.models import RateDataPoint

logger = get_logger(__name__)

_ONE = Decimal("1")
_HUNDRED = Decimal("100")

HORIZON_VOLATILE = "2-4 days"
HORIZON_CALM = "3-7 days"
HORIZON_STEADY = "3-5 days"


def _oscillator_contribution(rsi: Decimal, cfg: ForecastSettings) -> tuple[int, str | None]:
    if rsi > cfg.rsi_extreme_high:
        return -cfg.rsi_extreme_points, f"Rate looks overstretched (RSI {rsi}) and is likely to pull back"
    if rsi > cfg.rsi_overbought:
        return -cfg.rsi_strong_points, f"Rate has been rising a lot (RSI {rsi}) and may ease off soon"
    if rsi > cfg.rsi_elevated:
        return -cfg.rsi_mild_points, f"Rate gains may be slowing down (RSI {rsi})"
    if rsi < cfg.rsi_extreme_low:
        return cfg.rsi_extreme_points, f"Rate has dropped sharply (RSI {rsi}) and is likely to rebound"
    if rsi < cfg.rsi_oversold:
        return cfg.rsi_strong_points, f"Rate has dropped a lot (RSI {rsi}) and is likely to recover"
    if rsi < cfg.rsi_depressed:
        return cfg.rsi_mild_points, f"Rate dip may be ending (RSI {rsi})"
    return 0, None


def compute_forecast(
    stats: RateStatistics,
    series: list[RateDataPoint],
    settings: ForecastSettings | None = None,
) -> RateForecast:
    """Compute the directional forecast for a rate series.

    Args:
        stats: Statistics snapshot for ``series``.
        series: Rate points in ascending date order.
        settings: Score contributions and thresholds. Defaults to ForecastSettings().

    Returns:
        RateForecast with direction, horizon, confidence in [0, 100], the first
        two contributing explanations as its reason, and the raw score.
    """
    cfg = settings or ForecastSettings()
    score = 0
    reasons: list[str] = []

    points, reason = _oscillator_contribution(stats.rsi_14, cfg)
    score += points
    if reason:
        reasons.append(reason)

    gap = stats.macd_line - stats.macd_signal
    if gap > cfg.macd_gap_threshold:
        score += cfg.macd_points
        reasons.append("Overall trend is moving in your favour")
    elif gap < -cfg.macd_gap_threshold:
        score -= cfg.macd_points
        reasons.append("Overall trend is moving against you")

    if stats.sma_7 > stats.sma_20 * (_ONE + cfg.sma_band):
        score += cfg.sma_points
        reasons.append("Recent rates are higher than the monthly average")
    elif stats.sma_7 < stats.sma_20 * (_ONE - cfg.sma_band):
        score -= cfg.sma_points
        reasons.append("Recent rates are lower than the monthly average")

    if len(series) >= 7:
        rates = [p.rate for p in series]
        last_3 = compute_sma(rates, 3)
        last_7 = compute_sma(rates, 7)
        recent = (last_3 - last_7) / last_7 * _HUNDRED if last_7 else Decimal("0")
        if recent > cfg.recent_threshold_pct:
            score += cfg.recent_points
            reasons.append("Rate has been picking up in the last few days")
        elif recent < -cfg.recent_threshold_pct:
            score -= cfg.recent_points
            reasons.append("Rate has been dipping in the last few days")

    volatile = stats.volatility_7d > cfg.high_volatility

    if score > cfg.direction_threshold:
        direction = ForecastDirection.RISING
    elif score < -cfg.direction_threshold:
        direction = ForecastDirection.FALLING
    else:
        direction = ForecastDirection.STEADY

    if direction is ForecastDirection.STEADY:
        horizon = HORIZON_STEADY
        confidence = min(cfg.steady_ceiling - abs(score), cfg.steady_ceiling)
    else:
        horizon = HORIZON_VOLATILE if volatile else HORIZON_CALM
        confidence = min(abs(score), cfg.directional_ceiling)

    if reasons:
        summary = ". ".join(reasons[:2])
    elif volatile:
        summary = "Market is choppy with no clear direction"
    else:
        summary = "Indicators are balanced and the rate is likely to stay in this range"

    logger.debug(
        "forecast_computed",
        direction=direction.value,
        score=score,
        volatile=volatile,
    )

    return RateForecast(
        direction=direction,
        horizon=horizon,
        confidence=max(0, min(confidence, 100)),
        reason=summary,
        score=score,
    )
