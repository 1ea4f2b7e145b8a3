"""Signal factor extraction: eight independently scored timing signals.

Each factor follows the same shape: a threshold-gated direction (bullish,
bearish, or neutral) plus a continuous weight proportional to how far the
driving value sits from its neutral point, capped at 1 and then scaled by
the category's importance multiplier. All eight are always computed, and
the result is sorted by descending weight.

Bullish always means "good for the sender right now": a higher AUD/INR rate
puts more rupees in the recipient's account.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from remitiq.config import FactorSettings
from remitiq.intelligence.indicators import round_half_up
from remitiq.intelligence.models import FactorSignal, RateStatistics, SignalFactor
from remitiq.models import RateDataPoint

_ZERO = Decimal("0")
_ONE = Decimal("1")
_FIFTY = Decimal("50")
_HUNDRED = Decimal("100")

FACTOR_COUNT = 8


def _capped(value: Decimal) -> Decimal:
    """Clamp a weight driver to [0, 1]."""
    return min(abs(value), _ONE)


def _weight(value: Decimal) -> Decimal:
    return round_half_up(value, 4)


def _classify(value: Decimal, bullish_above: Decimal, bearish_below: Decimal) -> FactorSignal:
    if value > bullish_above:
        return FactorSignal.BULLISH
    if value < bearish_below:
        return FactorSignal.BEARISH
    return FactorSignal.NEUTRAL


def _pct_diff(value: Decimal, reference: Decimal) -> Decimal:
    if reference == 0:
        return _ZERO
    return (value - reference) / reference * _HUNDRED


def _rate_vs_average(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    diff = _pct_diff(stats.current, stats.avg_30d)
    signal = _classify(diff, cfg.avg_diff_threshold_pct, -cfg.avg_diff_threshold_pct)
    shown = round_half_up(abs(diff), 2)

    if signal is FactorSignal.BULLISH:
        description = (
            f"Today's rate of ₹{stats.current} is {shown}% better than "
            f"the 30-day average of ₹{stats.avg_30d}"
        )
    elif signal is FactorSignal.BEARISH:
        description = (
            f"Today's rate of ₹{stats.current} is {shown}% worse than "
            f"the 30-day average of ₹{stats.avg_30d}"
        )
    else:
        description = (
            f"Today's rate of ₹{stats.current} is close to "
            f"the 30-day average of ₹{stats.avg_30d}"
        )

    return SignalFactor(
        name="Rate vs 30-Day Average",
        signal=signal,
        weight=_weight(_capped(diff / cfg.avg_diff_scale_pct)),
        description=description,
    )


def _momentum(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    rsi = stats.rsi_14
    signal = _classify(rsi, cfg.rsi_bullish, cfg.rsi_bearish)

    if rsi > 65:
        description = f"Rate has been rising strongly (RSI {rsi}) and may slow down soon"
    elif signal is FactorSignal.BULLISH:
        description = f"Rate is rising steadily (RSI {rsi})"
    elif rsi < 35:
        description = f"Rate has dropped a lot (RSI {rsi}) and may be due for a bounce"
    elif signal is FactorSignal.BEARISH:
        description = f"Rate has been falling (RSI {rsi})"
    else:
        description = f"Rate is moving sideways with no strong direction (RSI {rsi})"

    return SignalFactor(
        name="Momentum",
        signal=signal,
        weight=_weight(_capped((rsi - _FIFTY) / cfg.rsi_scale)),
        description=description,
    )


def _price_trend(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    gap = stats.macd_line - stats.macd_signal

    if gap > cfg.macd_gap_threshold and stats.macd_line > 0:
        signal = FactorSignal.BULLISH
        description = (
            f"The overall trend is moving in your favour "
            f"(trend line {stats.macd_line} above signal {stats.macd_signal})"
        )
    elif gap < -cfg.macd_gap_threshold and stats.macd_line < 0:
        signal = FactorSignal.BEARISH
        description = (
            f"The overall trend is moving against you "
            f"(trend line {stats.macd_line} below signal {stats.macd_signal})"
        )
    else:
        signal = FactorSignal.NEUTRAL
        description = (
            f"No clear trend right now "
            f"(trend line {stats.macd_line}, signal {stats.macd_signal})"
        )

    return SignalFactor(
        name="Price Trend",
        signal=signal,
        weight=_weight(_capped(gap * cfg.macd_gap_multiplier)),
        description=description,
    )


def _how_today_compares(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    pct = stats.percentile_30d
    signal = _classify(pct, cfg.percentile_bullish, cfg.percentile_bearish)

    if pct > 80:
        description = f"Today sits at the {pct} percentile of this month's range, a great day to send"
    elif signal is FactorSignal.BULLISH:
        description = f"Today sits at the {pct} percentile of this month's range"
    elif pct < 20:
        description = f"Today sits at the {pct} percentile of this month's range, consider waiting"
    elif signal is FactorSignal.BEARISH:
        description = f"Below average for this month ({pct} percentile)"
    else:
        description = f"About average for this month ({pct} percentile)"

    return SignalFactor(
        name="How Today Compares",
        signal=signal,
        weight=_weight(_capped((pct - _FIFTY) / cfg.percentile_scale)),
        description=description,
    )


def _short_vs_long_trend(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    diff = _pct_diff(stats.sma_7, stats.sma_20)

    if stats.sma_7 > stats.sma_20:
        signal = FactorSignal.BULLISH
        description = (
            f"The 7-day average ₹{stats.sma_7} is above the 20-day average ₹{stats.sma_20}"
        )
    elif stats.sma_7 < stats.sma_20:
        signal = FactorSignal.BEARISH
        description = (
            f"The 7-day average ₹{stats.sma_7} is below the 20-day average ₹{stats.sma_20}"
        )
    else:
        signal = FactorSignal.NEUTRAL
        description = f"Short-term and monthly averages are aligned at ₹{stats.sma_20}"

    return SignalFactor(
        name="Short vs Long Trend",
        signal=signal,
        weight=_weight(_capped(diff / cfg.sma_gap_scale_pct) * cfg.sma_importance),
        description=description,
    )


def _weekly_movement(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    change = stats.week_change
    signal = _classify(change, cfg.week_change_threshold, -cfg.week_change_threshold)

    if signal is FactorSignal.BULLISH:
        description = f"Rate went up ₹{change} ({stats.week_change_pct}%) this week"
    elif signal is FactorSignal.BEARISH:
        description = f"Rate went down ₹{abs(change)} ({stats.week_change_pct}%) this week"
    else:
        description = f"Rate hasn't moved much this week (₹{change}, {stats.week_change_pct}%)"

    return SignalFactor(
        name="This Week's Movement",
        signal=signal,
        weight=_weight(_capped(change / cfg.week_change_scale) * cfg.week_importance),
        description=description,
    )


def _market_stability(stats: RateStatistics, cfg: FactorSettings) -> SignalFactor:
    vol = stats.volatility_30d

    if vol < cfg.volatility_calm:
        signal = FactorSignal.BULLISH
        description = f"Market is calm and stable ({vol}% daily volatility)"
    elif vol > cfg.volatility_risky:
        signal = FactorSignal.BEARISH
        description = f"Market is very unpredictable right now ({vol}% daily volatility)"
    else:
        signal = FactorSignal.NEUTRAL
        description = f"Market is somewhat choppy ({vol}% daily volatility)"

    weight = (
        cfg.volatility_risky_weight
        if signal is FactorSignal.BEARISH
        else cfg.volatility_calm_weight
    )
    return SignalFactor(
        name="Market Stability",
        signal=signal,
        weight=_weight(weight),
        description=description,
    )


def _bigger_picture(
    stats: RateStatistics, series: list[RateDataPoint], cfg: FactorSettings
) -> SignalFactor:
    span = stats.high_90d - stats.low_90d
    if span == 0:
        span = _ONE
    position = (stats.current - stats.low_90d) / span * _HUNDRED
    signal = _classify(position, cfg.range_bullish, cfg.range_bearish)
    shown = round_half_up(position, 1)
    days = min(len(series), 90) if series else 90
    range_text = f"₹{stats.low_90d}-₹{stats.high_90d} over {days} days"

    if signal is FactorSignal.BULLISH:
        description = f"Rate is in the upper part ({shown}%) of its {range_text}"
    elif signal is FactorSignal.BEARISH:
        description = f"Rate is in the lower part ({shown}%) of its {range_text}"
    else:
        description = f"Rate is in the middle ({shown}%) of its {range_text}"

    return SignalFactor(
        name="Bigger Picture",
        signal=signal,
        weight=_weight(_capped((position - _FIFTY) / cfg.range_scale)),
        description=description,
    )


def extract_factors(
    stats: RateStatistics,
    series: list[RateDataPoint] | None = None,
    settings: FactorSettings | None = None,
) -> list[SignalFactor]:
    """Score all eight timing factors for a statistics snapshot.

    Factors, in category order:
        1. Rate vs 30-day average
        2. Momentum (RSI)
        3. Price trend (MACD line vs signal line)
        4. Position in the 30-day range
        5. SMA7 vs SMA20 (x1.5)
        6. This week's movement (x1.5)
        7. Volatility regime (fixed 0.4 / 0.8 tiers)
        8. Position in the 90-day range

    Args:
        stats: Statistics for the series.
        series: The raw series, used only in descriptions.
        settings: Thresholds and scales. Defaults to FactorSettings().

    Returns:
        Exactly eight SignalFactor, sorted by descending weight. Ties keep
        category order.
    """
    cfg = settings or FactorSettings()
    points = series or []

    factors = [
        _rate_vs_average(stats, cfg),
        _momentum(stats, cfg),
        _price_trend(stats, cfg),
        _how_today_compares(stats, cfg),
        _short_vs_long_trend(stats, cfg),
        _weekly_movement(stats, cfg),
        _market_stability(stats, cfg),
        _bigger_picture(stats, points, cfg),
    ]
    return sorted(factors, key=lambda f: f.weight, reverse=True)
