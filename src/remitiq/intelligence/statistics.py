"""Rate series statistics snapshot.

Turns an ascending list of RateDataPoint into a RateStatistics. All values
are computed on the best-available ``rate`` field, never on mid-market.
"""

from decimal import Decimal

from remitiq.exceptions import InsufficientDataError
from remitiq.intelligence.indicators import (
    compute_ema,
    compute_macd,
    compute_range_percentile,
    compute_rsi,
    compute_sma,
    compute_volatility,
    round_half_up,
)
from remitiq.intelligence.models import RateStatistics
from remitiq.models import RateDataPoint

_HUNDRED = Decimal("100")

#: Lookback anchors for week-over-week and month-over-month changes.
WEEK_ANCHOR_OFFSET = 6
MONTH_ANCHOR_OFFSET = 23


def _pct_change(current: Decimal, anchor: Decimal) -> Decimal:
    if anchor == 0:
        return Decimal("0")
    return (current - anchor) / anchor * _HUNDRED


def compute_statistics(series: list[RateDataPoint]) -> RateStatistics:
    """Compute the statistics snapshot for a rate series.

    Shorter series degrade gracefully: every window is clamped to the
    available length, RSI falls back to 50 below 15 points, and volatility
    is zero below 2 points.

    Args:
        series: Rate points in ascending date order.

    Returns:
        Fully populated, display-rounded RateStatistics.

    Raises:
        InsufficientDataError: If ``series`` is empty.
    """
    if not series:
        raise InsufficientDataError("Cannot compute statistics for an empty rate series")

    rates = [p.rate for p in series]
    n = len(rates)
    current = rates[-1]

    last_30 = rates[-30:]
    last_90 = rates[-90:]

    week_anchor = rates[max(0, n - WEEK_ANCHOR_OFFSET)]
    month_anchor = rates[max(0, n - MONTH_ANCHOR_OFFSET)]
    week_change_pct = _pct_change(current, week_anchor)

    macd_line, macd_signal = compute_macd(rates)

    return RateStatistics(
        current=round_half_up(current, 2),
        avg_7d=round_half_up(compute_sma(rates, 7), 2),
        avg_30d=round_half_up(compute_sma(rates, 30), 2),
        avg_90d=round_half_up(compute_sma(rates, 90), 2),
        high_30d=round_half_up(max(last_30), 2),
        low_30d=round_half_up(min(last_30), 2),
        high_90d=round_half_up(max(last_90), 2),
        low_90d=round_half_up(min(last_90), 2),
        week_change=round_half_up(current - week_anchor, 2),
        week_change_pct=round_half_up(week_change_pct, 2),
        month_change=round_half_up(current - month_anchor, 2),
        month_change_pct=round_half_up(_pct_change(current, month_anchor), 2),
        volatility_7d=compute_volatility(rates, 7),
        volatility_30d=compute_volatility(rates, 30),
        rsi_14=compute_rsi(rates, 14),
        momentum=round_half_up(week_change_pct, 3),
        sma_7=round_half_up(compute_sma(rates, 7), 2),
        sma_20=round_half_up(compute_sma(rates, 20), 2),
        ema_12=round_half_up(compute_ema(rates, 12)[-1], 2),
        ema_26=round_half_up(compute_ema(rates, 26)[-1], 2),
        macd_line=round_half_up(macd_line, 4),
        macd_signal=round_half_up(macd_signal, 4),
        percentile_30d=compute_range_percentile(rates, 30),
        percentile_90d=compute_range_percentile(rates, 90),
    )
