"""Technical indicators over a rate series: SMA, EMA, MACD, RSI, volatility, percentile.

Pure functions over ordered Decimal lists (oldest first). Every windowed
computation clamps its window to the available length instead of failing,
and every division is guarded so a flat or very short series yields a
neutral value.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import ROUND_HALF_UP, Decimal

#: Precision limit for EMA intermediate results (12 decimal places).
#: Prevents Decimal division from producing arbitrarily long representations.
_EMA_QUANTIZE = Decimal("0.000000000001")

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")
_NEUTRAL_RSI = Decimal("50")
_RSI_LOSS_FLOOR = Decimal("0.001")


def round_half_up(value: Decimal, places: int) -> Decimal:
    """Round to a fixed number of decimal places using ROUND_HALF_UP."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def compute_sma(values: list[Decimal], period: int) -> Decimal:
    """Arithmetic mean of the last ``min(period, len(values))`` values.

    Returns zero for an empty list.
    """
    window = values[-period:]
    if not window:
        return _ZERO
    return sum(window, _ZERO) / Decimal(len(window))


def compute_ema(values: list[Decimal], span: int) -> list[Decimal]:
    """Compute Exponential Moving Average over a list of Decimal values.

    Uses the standard recursive formula:
        k = 2 / (span + 1)
        EMA_t = k * value_t + (1 - k) * EMA_{t-1}

    First EMA value = first input value. Each intermediate result is
    quantized to 12 decimal places to keep Decimal precision bounded.

    Because the recurrence only looks backwards, ``compute_ema(values, n)[i]``
    equals the EMA of ``values[: i + 1]`` for every ``i``.

    Args:
        values: Ordered list of Decimal values (oldest first).
        span: Number of periods for EMA smoothing.

    Returns:
        List of EMA values, same length as input. Empty list if input is empty.
    """
    if not values:
        return []

    k = Decimal("2") / (Decimal(span) + _ONE)
    one_minus_k = _ONE - k

    ema = [values[0].quantize(_EMA_QUANTIZE)]
    for v in values[1:]:
        ema.append((k * v + one_minus_k * ema[-1]).quantize(_EMA_QUANTIZE))

    return ema


def compute_macd(
    values: list[Decimal],
    fast: int = 12,
    slow: int = 26,
    signal_span: int = 9,
) -> tuple[Decimal, Decimal]:
    """Compute the MACD trend line and its signal line.

    The trend line is ``EMA(fast) - EMA(slow)`` over the full series. The
    signal line is an EMA(signal_span) over the trend line's history, taking
    one trend value per index from ``slow`` onward. Since EMA is prefix
    consistent, that history is read straight off the two full EMA series
    rather than replayed per index.

    With fewer than ``signal_span`` historical trend values the signal line
    equals the trend line.

    Args:
        values: Ordered rates (oldest first).
        fast: Fast EMA span.
        slow: Slow EMA span.
        signal_span: Span of the EMA applied to the trend line history.

    Returns:
        (trend_line, signal_line), unrounded. (0, 0) for empty input.
    """
    if not values:
        return _ZERO, _ZERO

    fast_ema = compute_ema(values, fast)
    slow_ema = compute_ema(values, slow)
    trend_history = [f - s for f, s in zip(fast_ema[slow:], slow_ema[slow:])]
    trend_line = fast_ema[-1] - slow_ema[-1]

    if len(trend_history) < signal_span:
        return trend_line, trend_line

    return trend_line, compute_ema(trend_history, signal_span)[-1]


def compute_rsi(values: list[Decimal], period: int = 14) -> Decimal:
    """Relative Strength Index over the trailing ``period`` deltas.

    Average gain and average loss are each the plain mean over ``period``
    deltas. The average loss is floored at 0.001 so an unbroken run of gains
    reads close to 100 rather than dividing by zero.

    Degenerate cases return the neutral 50:
    - fewer than ``period + 1`` values
    - no movement at all (both averages zero)

    Returns:
        RSI in [0, 100], rounded to 1 decimal place.
    """
    if len(values) < period + 1:
        return _NEUTRAL_RSI

    window = values[-(period + 1) :]
    gains = _ZERO
    losses = _ZERO
    for prev, cur in zip(window, window[1:]):
        delta = cur - prev
        if delta > 0:
            gains += delta
        else:
            losses -= delta

    avg_gain = gains / Decimal(period)
    avg_loss = losses / Decimal(period)

    if avg_gain == 0 and avg_loss == 0:
        return _NEUTRAL_RSI

    avg_loss = max(avg_loss, _RSI_LOSS_FLOOR)
    rs = avg_gain / avg_loss
    return round_half_up(_HUNDRED - _HUNDRED / (_ONE + rs), 1)


def daily_returns(values: list[Decimal]) -> list[Decimal]:
    """Fractional day-over-day returns. One shorter than the input."""
    return [
        (cur / prev) - _ONE
        for prev, cur in zip(values, values[1:])
        if prev != 0
    ]


def compute_volatility(values: list[Decimal], period: int) -> Decimal:
    """Population standard deviation of daily returns over the trailing window.

    The window covers the last ``min(period, len(values))`` rates, so it
    holds one fewer return than points.

    Returns:
        Volatility as a percentage, rounded to 3 decimal places.
        Zero when fewer than 2 points are available.
    """
    returns = daily_returns(values[-period:])
    if not returns:
        return round_half_up(_ZERO, 3)

    n = Decimal(len(returns))
    mean = sum(returns, _ZERO) / n
    variance = sum(((r - mean) ** 2 for r in returns), _ZERO) / n
    return round_half_up(variance.sqrt() * _HUNDRED, 3)


def compute_range_percentile(values: list[Decimal], period: int) -> Decimal:
    """Position of the latest value within the trailing window's min-max range.

    ``(current - min) / (max - min) * 100``. A flat window has its zero range
    replaced by 1, which places the current value at 0.

    Returns:
        Percentile in [0, 100], rounded to 1 decimal place. Zero for empty input.
    """
    window = values[-period:]
    if not window:
        return round_half_up(_ZERO, 1)

    low = min(window)
    high = max(window)
    span = high - low
    if span == 0:
        span = _ONE
    return round_half_up((window[-1] - low) / span * _HUNDRED, 1)
