"""Tests for the technical indicator primitives.

All test values use Decimal (project convention). Covers SMA window clamping,
EMA recurrence, MACD signal fallback, RSI degenerate cases, volatility, and
range percentile.
"""

from decimal import Decimal

from remitiq.intelligence.indicators import (
    compute_ema,
    compute_macd,
    compute_range_percentile,
    compute_rsi,
    compute_sma,
    compute_volatility,
    daily_returns,
    round_half_up,
)


def _d(*values: str) -> list[Decimal]:
    return [Decimal(v) for v in values]


class TestRoundHalfUp:
    """Tests for display rounding."""

    def test_half_rounds_up(self) -> None:
        assert round_half_up(Decimal("2.345"), 2) == Decimal("2.35")

    def test_zero_places(self) -> None:
        assert round_half_up(Decimal("127532.5"), 0) == Decimal("127533")

    def test_fixed_exponent(self) -> None:
        """Result always carries exactly the requested places."""
        assert round_half_up(Decimal("1"), 3).as_tuple().exponent == -3


class TestComputeSma:
    """Tests for the simple moving average."""

    def test_last_period_values(self) -> None:
        assert compute_sma(_d("1", "2", "3", "4"), 2) == Decimal("3.5")

    def test_period_longer_than_series_uses_all(self) -> None:
        """Window clamps to the available length instead of failing."""
        assert compute_sma(_d("1", "2", "3"), 10) == Decimal("2")

    def test_empty_returns_zero(self) -> None:
        assert compute_sma([], 7) == Decimal("0")


class TestComputeEma:
    """Tests for EMA computation."""

    def test_empty_list_returns_empty(self) -> None:
        assert compute_ema([], span=3) == []

    def test_known_values_span_3(self) -> None:
        """alpha = 0.5: 1, 1.5, 2.25, 3.125."""
        result = compute_ema(_d("1", "2", "3", "4"), span=3)

        assert result == [
            Decimal("1.000000000000"),
            Decimal("1.500000000000"),
            Decimal("2.250000000000"),
            Decimal("3.125000000000"),
        ]

    def test_prefix_consistent(self) -> None:
        """EMA at index i only depends on values up to i."""
        values = [Decimal("60") + Decimal("0.07") * i for i in range(30)]
        full = compute_ema(values, 12)
        partial = compute_ema(values[:18], 12)

        assert full[:18] == partial


class TestComputeMacd:
    """Tests for MACD trend and signal lines."""

    def test_empty_returns_zero_pair(self) -> None:
        assert compute_macd([]) == (Decimal("0"), Decimal("0"))

    def test_flat_series_is_zero(self) -> None:
        line, signal = compute_macd([Decimal("63.5")] * 60)
        assert line == 0
        assert signal == 0

    def test_short_history_signal_equals_line(self) -> None:
        """Fewer than 9 historical trend values: signal falls back to the line."""
        values = [Decimal("60") + Decimal("0.1") * i for i in range(20)]
        line, signal = compute_macd(values)

        assert line > 0
        assert signal == line

    def test_rising_series_line_above_signal(self) -> None:
        """A fresh uptrend pulls the trend line above its lagging signal."""
        values = [Decimal("60")] * 30 + [Decimal("60") + Decimal("0.1") * i for i in range(1, 21)]
        line, signal = compute_macd(values)

        assert line > signal > 0

    def test_matches_per_index_replay(self) -> None:
        """Signal equals a 9-EMA over trend values re-derived at each index from 26."""
        values = [
            Decimal("63") + Decimal(((i * 7) % 13) - 6) / 40 + Decimal(i) / 100
            for i in range(60)
        ]
        replayed = [
            compute_ema(values[: i + 1], 12)[-1] - compute_ema(values[: i + 1], 26)[-1]
            for i in range(26, len(values))
        ]

        line, signal = compute_macd(values)

        assert line == replayed[-1]
        assert signal == compute_ema(replayed, 9)[-1]

    def test_eight_trend_values_fall_back_to_line(self) -> None:
        """34 points give trend values at indices 26..33 only."""
        values = [Decimal("64")] * 26 + [Decimal("64") - Decimal("0.05") * i for i in range(1, 9)]
        line, signal = compute_macd(values)

        assert line < 0
        assert signal == line

    def test_nine_trend_values_use_signal_ema(self) -> None:
        values = [Decimal("64")] * 26 + [Decimal("64") - Decimal("0.05") * i for i in range(1, 10)]
        line, signal = compute_macd(values)

        assert signal != line


class TestComputeRsi:
    """Tests for the relative strength index."""

    def test_too_few_points_neutral(self) -> None:
        assert compute_rsi([Decimal("60")] * 14) == Decimal("50")

    def test_flat_series_neutral(self) -> None:
        assert compute_rsi([Decimal("60")] * 30) == Decimal("50")

    def test_all_gains_near_100(self) -> None:
        """Loss is floored at 0.001: gain 0.1/step gives RS=100, RSI=99.0."""
        values = [Decimal("60") + Decimal("0.1") * i for i in range(15)]
        assert compute_rsi(values) == Decimal("99.0")

    def test_all_losses_zero(self) -> None:
        values = [Decimal("60") - Decimal("0.1") * i for i in range(15)]
        assert compute_rsi(values) == Decimal("0")

    def test_balanced_moves_fifty(self) -> None:
        values = [Decimal("60") if i % 2 == 0 else Decimal("61") for i in range(15)]
        assert compute_rsi(values) == Decimal("50.0")

    def test_bounded(self) -> None:
        values = [Decimal("60") + Decimal(str((i * 7) % 5)) / 10 for i in range(40)]
        rsi = compute_rsi(values)
        assert Decimal("0") <= rsi <= Decimal("100")


class TestVolatility:
    """Tests for daily return volatility."""

    def test_daily_returns_length(self) -> None:
        assert len(daily_returns(_d("100", "110", "99"))) == 2

    def test_known_value(self) -> None:
        """Returns +10% and -10%: population std dev 10%."""
        assert compute_volatility(_d("100", "110", "99"), 30) == Decimal("10.000")

    def test_single_point_zero(self) -> None:
        assert compute_volatility(_d("63.5"), 30) == Decimal("0")

    def test_flat_zero(self) -> None:
        assert compute_volatility([Decimal("63.5")] * 10, 7) == Decimal("0")


class TestRangePercentile:
    """Tests for position within the trailing range."""

    def test_midpoint(self) -> None:
        assert compute_range_percentile(_d("60", "62", "61"), 30) == Decimal("50.0")

    def test_at_high(self) -> None:
        assert compute_range_percentile(_d("60", "61", "62"), 30) == Decimal("100.0")

    def test_flat_window_is_zero(self) -> None:
        """Zero range is replaced by 1, placing the current value at 0."""
        assert compute_range_percentile([Decimal("60")] * 5, 30) == Decimal("0")

    def test_window_clamped_to_period(self) -> None:
        assert compute_range_percentile(_d("50", "60", "62", "61"), 3) == Decimal("50.0")

    def test_empty_zero(self) -> None:
        assert compute_range_percentile([], 30) == Decimal("0")
