"""Value objects produced by the rate intelligence engine.

Every object here is created and owned by the single computation that returns
it. They are frozen so a payload handed to a cache or a request handler can
be shared without copying.

CRITICAL: All rate, score, and weight values use Decimal. Never use float.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from remitiq.models import DataSource, RateDataPoint

if TYPE_CHECKING:
    from remitiq.backtest.models import BacktestResult


class FactorSignal(str, Enum):
    """Direction a single factor leans for the sender (bullish = good time to send)."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class TimingSignal(str, Enum):
    """Timing recommendation for an AUD to INR transfer."""

    SEND_NOW = "SEND_NOW"
    WAIT = "WAIT"
    URGENT = "URGENT"


class ForecastDirection(str, Enum):
    """Expected short-horizon rate direction."""

    RISING = "rising"
    FALLING = "falling"
    STEADY = "steady"


class EventImpact(str, Enum):
    """Expected effect of a calendar event on the AUD/INR rate."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class RateStatistics:
    """Descriptive statistics for a rate series, rounded for display.

    Rate-denominated values and percentage changes carry 2 decimal places,
    RSI and percentiles 1, volatility and momentum 3, MACD values 4.
    """

    current: Decimal
    avg_7d: Decimal
    avg_30d: Decimal
    avg_90d: Decimal
    high_30d: Decimal
    low_30d: Decimal
    high_90d: Decimal
    low_90d: Decimal
    week_change: Decimal
    week_change_pct: Decimal
    month_change: Decimal
    month_change_pct: Decimal
    volatility_7d: Decimal
    volatility_30d: Decimal
    rsi_14: Decimal
    momentum: Decimal
    sma_7: Decimal
    sma_20: Decimal
    ema_12: Decimal
    ema_26: Decimal
    macd_line: Decimal
    macd_signal: Decimal
    percentile_30d: Decimal
    percentile_90d: Decimal

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class SignalFactor:
    """One independently scored contribution to the timing decision."""

    name: str
    signal: FactorSignal
    weight: Decimal
    description: str

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict."""
        return {
            "name": self.name,
            "signal": self.signal.value,
            "weight": str(self.weight),
            "description": self.description,
        }


@dataclass(frozen=True)
class RateForecast:
    """Short-horizon directional call, scored independently of the timing signal."""

    direction: ForecastDirection
    horizon: str
    confidence: int
    reason: str
    score: int = 0  # signed direction score behind the call

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict."""
        return {
            "direction": self.direction.value,
            "horizon": self.horizon,
            "confidence": self.confidence,
            "reason": self.reason,
            "score": self.score,
        }


@dataclass(frozen=True)
class TimingRecommendation:
    """Send-now / wait / urgent decision with its supporting evidence."""

    signal: TimingSignal
    confidence: int
    reason: str
    details: str
    factors: tuple[SignalFactor, ...]
    forecast: RateForecast
    bullish_count: int = 0
    bearish_count: int = 0
    bullish_pct: Decimal = Decimal("50")
    bearish_pct: Decimal = Decimal("50")

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict."""
        return {
            "signal": self.signal.value,
            "confidence": self.confidence,
            "reason": self.reason,
            "details": self.details,
            "factors": [f.to_dict() for f in self.factors],
            "forecast": self.forecast.to_dict(),
            "bullish_count": self.bullish_count,
            "bearish_count": self.bearish_count,
            "bullish_pct": str(self.bullish_pct),
            "bearish_pct": str(self.bearish_pct),
        }


@dataclass(frozen=True)
class MacroEvent:
    """Upcoming calendar event shown as context next to the recommendation."""

    date: date
    name: str
    impact: EventImpact
    days_away: int
    description: str

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict."""
        return {
            "date": self.date.isoformat(),
            "event": self.name,
            "impact": self.impact.value,
            "days_away": self.days_away,
            "description": self.description,
        }


@dataclass(frozen=True)
class IntelligenceData:
    """Complete intelligence payload for one computation.

    ``data_source`` is passed through from whichever rate source supplied
    the series. The engine never alters its computation based on it.
    """

    chart_data: tuple[RateDataPoint, ...]
    full_history: tuple[RateDataPoint, ...]
    stats: RateStatistics
    recommendation: TimingRecommendation
    backtest: BacktestResult
    macro_events: tuple[MacroEvent, ...]
    mid_market_rate: Decimal
    data_source: DataSource
    computed_at: datetime

    @property
    def forecast(self) -> RateForecast:
        """The recommendation's forecast, exposed at the top level."""
        return self.recommendation.forecast

    def to_dict(self) -> dict:
        """Serialize the full payload to a JSON-safe dict."""
        return {
            "chart_data": [p.to_dict() for p in self.chart_data],
            "full_history": [p.to_dict() for p in self.full_history],
            "stats": self.stats.to_dict(),
            "recommendation": self.recommendation.to_dict(),
            "forecast": self.forecast.to_dict(),
            "backtest": self.backtest.to_dict(),
            "macro_events": [e.to_dict() for e in self.macro_events],
            "mid_market_rate": str(self.mid_market_rate),
            "data_source": self.data_source.value,
            "computed_at": self.computed_at.isoformat(),
        }
