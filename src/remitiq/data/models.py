"""Persisted row models for the rate store.

CRITICAL: All rate values use Decimal. Stored in SQLite as TEXT to preserve precision.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from remitiq.models import RateDataPoint


@dataclass
class DailyRate:
    """One persisted trading day.

    ``source`` records where the row came from ("frankfurter", "synthetic", ...).
    """

    date: date
    mid_market: Decimal
    best_rate: Decimal
    source: str
    fetched_at_ms: int
    volume: Decimal | None = None

    def to_point(self) -> RateDataPoint:
        """Convert to the engine's input type."""
        return RateDataPoint(
            date=self.date,
            rate=self.best_rate,
            mid_market=self.mid_market,
            volume=self.volume,
        )


@dataclass
class CachedIntelligence:
    """Last persisted intelligence payload (single-row cache)."""

    computed_at_ms: int
    mid_market_rate: Decimal
    data_source: str
    payload: dict


@dataclass
class ProviderConfig:
    """Persisted override of a provider's margin and fee schedule."""

    provider_id: str
    margin_pct: Decimal
    base_fee: Decimal
    fee_pct: Decimal
    promo_margin_pct: Decimal | None = None
    promo_cap: Decimal | None = None
    updated_at_ms: int = 0


class AlertType(str, Enum):
    """What a subscriber asked to be notified about."""

    RATE = "rate"
    PLATFORM = "platform"
    BOTH = "both"


@dataclass
class RateAlert:
    """A subscriber's target rate.

    Active alerts fire once, when the best provider rate reaches
    ``target_rate``; firing records the rate and deactivates the alert.
    """

    id: int
    email: str
    target_rate: Decimal
    alert_type: AlertType
    created_at_ms: int
    is_active: bool = True
    triggered_at_ms: int | None = None
    trigger_rate: Decimal | None = None

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        return {
            "id": self.id,
            "email": self.email,
            "target_rate": str(self.target_rate),
            "alert_type": self.alert_type.value,
            "is_active": self.is_active,
            "created_at_ms": self.created_at_ms,
            "triggered_at_ms": self.triggered_at_ms,
            "trigger_rate": str(self.trigger_rate) if self.trigger_rate is not None else None,
        }
