"""Core rate data models shared by sources, store, and the intelligence engine.

CRITICAL: All rate values use Decimal. Never use float for rates or amounts.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class DataSource(str, Enum):
    """Provenance of the rate series behind a computation."""

    LIVE = "live"
    CACHED = "cached"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RateDataPoint:
    """One observed trading day for AUD/INR.

    ``rate`` is the best platform-adjusted rate and always sits at or below
    ``mid_market``. ``volume`` is an optional 0-1 seasonal demand proxy that
    the engine carries but never reads.
    """

    date: date
    rate: Decimal
    mid_market: Decimal
    volume: Decimal | None = None

    @property
    def label(self) -> str:
        """Short display label, e.g. '21 Feb'."""
        return f"{self.date.day} {self.date.strftime('%b')}"

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        result = {
            "date": self.date.isoformat(),
            "day": self.label,
            "rate": str(self.rate),
            "mid_market": str(self.mid_market),
        }
        if self.volume is not None:
            result["volume"] = str(self.volume)
        return result
