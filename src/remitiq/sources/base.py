"""Abstract rate source interface.

Defines the contract every AUD/INR rate supplier implements: the live HTTP
fetcher, the persisted-store replay, and the synthetic fallback generator.
The service layer picks one and falls back to the next; nothing selects a
source by conditional import.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from remitiq.models import DataSource, RateDataPoint


@dataclass(frozen=True)
class RateSeries:
    """An ordered rate series tagged with its provenance."""

    points: tuple[RateDataPoint, ...]
    source: DataSource

    def __len__(self) -> int:
        return len(self.points)

    @property
    def latest_mid_market(self) -> Decimal | None:
        return self.points[-1].mid_market if self.points else None


class RateSource(ABC):
    """Abstract base class for rate sources."""

    #: Provenance tag stamped on every series this source returns.
    data_source: DataSource

    #: Short identifier persisted alongside stored rows.
    name: str

    @abstractmethod
    async def fetch_history(self, days: int) -> RateSeries:
        """Return up to ``days`` of daily rates, oldest first.

        Raises:
            RateSourceError: If the source cannot produce a usable series.
        """
        ...

    @abstractmethod
    async def fetch_latest(self) -> Decimal:
        """Return the current AUD/INR mid-market rate.

        Raises:
            RateSourceError: If no rate is available.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the source."""
        return None
