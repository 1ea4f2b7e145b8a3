"""Replay of persisted daily rates as a rate source."""

from decimal import Decimal

from remitiq.data.store import RateStore
from remitiq.exceptions import RateSourceError
from remitiq.models import DataSource
from remitiq.sources.base import RateSeries, RateSource


class StoredRateSource(RateSource):
    """Serves history from the SQLite rate store.

    Args:
        store: Rate store to read from.
        min_points: Minimum stored rows for the history to count as usable.
    """

    data_source = DataSource.CACHED
    name = "stored"

    def __init__(self, store: RateStore, min_points: int = 30) -> None:
        self._store = store
        self._min_points = min_points

    async def fetch_history(self, days: int) -> RateSeries:
        rows = await self._store.get_recent_rates(days)
        if len(rows) < self._min_points:
            raise RateSourceError(
                f"Only {len(rows)} stored rates, need at least {self._min_points}"
            )
        return RateSeries(
            points=tuple(row.to_point() for row in rows),
            source=self.data_source,
        )

    async def fetch_latest(self) -> Decimal:
        latest = await self._store.get_latest_rate()
        if latest is None:
            raise RateSourceError("Rate store is empty")
        return latest.mid_market
