"""Live AUD/INR rates from Wise's public rate endpoints.

Wise updates continuously and needs no credentials, so it is the first
live source tried. Its daily history only reaches back about a month;
Frankfurter covers longer windows.

Endpoints (relative to ``wise_base_url``):
  - live?source=AUD&target=INR
  - history+live?source=AUD&target=INR&length=N&resolution=daily&unit=day
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from remitiq.config import RateSourceSettings
from remitiq.exceptions import RateSourceError
from remitiq.logging import get_logger
from remitiq.models import RateDataPoint
from remitiq.sources.base import RateSeries
from remitiq.sources.http import HttpRateSource

logger = get_logger(__name__)


class WiseRateSource(HttpRateSource):
    """Fetches AUD/INR history and the live mid-market rate from Wise.

    Args:
        settings: Base URL, history cap, margin and timeout configuration.
    """

    name = "wise"

    def __init__(self, settings: RateSourceSettings) -> None:
        super().__init__(settings)
        self._base_url = settings.wise_base_url.rstrip("/")
        self._max_days = settings.wise_history_days

    def parse_history(self, payload: list) -> list[RateDataPoint]:
        """Turn a Wise history response into ascending daily points.

        Each entry carries an epoch-millisecond ``time`` and a mid-market
        ``value``. The trailing live quote can share a UTC date with the last
        daily close; the later quote wins.

        Raises:
            RateSourceError: If the payload is not a list of rate entries.
        """
        by_day: dict[date, Decimal] = {}
        try:
            entries = sorted(payload, key=lambda item: item["time"])
            for item in entries:
                day = datetime.fromtimestamp(item["time"] / 1000, tz=timezone.utc).date()
                by_day[day] = Decimal(str(item["value"]))
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise RateSourceError(f"Malformed Wise history payload: {e}") from e

        return [self._point(day, mid) for day, mid in sorted(by_day.items())]

    async def fetch_history(self, days: int) -> RateSeries:
        length = min(days, self._max_days)
        url = (
            f"{self._base_url}/history+live?source=AUD&target=INR"
            f"&length={length}&resolution=daily&unit=day"
        )
        points = self.parse_history(await self._fetch(url))
        self._require_points(points)
        logger.info(
            "wise_history_fetched",
            points=len(points),
            start=points[0].date.isoformat(),
            end=points[-1].date.isoformat(),
        )
        return RateSeries(points=tuple(points), source=self.data_source)

    async def fetch_latest(self) -> Decimal:
        payload = await self._fetch(f"{self._base_url}/live?source=AUD&target=INR")
        try:
            rate = Decimal(str(payload["value"]))
        except (KeyError, TypeError, ArithmeticError) as e:
            raise RateSourceError(f"Malformed Wise live payload: {e}") from e
        if not rate.is_finite() or rate <= 0:
            raise RateSourceError(f"Wise returned an unusable rate: {rate}")
        logger.debug("wise_latest_fetched", rate=str(rate))
        return rate
