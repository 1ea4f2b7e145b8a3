"""Live AUD/INR rates from the Frankfurter API (ECB reference rates).

Frankfurter serves up to six months of daily history, so it backs up the
Wise feed whenever Wise is unreachable or returns too short a history.
"""

from datetime import date, timedelta
from decimal import Decimal

from remitiq.config import RateSourceSettings
from remitiq.exceptions import RateSourceError
from remitiq.logging import get_logger
from remitiq.models import RateDataPoint
from remitiq.sources.base import RateSeries
from remitiq.sources.http import HttpRateSource

logger = get_logger(__name__)


class FrankfurterRateSource(HttpRateSource):
    """Fetches daily AUD/INR history and the latest rate from Frankfurter.

    Args:
        settings: Base URL, margin and timeout configuration.
        today_fn: Returns the end date of history requests. Defaults to ``date.today``.
    """

    name = "frankfurter"

    def __init__(self, settings: RateSourceSettings, today_fn=date.today) -> None:
        super().__init__(settings)
        self._base_url = settings.frankfurter_base_url.rstrip("/")
        self._today_fn = today_fn

    def parse_history(self, payload: dict) -> list[RateDataPoint]:
        """Turn a Frankfurter time-series response into ascending points.

        Raises:
            RateSourceError: If the payload has no usable INR rates.
        """
        try:
            raw_rates = payload["rates"]
            entries = sorted(
                (date.fromisoformat(day), Decimal(str(values["INR"])))
                for day, values in raw_rates.items()
            )
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise RateSourceError(f"Malformed Frankfurter history payload: {e}") from e

        if not entries:
            raise RateSourceError("Frankfurter returned an empty history")

        return [self._point(day, mid) for day, mid in entries]

    async def fetch_history(self, days: int) -> RateSeries:
        end = self._today_fn()
        start = end - timedelta(days=days)
        url = (
            f"{self._base_url}/{start.isoformat()}..{end.isoformat()}"
            f"?from=AUD&to=INR"
        )
        points = self.parse_history(await self._fetch(url))
        self._require_points(points)
        logger.info(
            "frankfurter_history_fetched",
            points=len(points),
            start=points[0].date.isoformat(),
            end=points[-1].date.isoformat(),
        )
        return RateSeries(points=tuple(points), source=self.data_source)

    async def fetch_latest(self) -> Decimal:
        payload = await self._fetch(f"{self._base_url}/latest?from=AUD&to=INR")
        try:
            rate = Decimal(str(payload["rates"]["INR"]))
        except (KeyError, TypeError, ArithmeticError) as e:
            raise RateSourceError(f"Malformed Frankfurter latest payload: {e}") from e
        logger.debug("frankfurter_latest_fetched", rate=str(rate))
        return rate
