"""Shared plumbing for the live HTTP rate sources.

Uses urllib.request (stdlib) run in a worker thread via asyncio.to_thread
so the event loop never blocks on the network. Every transport or decoding
failure surfaces as RateSourceError so the service can move on to the next
source in its chain.
"""

import asyncio
import json
import urllib.error
import urllib.request
from datetime import date
from decimal import Decimal
from typing import Any

from remitiq.config import RateSourceSettings
from remitiq.exceptions import RateSourceError
from remitiq.intelligence.indicators import round_half_up
from remitiq.logging import get_logger
from remitiq.models import DataSource, RateDataPoint
from remitiq.sources.base import RateSource

logger = get_logger(__name__)

_USER_AGENT = "RemitIQ/1.0"


class HttpRateSource(RateSource):
    """Base class for sources that read JSON over HTTP.

    Live feeds publish mid-market rates only, so the best platform rate is
    derived by applying ``best_rate_margin`` below mid-market.
    """

    data_source = DataSource.LIVE

    def __init__(self, settings: RateSourceSettings) -> None:
        self._settings = settings
        self._margin = settings.best_rate_margin
        self._min_points = settings.min_history_points

    def _get_json(self, url: str) -> Any:
        """Blocking GET returning parsed JSON. Runs in a worker thread."""
        headers = {"Accept": "application/json", "User-Agent": _USER_AGENT}
        req = urllib.request.Request(url, headers=headers)
        with urllib.request.urlopen(req, timeout=self._settings.request_timeout) as resp:
            return json.loads(resp.read())

    async def _fetch(self, url: str) -> Any:
        try:
            return await asyncio.to_thread(self._get_json, url)
        except (urllib.error.URLError, OSError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            logger.warning("rate_fetch_error", source=self.name, url=url, error=str(e))
            raise RateSourceError(f"{self.name} request failed: {e}") from e

    def best_rate(self, mid_market: Decimal) -> Decimal:
        """Best platform rate for a mid-market rate, rounded to 2 dp."""
        return round_half_up(mid_market * (Decimal("1") - self._margin), 2)

    def _point(self, day: date, mid_market: Decimal) -> RateDataPoint:
        return RateDataPoint(
            date=day,
            rate=self.best_rate(mid_market),
            mid_market=round_half_up(mid_market, 4),
        )

    def _require_points(self, points: list[RateDataPoint]) -> None:
        """Reject a history too short to analyse.

        Raises:
            RateSourceError: If fewer than ``min_history_points`` points came back.
        """
        if len(points) < self._min_points:
            raise RateSourceError(
                f"{self.name} returned {len(points)} points, need at least {self._min_points}"
            )
