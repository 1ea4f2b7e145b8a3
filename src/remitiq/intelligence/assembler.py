"""Intelligence assembler: one call from a rate series to the full payload.

Runs statistics -> recommendation (with forecast) -> backtest over a series
supplied by a rate source, adds calendar context, and packages everything
into an immutable IntelligenceData. Stateless: caching and source selection
belong to the service layer.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from remitiq.backtest.engine import run_backtest
from remitiq.config import EngineSettings
from remitiq.intelligence.decision import generate_recommendation
from remitiq.intelligence.macro import get_upcoming_macro_events
from remitiq.intelligence.models import IntelligenceData
from remitiq.intelligence.statistics import compute_statistics
from remitiq.logging import get_logger
from remitiq.models import DataSource, RateDataPoint

logger = get_logger(__name__)

#: Number of most recent points returned for charting.
CHART_WINDOW = 30


def compute_intelligence(
    series: list[RateDataPoint],
    mid_market_rate: Decimal,
    data_source: DataSource,
    settings: EngineSettings | None = None,
    today: date | None = None,
    now: datetime | None = None,
) -> IntelligenceData:
    """Compute the complete intelligence payload for a rate series.

    Args:
        series: Rate points in ascending date order. Must not be empty.
        mid_market_rate: Current mid-market rate, supplied independently of
            the series and passed through to the payload.
        data_source: Provenance tag, passed through untouched.
        settings: Engine settings. Defaults to EngineSettings().
        today: Reference date for macro events. Defaults to the UTC date of ``now``.
        now: Computation timestamp. Defaults to the current UTC time.

    Returns:
        IntelligenceData bundling chart window, full history, statistics,
        recommendation, backtest, macro events, mid-market rate and provenance.

    Raises:
        InsufficientDataError: If ``series`` is empty.
    """
    cfg = settings or EngineSettings()
    computed_at = now or datetime.now(timezone.utc)
    reference_day = today or computed_at.date()

    history = tuple(series)
    stats = compute_statistics(series)
    recommendation = generate_recommendation(stats, series, cfg)
    backtest = run_backtest(series, cfg)
    events = get_upcoming_macro_events(reference_day)

    logger.info(
        "intelligence_computed",
        points=len(history),
        data_source=data_source.value,
        signal=recommendation.signal.value,
        confidence=recommendation.confidence,
        forecast=recommendation.forecast.direction.value,
        backtest_accuracy=str(backtest.accuracy),
    )

    return IntelligenceData(
        chart_data=history[-CHART_WINDOW:],
        full_history=history,
        stats=stats,
        recommendation=recommendation,
        backtest=backtest,
        macro_events=tuple(events),
        mid_market_rate=mid_market_rate,
        data_source=data_source,
        computed_at=computed_at,
    )
