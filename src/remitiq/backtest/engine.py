"""Walk-forward backtest of the timing recommendation.

For each index ``i`` from ``min_history`` while ``i < len - look_ahead``,
stepping by ``stride``, the series is cut to ``[0..i]`` and run through the
same statistics -> factors -> decision path as the live engine. The emitted
signal is then scored against the realized rates in ``(i, i + look_ahead]``:

- SEND_NOW / URGENT is correct when the rate at ``i`` is at least
  ``send_now_tolerance`` times the average future rate. Savings accrue as
  ``max(0, current - avg_future) * reference_amount``.
- WAIT is correct when the best future rate beats the current rate by more
  than ``wait_improvement``. Savings accrue as
  ``(max_future - current) * reference_amount``.

Signals below ``confidence_floor`` are skipped. Cost is bounded by
``(len - min_history - look_ahead) / stride + 1`` replays.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from remitiq.backtest.models import BacktestResult
from remitiq.config import EngineSettings
from remitiq.intelligence.decision import generate_recommendation
from remitiq.intelligence.indicators import round_half_up
from remitiq.intelligence.models import TimingSignal
from remitiq.intelligence.statistics import compute_statistics
from remitiq.logging import get_logger
from remitiq.models import RateDataPoint

logger = get_logger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def run_backtest(
    series: list[RateDataPoint],
    settings: EngineSettings | None = None,
) -> BacktestResult:
    """Replay the recommendation over historical windows and score it.

    Args:
        series: Full rate history in ascending date order.
        settings: Engine settings. The ``backtest`` group drives the replay,
            the rest is passed to each replayed decision.

    Returns:
        BacktestResult. A zero result when the series is shorter than
        ``min_history + look_ahead``.
    """
    cfg = settings or EngineSettings()
    bt = cfg.backtest
    n = len(series)

    if n < bt.min_history + bt.look_ahead:
        logger.debug("backtest_insufficient_history", points=n)
        return BacktestResult()

    send_total = send_correct = 0
    wait_total = wait_correct = 0
    skipped = iterations = 0
    total_savings = _ZERO

    for i in range(bt.min_history, n - bt.look_ahead, bt.stride):
        iterations += 1
        window = series[: i + 1]
        recommendation = generate_recommendation(compute_statistics(window), window, cfg)

        if recommendation.confidence < bt.confidence_floor:
            skipped += 1
            continue

        current = series[i].rate
        future = [p.rate for p in series[i + 1 : i + 1 + bt.look_ahead]]
        avg_future = sum(future, _ZERO) / Decimal(len(future))
        max_future = max(future)

        if recommendation.signal in (TimingSignal.SEND_NOW, TimingSignal.URGENT):
            send_total += 1
            if current >= avg_future * bt.send_now_tolerance:
                send_correct += 1
                total_savings += max(_ZERO, current - avg_future) * bt.reference_amount
        else:
            wait_total += 1
            if max_future > current * bt.wait_improvement:
                wait_correct += 1
                total_savings += (max_future - current) * bt.reference_amount

    total_signals = send_total + wait_total
    if total_signals:
        accuracy = round_half_up(
            Decimal(send_correct + wait_correct) / Decimal(total_signals) * _HUNDRED, 1
        )
        avg_savings = round_half_up(total_savings / Decimal(total_signals), 0)
    else:
        accuracy = round_half_up(_ZERO, 1)
        avg_savings = round_half_up(_ZERO, 0)

    result = BacktestResult(
        total_signals=total_signals,
        send_now_total=send_total,
        send_now_correct=send_correct,
        wait_total=wait_total,
        wait_correct=wait_correct,
        skipped_low_confidence=skipped,
        iterations=iterations,
        avg_savings_per_transfer=avg_savings,
        accuracy=accuracy,
    )

    logger.debug(
        "backtest_complete",
        points=n,
        iterations=iterations,
        total_signals=total_signals,
        accuracy=str(accuracy),
    )
    return result
