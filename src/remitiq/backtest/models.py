"""Data models for the walk-forward backtest.

CRITICAL: All monetary values use Decimal. Never use float for rates or savings.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class BacktestResult:
    """Aggregate retrospective score of the timing rule.

    SEND_NOW and URGENT calls both count as send-class signals. Calls below
    the confidence floor are skipped and counted separately, never scored.
    """

    total_signals: int = 0
    send_now_total: int = 0
    send_now_correct: int = 0
    wait_total: int = 0
    wait_correct: int = 0
    skipped_low_confidence: int = 0
    iterations: int = 0  # windows replayed, scored or not
    avg_savings_per_transfer: Decimal = Decimal("0")  # INR per reference transfer
    accuracy: Decimal = Decimal("0")  # percent, 1 dp

    @property
    def total_correct(self) -> int:
        return self.send_now_correct + self.wait_correct

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output.

        Converts all Decimal values to str for JSON compatibility.
        """
        return {
            "total_signals": self.total_signals,
            "send_now_total": self.send_now_total,
            "send_now_correct": self.send_now_correct,
            "wait_total": self.wait_total,
            "wait_correct": self.wait_correct,
            "skipped_low_confidence": self.skipped_low_confidence,
            "iterations": self.iterations,
            "avg_savings_per_transfer": str(self.avg_savings_per_transfer),
            "accuracy": str(self.accuracy),
        }
