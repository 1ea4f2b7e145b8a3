"""Walk-forward backtest package.

Replays the timing recommendation over historical windows, using the exact
live decision path, and scores each confident call against realized rates.
"""

from remitiq.backtest.engine import run_backtest
from remitiq.backtest.models import BacktestResult

__all__ = [
    "BacktestResult",
    "run_backtest",
]
