"""Rate sources: live Wise and Frankfurter fetches, stored replay, synthetic fallback."""

from remitiq.sources.base import RateSeries, RateSource
from remitiq.sources.frankfurter import FrankfurterRateSource
from remitiq.sources.stored import StoredRateSource
from remitiq.sources.synthetic import SyntheticRateSource, generate_synthetic_series
from remitiq.sources.wise import WiseRateSource

__all__ = [
    "FrankfurterRateSource",
    "RateSeries",
    "RateSource",
    "StoredRateSource",
    "SyntheticRateSource",
    "WiseRateSource",
    "generate_synthetic_series",
]
