"""Rate persistence layer.

Provides the SQLite database manager, row models, and the typed store for
daily rates, the intelligence cache, and provider fee overrides.
"""

from remitiq.data.database import RateDatabase
from remitiq.data.models import CachedIntelligence, DailyRate, ProviderConfig
from remitiq.data.store import RateStore

__all__ = [
    "CachedIntelligence",
    "DailyRate",
    "ProviderConfig",
    "RateDatabase",
    "RateStore",
]
