"""Money-transfer provider definitions, payout quotes, and ranking."""

from remitiq.providers.ranking import (
    PROVIDER_DEFINITIONS,
    ProviderDefinition,
    ProviderQuote,
    ProviderRanker,
    get_provider,
    quote_provider,
)

__all__ = [
    "PROVIDER_DEFINITIONS",
    "ProviderDefinition",
    "ProviderQuote",
    "ProviderRanker",
    "get_provider",
    "quote_provider",
]
