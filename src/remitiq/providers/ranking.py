"""Provider payout calculation and ranking for an AUD to INR transfer.

Each provider's offered rate is derived from the mid-market rate by its FX
margin. Providers with a promotional margin apply it to the first
``promo_cap`` AUD after fees and the standard margin to the rest, giving a
blended effective rate.

Core formula:
  fee      = base_fee + amount * fee_pct / 100
  rate     = mid_market * (1 - margin_pct / 100)       (blended if promo)
  received = round((amount - fee) * rate)
  savings  = received - worst_received

CRITICAL: All calculations use Decimal. Never use float for amounts or rates.
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from remitiq.data.models import ProviderConfig
from remitiq.exceptions import UnknownProviderError
from remitiq.intelligence.indicators import round_half_up

_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ProviderDefinition:
    """Margin and fee schedule for one money-transfer provider."""

    id: str
    name: str
    margin_pct: Decimal  # FX margin below mid-market, percent
    base_fee: Decimal  # AUD flat fee
    fee_pct: Decimal  # percent of amount
    speed: str
    promo_margin_pct: Decimal | None = None  # negative = better than mid-market
    promo_cap: Decimal | None = None  # AUD covered by the promo margin
    promo_text: str | None = None

    @property
    def has_promo(self) -> bool:
        return self.promo_margin_pct is not None and bool(self.promo_cap)

    def with_config(self, config: ProviderConfig) -> "ProviderDefinition":
        """Return a copy with a stored override applied.

        Promo fields are only overridden when the override sets them.
        """
        return replace(
            self,
            margin_pct=config.margin_pct,
            base_fee=config.base_fee,
            fee_pct=config.fee_pct,
            promo_margin_pct=(
                config.promo_margin_pct
                if config.promo_margin_pct is not None
                else self.promo_margin_pct
            ),
            promo_cap=config.promo_cap if config.promo_cap is not None else self.promo_cap,
        )


@dataclass(frozen=True)
class ProviderQuote:
    """What a provider pays out for a given amount and mid-market rate."""

    provider_id: str
    name: str
    rate: Decimal  # effective rate, 4 dp
    fee: Decimal  # AUD, 2 dp
    received: int  # INR
    savings: int  # INR more than the worst provider
    margin_pct: Decimal
    speed: str
    promo_text: str | None = None
    promo_applied: bool = False

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        return {
            "id": self.provider_id,
            "name": self.name,
            "rate": str(self.rate),
            "fee": str(self.fee),
            "received": self.received,
            "savings": self.savings,
            "margin_pct": str(self.margin_pct),
            "speed": self.speed,
            "promo_text": self.promo_text,
            "promo_applied": self.promo_applied,
        }


PROVIDER_DEFINITIONS: tuple[ProviderDefinition, ...] = (
    ProviderDefinition(
        id="wise", name="Wise",
        margin_pct=Decimal("0"), base_fee=Decimal("0.42"), fee_pct=Decimal("0.50"),
        speed="Minutes", promo_text="First transfer free for new users",
    ),
    ProviderDefinition(
        id="remitly", name="Remitly",
        margin_pct=Decimal("0.06"), base_fee=Decimal("0"), fee_pct=Decimal("0"),
        speed="Minutes",
        promo_margin_pct=Decimal("-0.93"), promo_cap=Decimal("1500"),
        promo_text="Zero fees on first 3 transfers",
    ),
    ProviderDefinition(
        id="torfx", name="TorFX",
        margin_pct=Decimal("0.75"), base_fee=Decimal("0"), fee_pct=Decimal("0"),
        speed="1-2 days",
    ),
    ProviderDefinition(
        id="ofx", name="OFX",
        margin_pct=Decimal("0.86"), base_fee=Decimal("0"), fee_pct=Decimal("0"),
        speed="1-2 days", promo_text="No fees on transfers over $1,000",
    ),
    ProviderDefinition(
        id="instarem", name="Instarem",
        margin_pct=Decimal("1.03"), base_fee=Decimal("1.99"), fee_pct=Decimal("0"),
        speed="Same day",
    ),
    ProviderDefinition(
        id="wu", name="Western Union",
        margin_pct=Decimal("1.86"), base_fee=Decimal("4.99"), fee_pct=Decimal("0"),
        speed="Minutes", promo_text="Zero fees & 0% margin for new users",
    ),
)


def get_provider(provider_id: str) -> ProviderDefinition:
    """Look up a provider definition by id.

    Raises:
        UnknownProviderError: If no provider has that id.
    """
    for definition in PROVIDER_DEFINITIONS:
        if definition.id == provider_id:
            return definition
    raise UnknownProviderError(f"Unknown provider: {provider_id}")


def quote_provider(
    definition: ProviderDefinition,
    mid_market_rate: Decimal,
    amount: Decimal,
) -> ProviderQuote:
    """Compute one provider's fee, effective rate, and payout.

    An amount fully consumed by fees yields a zero rate and zero payout.
    Savings are left at zero; ``rank_providers`` fills them in.
    """
    fee = round_half_up(definition.base_fee + amount * definition.fee_pct / _HUNDRED, 2)
    after_fee = amount - fee
    standard_rate = mid_market_rate * (_ONE - definition.margin_pct / _HUNDRED)

    if after_fee <= 0:
        rate = _ZERO
    elif definition.has_promo:
        assert definition.promo_margin_pct is not None and definition.promo_cap is not None
        promo_rate = mid_market_rate * (_ONE - definition.promo_margin_pct / _HUNDRED)
        promo_amount = min(after_fee, definition.promo_cap)
        standard_amount = after_fee - promo_amount
        rate = (promo_amount * promo_rate + standard_amount * standard_rate) / after_fee
    else:
        rate = standard_rate

    rate = round_half_up(rate, 4)
    received = int(round_half_up(max(after_fee, _ZERO) * rate, 0))

    return ProviderQuote(
        provider_id=definition.id,
        name=definition.name,
        rate=rate,
        fee=fee,
        received=received,
        savings=0,
        margin_pct=definition.margin_pct,
        speed=definition.speed,
        promo_text=definition.promo_text,
        promo_applied=definition.has_promo and after_fee > 0,
    )


class ProviderRanker:
    """Ranks providers by INR received for a transfer.

    Args:
        definitions: Provider table. Defaults to PROVIDER_DEFINITIONS.
    """

    def __init__(self, definitions: tuple[ProviderDefinition, ...] = PROVIDER_DEFINITIONS) -> None:
        self._definitions = definitions

    def rank_providers(
        self,
        amount: Decimal,
        mid_market_rate: Decimal,
        overrides: list[ProviderConfig] | None = None,
    ) -> list[ProviderQuote]:
        """Quote every provider and sort by payout.

        Args:
            amount: AUD to send. Must be positive.
            mid_market_rate: Current AUD/INR mid-market rate.
            overrides: Stored margin/fee overrides keyed by provider id.

        Returns:
            ProviderQuote list sorted by ``received`` descending, each with
            ``savings`` relative to the worst payout.

        Raises:
            ValueError: If ``amount`` is not positive.
        """
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")

        by_id = {c.provider_id: c for c in overrides or []}
        quotes = [
            quote_provider(
                d.with_config(by_id[d.id]) if d.id in by_id else d,
                mid_market_rate,
                amount,
            )
            for d in self._definitions
        ]
        quotes.sort(key=lambda q: q.received, reverse=True)

        if not quotes:
            return []
        worst = quotes[-1].received
        return [replace(q, savings=q.received - worst) for q in quotes]
