"""JSON endpoints for rate intelligence, provider ranking, and the public v1 contract."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import structlog
from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from remitiq.config import AppSettings
from remitiq.service import IntelligenceService

log = structlog.get_logger(__name__)

router = APIRouter()
health_router = APIRouter()

CURRENCY_PAIR = "AUD/INR"


def _service(request: Request) -> IntelligenceService:
    return request.app.state.service


def _resolve_amount(request: Request, amount: Decimal | None) -> Decimal:
    """Apply the default amount and the configured upper bound."""
    settings: AppSettings = request.app.state.settings
    resolved = amount if amount is not None else settings.api.default_amount
    if resolved > settings.api.max_amount:
        raise HTTPException(
            status_code=422,
            detail=f"amount must not exceed {settings.api.max_amount}",
        )
    return resolved


@health_router.get("/health")
async def health() -> JSONResponse:
    """Liveness check."""
    return JSONResponse(content={"status": "ok"})


@router.get("/intelligence")
async def get_intelligence(request: Request) -> JSONResponse:
    """Full intelligence payload: chart window, stats, recommendation, backtest, events."""
    payload = await _service(request).get_intelligence_payload()
    return JSONResponse(content=payload)


@router.post("/refresh")
async def refresh_intelligence(request: Request) -> JSONResponse:
    """Force a recompute, bypassing both caches."""
    data = await _service(request).get_intelligence(force_refresh=True)
    log.info("intelligence_refreshed", data_source=data.data_source.value)
    return JSONResponse(content={
        "computed_at": data.computed_at.isoformat(),
        "data_source": data.data_source.value,
        "signal": data.recommendation.signal.value,
        "points": len(data.full_history),
    })


@router.get("/rates")
async def get_rates(
    request: Request,
    amount: Decimal | None = Query(default=None, gt=0),
) -> JSONResponse:
    """Mid-market rate, recommendation summary, and ranked provider quotes."""
    resolved = _resolve_amount(request, amount)
    data, quotes = await _service(request).get_provider_quotes(resolved)
    rec = data.recommendation

    return JSONResponse(content={
        "amount": str(resolved),
        "mid_market_rate": str(data.mid_market_rate),
        "data_source": data.data_source.value,
        "last_updated": data.computed_at.isoformat(),
        "recommendation": {
            "signal": rec.signal.value,
            "confidence": rec.confidence,
            "reason": rec.reason,
            "forecast": rec.forecast.to_dict(),
        },
        "ranked": [q.to_dict() for q in quotes],
    })


@router.get("/v1/rates")
async def get_rates_v1(
    request: Request,
    amount: Decimal | None = Query(default=None, gt=0),
) -> JSONResponse:
    """Stable external contract: interbank rate, signal, forecast, live providers."""
    resolved = _resolve_amount(request, amount)
    data, quotes = await _service(request).get_provider_quotes(resolved)
    rec = data.recommendation

    return JSONResponse(content={
        "metadata": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "currency_pair": CURRENCY_PAIR,
            "data_source": data.data_source.value,
        },
        "market": {
            "interbank_rate": str(data.mid_market_rate),
            "ai_signal": rec.signal.value,
            "ai_confidence": rec.confidence,
            "short_term_forecast": rec.forecast.direction.value,
        },
        "live_providers": [
            {
                "id": q.provider_id,
                "name": q.name,
                "offered_rate": str(q.rate),
                "transfer_fee": str(q.fee),
                "estimated_received": q.received,
                "estimated_speed": q.speed,
                "is_promo_applied": q.promo_applied,
            }
            for q in quotes
        ],
    })
