"""Rate alert endpoints: subscribe, count, and run the matching pass."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from remitiq.config import AppSettings
from remitiq.data.models import AlertType
from remitiq.exceptions import StoreUnavailableError
from remitiq.service import IntelligenceService

log = structlog.get_logger(__name__)

router = APIRouter()


def _service(request: Request) -> IntelligenceService:
    return request.app.state.service


def _parse_target(raw: object) -> Decimal | None:
    """Finite Decimal from a JSON number or numeric string, else None."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _store_unavailable(e: StoreUnavailableError) -> JSONResponse:
    return JSONResponse(content={"error": str(e)}, status_code=503)


@router.post("/alerts")
async def create_alert(request: Request) -> JSONResponse:
    """Register a target-rate alert.

    Expects JSON body with: email, target_rate, and optional alert_type
    ("rate", "platform" or "both"; anything else means "both").
    """
    settings: AppSettings = request.app.state.settings
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(content={"error": "Invalid JSON body"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse(content={"error": "Invalid JSON body"}, status_code=400)

    email = body.get("email")
    if not isinstance(email, str) or "@" not in email:
        return JSONResponse(content={"error": "Valid email is required"}, status_code=400)

    target_rate = _parse_target(body.get("target_rate"))
    low, high = settings.api.alert_min_target, settings.api.alert_max_target
    if target_rate is None or not low <= target_rate <= high:
        return JSONResponse(
            content={"error": f"target_rate must be between {low} and {high}"},
            status_code=400,
        )

    try:
        alert_type = AlertType(body.get("alert_type"))
    except ValueError:
        alert_type = AlertType.BOTH

    try:
        alert_id = await _service(request).create_rate_alert(email, target_rate, alert_type)
    except StoreUnavailableError as e:
        return _store_unavailable(e)

    return JSONResponse(
        content={
            "id": alert_id,
            "email": email,
            "target_rate": str(target_rate),
            "alert_type": alert_type.value,
        },
        status_code=201,
    )


@router.get("/alerts")
async def get_alert_stats(request: Request) -> JSONResponse:
    """Active and total alert counts."""
    try:
        active, total = await _service(request).get_alert_counts()
    except StoreUnavailableError as e:
        return _store_unavailable(e)
    return JSONResponse(content={"active": active, "total": total})


@router.post("/alerts/process")
async def process_alerts(request: Request) -> JSONResponse:
    """Fire alerts whose target the best provider rate has reached."""
    try:
        run = await _service(request).process_rate_alerts()
    except StoreUnavailableError as e:
        return _store_unavailable(e)
    log.info("alerts_processed", triggered=len(run.triggered))
    return JSONResponse(content=run.to_dict())
