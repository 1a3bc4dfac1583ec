"""Shipment tracking routes used by the order screens and refresh jobs."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...errors import ProviderAuthenticationError, ProviderConfigurationError
from ..app import require_app, verify_api_key
from ..models import BatchTrackRequest, GocometTokenRequest, TrackRequest

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_BATCH_SIZE = 100


@router.get("/api/tracking", dependencies=[Depends(verify_api_key)])
async def track_container(
    container: Optional[str] = None,
    carrier: Optional[str] = None,
    bookingType: str = "ocean",
):
    """Track by container number from query parameters."""
    app = require_app()
    result = await app.track(container, carrier_hint=carrier, shipment_type=bookingType)
    return result.to_dict()


@router.post("/api/tracking", dependencies=[Depends(verify_api_key)])
async def track_shipment(req: TrackRequest):
    app = require_app()
    result = await app.track(
        req.tracking_number,
        carrier_hint=req.carrier_hint,
        shipment_type=req.shipment_type,
    )
    return result.to_dict()


@router.get("/api/tracking/detect", dependencies=[Depends(verify_api_key)])
async def detect_number(number: Optional[str] = None):
    """Number type, carrier and carrier tracking page inferred from the format."""
    info = require_app().detect(number)
    return {"success": True, **info.to_dict()}


@router.post("/api/tracking/batch", dependencies=[Depends(verify_api_key)])
async def track_batch(req: BatchTrackRequest):
    """Refresh many shipments at once; one failure never fails the batch."""
    if not req.tracking_numbers:
        raise HTTPException(400, "trackingNumbers must not be empty")
    if len(req.tracking_numbers) > MAX_BATCH_SIZE:
        raise HTTPException(400, f"At most {MAX_BATCH_SIZE} tracking numbers per batch")

    app = require_app()
    report = await app.track_many(req.tracking_numbers, shipment_type=req.shipment_type)
    return {"success": True, **report.to_dict()}


@router.post("/api/tracking/gocomet/token", dependencies=[Depends(verify_api_key)])
async def gocomet_token(req: GocometTokenRequest):
    """Exchange GoComet credentials (or the configured ones) for a token."""
    app = require_app()
    try:
        token = await app.gocomet_token(req.email, req.password)
    except ProviderConfigurationError as e:
        raise HTTPException(400, str(e))
    except ProviderAuthenticationError as e:
        raise HTTPException(502, str(e))
    return {"success": True, "token": token}
