"""Multi-provider tracking and provider status routes."""

from fastapi import APIRouter, Depends

from ..app import require_app, verify_api_key
from ..models import TrackRequest

router = APIRouter()


@router.get("/api/tracking-providers", dependencies=[Depends(verify_api_key)])
async def provider_status():
    """List every provider with its configuration-derived availability."""
    app = require_app()
    statuses = app.provider_status()
    return {
        "success": True,
        "providers": [s.to_dict() for s in statuses],
        "totalProviders": len(statuses),
        "availableProviders": sum(1 for s in statuses if s.available),
    }


@router.post("/api/tracking-providers", dependencies=[Depends(verify_api_key)])
async def track_with_providers(req: TrackRequest):
    """Track one shipment through the provider fallback chain."""
    app = require_app()
    result = await app.track(
        req.tracking_number,
        preferred_provider=req.preferred_provider,
        carrier_hint=req.carrier_hint,
        shipment_type=req.shipment_type,
        gocomet_token=req.gocomet_token,
    )
    return result.to_dict()
