"""
TrackShip tracking provider (bearer-token multi-carrier API)
"""

import logging
from datetime import datetime
from typing import Any, Dict

import httpx

from ...config import PROVIDER_TRACKSHIP
from ...models import TrackingData, TrackingQuery, TrackingResult
from .base import HttpTrackingProvider
from .normalizer import build_event, group_timeline, iso_or_none

logger = logging.getLogger(__name__)

STATUS_MAP = {
    "pre_transit": "Pre-Transit",
    "pending": "Pending",
    "in_transit": "In Transit",
    "out_for_delivery": "Out for Delivery",
    "delivered": "Delivered",
    "exception": "Exception",
}


def normalize_trackship_status(status: Any) -> str:
    if not status:
        return "Unknown"
    return STATUS_MAP.get(str(status).lower(), str(status))


def normalize_trackship_shipment(
    shipment: Dict[str, Any],
    tracking_number: str,
    reference_time: datetime,
) -> TrackingData:
    carrier = shipment.get("carrier")
    if isinstance(carrier, dict):
        carrier = carrier.get("name")

    events = []
    for raw in shipment.get("events") or []:
        status = raw.get("status") or ""
        event = build_event(
            status=normalize_trackship_status(status),
            location=raw.get("location"),
            reference_time=reference_time,
            actual=raw.get("timestamp"),
            type_hint=raw.get("description") or status,
            description=raw.get("description") or None,
        )
        events.append((event, None))

    return TrackingData(
        shipment_number=shipment.get("tracking_number") or tracking_number,
        status=normalize_trackship_status(shipment.get("status")),
        carrier=carrier or None,
        origin=shipment.get("origin") or None,
        destination=shipment.get("destination") or None,
        eta=iso_or_none(shipment.get("estimated_delivery")),
        last_location=shipment.get("location") or None,
        timeline=group_timeline(events),
    )


class TrackShipTrackingProvider(HttpTrackingProvider):
    """Generic multi-carrier service authenticated with a bearer token."""

    name = PROVIDER_TRACKSHIP
    requires = ("TRACKSHIP_API_KEY",)
    default_base_url = "https://api.trackship.com/v1"

    async def _track(
        self,
        client: httpx.AsyncClient,
        query: TrackingQuery,
        retrieved_at: datetime,
    ) -> TrackingResult:
        response = await client.post(
            f"{self.base_url}/track",
            json={
                "tracking_number": query.tracking_number,
                "carrier": query.carrier_hint or "auto-detect",
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        response.raise_for_status()
        body = response.json()

        shipment = body.get("data") if isinstance(body.get("data"), dict) else body
        if body.get("success") is False or not shipment.get("status"):
            return self.fail(body.get("message") or body.get("error") or "No tracking information found from TrackShip.")

        data = normalize_trackship_shipment(shipment, query.tracking_number, retrieved_at)
        return self.success(data, retrieved_at)
