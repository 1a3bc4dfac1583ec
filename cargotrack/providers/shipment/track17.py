"""
17TRACK tracking provider (API v2.4)

Supports 3,000+ carriers worldwide. Only numbers already registered with
17TRACK return data; registration is left to the 17TRACK dashboard or a
caller-level job, so ``attempt`` makes a single gettrackinfo call.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from ...config import PROVIDER_TRACK17
from ...models import TrackingData, TrackingQuery, TrackingResult
from .base import HttpTrackingProvider
from .normalizer import build_event, first_present, group_timeline, iso_or_none

logger = logging.getLogger(__name__)

NOT_REGISTERED_CODE = -18019902

# 17TRACK carrier codes for carriers we can hint
CARRIER_CODES = {
    "maersk": 190094,
    "msc": 190105,
    "cma-cgm": 190044,
    "hapag-lloyd": 190073,
    "one": 190114,
    "evergreen": 190068,
    "cosco": 190050,
    "dhl": 100001,
    "ups": 100002,
    "fedex": 100003,
}

STATUS_MAP = {
    "NotFound": "Not Found",
    "InfoReceived": "Info Received",
    "InTransit": "In Transit",
    "Expired": "Expired",
    "AvailableForPickup": "Available for Pickup",
    "OutForDelivery": "Out for Delivery",
    "DeliveryFailure": "Delivery Failure",
    "Delivered": "Delivered",
    "Exception": "Exception",
}


def get_carrier_code(carrier: Optional[str]) -> Optional[int]:
    """Convert carrier name to 17TRACK carrier code."""
    if not carrier:
        return None
    return CARRIER_CODES.get(carrier.lower().replace(" ", "-").replace("_", "-"))


def normalize_track17_info(
    accepted: Dict[str, Any],
    tracking_number: str,
    reference_time: datetime,
) -> TrackingData:
    """Parse a 17TRACK gettrackinfo ``accepted`` item into TrackingData."""
    track_info = accepted.get("track_info") or {}

    providers = (track_info.get("tracking") or {}).get("providers") or []
    carrier_name = None
    if providers:
        carrier_name = (providers[0].get("provider") or {}).get("name")

    latest_status = track_info.get("latest_status") or {}
    status = STATUS_MAP.get(latest_status.get("status") or "NotFound", "Unknown")

    estimated = (track_info.get("time_metrics") or {}).get("estimated_delivery_date") or {}

    shipping_info = track_info.get("shipping_info") or {}
    origin = (shipping_info.get("shipper_address") or {}).get("city")
    destination = (shipping_info.get("recipient_address") or {}).get("city")

    events = []
    for provider in providers:
        for raw in provider.get("events") or []:
            event = build_event(
                status=raw.get("description") or raw.get("stage") or "",
                location=raw.get("location"),
                reference_time=reference_time,
                actual=first_present(raw.get("time_utc"), raw.get("time_iso")),
                type_hint=first_present(raw.get("stage"), raw.get("description")),
                description=raw.get("sub_status") or None,
            )
            events.append((event, None))

    latest_event = track_info.get("latest_event") or {}

    return TrackingData(
        shipment_number=accepted.get("number") or tracking_number,
        status=status,
        carrier=carrier_name or None,
        origin=origin or None,
        destination=destination or None,
        eta=iso_or_none(estimated.get("from")),
        last_location=latest_event.get("location") or None,
        timeline=group_timeline(events),
    )


class Track17TrackingProvider(HttpTrackingProvider):
    """
    Unified tracking via 17TRACK.

    Supports 3,000+ carriers including ocean lines, DHL, UPS and FedEx.
    """

    name = PROVIDER_TRACK17
    requires = ("TRACK17_API_KEY",)
    default_base_url = "https://api.17track.net/track/v2.4"

    async def _track(
        self,
        client: httpx.AsyncClient,
        query: TrackingQuery,
        retrieved_at: datetime,
    ) -> TrackingResult:
        payload = [{"number": query.tracking_number}]
        carrier_code = get_carrier_code(query.carrier_hint)
        if carrier_code:
            payload[0]["carrier"] = carrier_code

        response = await client.post(
            f"{self.base_url}/gettrackinfo",
            headers={"17token": self.api_key, "Content-Type": "application/json"},
            json=payload,
        )
        response.raise_for_status()
        data = response.json()

        if data.get("code") != 0:
            return self.fail(f"17TRACK API error: {data.get('code')}")

        accepted = (data.get("data") or {}).get("accepted") or []
        rejected = (data.get("data") or {}).get("rejected") or []

        if accepted:
            return self.success(
                normalize_track17_info(accepted[0], query.tracking_number, retrieved_at),
                retrieved_at,
            )

        if rejected:
            error = rejected[0].get("error") or {}
            if error.get("code") == NOT_REGISTERED_CODE:
                return self.fail("Tracking number is not registered with 17TRACK.")
            return self.fail(error.get("message") or "Tracking info not found")

        return self.fail("No tracking info found")
