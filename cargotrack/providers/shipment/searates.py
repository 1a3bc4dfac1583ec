"""
SeaRates tracking provider (generic multi-carrier container tracking)
"""

import logging
from datetime import datetime
from typing import Any, Dict

import httpx

from ...config import PROVIDER_SEARATES
from ...models import ShipmentType, TrackingData, TrackingQuery, TrackingResult
from .base import HttpTrackingProvider
from .normalizer import build_event, first_present, group_timeline, iso_or_none

logger = logging.getLogger(__name__)

# SeaRates number types: container, bill of lading, air waybill
_TYPE_BY_MODE = {
    ShipmentType.OCEAN: "CT",
    ShipmentType.LCL: "CT",
}


def _name(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get("name")
    return value


def normalize_searates_tracking(
    tracking: Dict[str, Any],
    tracking_number: str,
    reference_time: datetime,
) -> TrackingData:
    """Convert one SeaRates ``tracking`` entry into TrackingData."""
    events = []
    for raw in tracking.get("events") or []:
        date = raw.get("date")
        is_actual = raw.get("actual", True)
        event = build_event(
            status=raw.get("status") or raw.get("description") or "",
            location=_name(raw.get("location")),
            reference_time=reference_time,
            actual=date if is_actual else None,
            planned=None if is_actual else date,
            type_hint=first_present(raw.get("event_type"), raw.get("status"), raw.get("description")),
            description=raw.get("description"),
            vessel=raw.get("vessel_name"),
            voyage=raw.get("voyage"),
            pieces=raw.get("pieces"),
            weight=raw.get("weight"),
            volume=raw.get("volume"),
        )
        events.append((event, raw.get("terminal")))

    pol = _name(tracking.get("pol"))
    pod = _name(tracking.get("pod"))

    return TrackingData(
        shipment_number=tracking.get("number") or tracking_number,
        status=tracking.get("status") or "Unknown",
        carrier=tracking.get("sealine") or None,
        container_number=tracking.get("container_number") or None,
        container_type=tracking.get("container_type") or None,
        origin=pol or None,
        destination=pod or None,
        pol=pol or None,
        pod=pod or None,
        eta=iso_or_none(tracking.get("eta")),
        etd=iso_or_none(tracking.get("etd")),
        last_location=_name(tracking.get("current_location")) or None,
        timeline=group_timeline(events),
    )


class SeaRatesTrackingProvider(HttpTrackingProvider):
    """Generic multi-carrier service authenticated with an API key parameter."""

    name = PROVIDER_SEARATES
    requires = ("SEARATES_API_KEY",)
    default_base_url = "https://api.searates.com/tracking/v2"

    async def _track(
        self,
        client: httpx.AsyncClient,
        query: TrackingQuery,
        retrieved_at: datetime,
    ) -> TrackingResult:
        params = {
            "api_key": self.api_key,
            "number": query.tracking_number,
            "include_route": "true",
        }
        if query.carrier_hint:
            params["sealine"] = query.carrier_hint
        number_type = _TYPE_BY_MODE.get(query.shipment_type)
        if number_type:
            params["type"] = number_type

        response = await client.get(self.base_url, params=params)
        response.raise_for_status()
        body = response.json()

        trackings = body.get("tracking") or []
        if not trackings:
            return self.fail("No tracking information found from SeaRates.")

        data = normalize_searates_tracking(trackings[0], query.tracking_number, retrieved_at)
        return self.success(data, retrieved_at)
