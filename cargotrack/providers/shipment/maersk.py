"""
Maersk tracking provider (DCSA Track & Trace events API)

The API returns one event per (event, classifier) pair: an arrival may appear
once as planned (PLN), once as estimated (EST) and once as actual (ACT).
Those are folded into a single TrackingEvent carrying both times.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ...config import PROVIDER_MAERSK
from ...models import EventType, ShipmentType, TrackingData, TrackingEvent, TrackingQuery, TrackingResult
from .base import HttpTrackingProvider
from .carrier_detector import is_container_number
from .normalizer import build_event, first_present, group_timeline, latest_event

logger = logging.getLogger(__name__)

EVENT_CODES: Dict[str, Tuple[str, EventType]] = {
    "ARRI": ("Vessel Arrival", EventType.VESSEL_ARRIVAL),
    "DEPA": ("Vessel Departure", EventType.VESSEL_DEPARTURE),
    "LOAD": ("Loaded on Vessel", EventType.LOAD),
    "DISC": ("Discharged", EventType.EVENT),
    "GTIN": ("Gate In", EventType.GATE),
    "GTOT": ("Gate Out", EventType.GATE),
    "STUF": ("Stuffed", EventType.EVENT),
    "STRP": ("Stripped", EventType.EVENT),
    "RECE": ("Cargo Received", EventType.CARGO_RECEIVED),
    "RELS": ("Customs Released", EventType.CUSTOMS_CLEARED),
}

ACTUAL = "ACT"


def _event_code(event: Dict[str, Any]) -> str:
    return (
        event.get("transportEventTypeCode")
        or event.get("equipmentEventTypeCode")
        or event.get("shipmentEventTypeCode")
        or event.get("eventType")
        or ""
    ).upper()


def _location(event: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """Return (location name, terminal) for a DCSA event."""
    transport_call = event.get("transportCall") or {}
    location = event.get("eventLocation") or transport_call.get("location") or {}
    name = first_present(location.get("locationName"), location.get("UNLocationCode"))
    terminal = first_present(transport_call.get("facilityCode"), location.get("facilityCode"))
    return name, terminal


def _vessel(event: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    transport_call = event.get("transportCall") or {}
    vessel = transport_call.get("vessel") or {}
    voyage = first_present(
        transport_call.get("exportVoyageNumber"),
        transport_call.get("importVoyageNumber"),
        transport_call.get("carrierVoyageNumber"),
    )
    return vessel.get("vesselName"), voyage


def normalize_maersk_events(
    tracking_number: str,
    payload: Any,
    reference_time: datetime,
) -> Optional[TrackingData]:
    """
    Convert a DCSA events payload into TrackingData.

    Returns None when the payload holds no events.
    """
    raw_events: List[Dict[str, Any]] = payload.get("events", []) if isinstance(payload, dict) else list(payload or [])
    if not raw_events:
        return None

    # (code, location, voyage) -> {"actual": raw, "planned": raw, "event": raw}
    folded: Dict[Tuple[str, Optional[str], Optional[str]], Dict[str, Any]] = {}
    for raw in raw_events:
        code = _event_code(raw)
        location, _ = _location(raw)
        _, voyage = _vessel(raw)
        slot = folded.setdefault((code, location, voyage), {"event": raw})
        if (raw.get("eventClassifierCode") or "").upper() == ACTUAL:
            slot["actual"] = raw.get("eventDateTime")
            slot["event"] = raw
        else:
            # EST supersedes PLN when both are present
            if "planned" not in slot or (raw.get("eventClassifierCode") or "").upper() == "EST":
                slot["planned"] = raw.get("eventDateTime")

    events: List[Tuple[TrackingEvent, Optional[str]]] = []
    for (code, location, voyage), slot in folded.items():
        raw = slot["event"]
        label, event_type = EVENT_CODES.get(code, (raw.get("description") or code.title() or "Event", EventType.EVENT))
        _, terminal = _location(raw)
        vessel, _ = _vessel(raw)
        event = build_event(
            status=label,
            location=location,
            reference_time=reference_time,
            actual=slot.get("actual"),
            planned=slot.get("planned"),
            event_type=event_type,
            description=raw.get("description"),
            vessel=vessel,
            voyage=voyage,
        )
        events.append((event, terminal))

    flat = [e for e, _ in events]
    equipment = next((e for e in raw_events if e.get("equipmentReference")), {})
    departures = [e for e in flat if e.type == EventType.VESSEL_DEPARTURE]
    arrivals = [e for e in flat if e.type == EventType.VESSEL_ARRIVAL]
    last = latest_event(flat)

    return TrackingData(
        shipment_number=tracking_number,
        status=last.status if last else "Planned",
        carrier="Maersk",
        container_number=equipment.get("equipmentReference"),
        container_type=equipment.get("ISOEquipmentCode"),
        origin=departures[0].location if departures else flat[0].location,
        destination=arrivals[-1].location if arrivals else None,
        eta=arrivals[-1].timestamp if arrivals and not arrivals[-1].actual_at else None,
        etd=departures[0].timestamp if departures else None,
        last_location=last.location if last else None,
        timeline=group_timeline(events),
    )


class MaerskTrackingProvider(HttpTrackingProvider):
    """Primary carrier adapter for Maersk containers and bills of lading."""

    name = PROVIDER_MAERSK
    supported_carriers = ("maersk",)
    supported_modes = (ShipmentType.OCEAN, ShipmentType.LCL, ShipmentType.UNKNOWN)
    requires = ("MAERSK_API_KEY",)
    default_base_url = "https://api.maersk.com/track-and-trace-private"

    async def _track(
        self,
        client: httpx.AsyncClient,
        query: TrackingQuery,
        retrieved_at: datetime,
    ) -> TrackingResult:
        if is_container_number(query.tracking_number):
            params = {"equipmentReference": query.tracking_number}
        else:
            params = {"transportDocumentReference": query.tracking_number}

        response = await client.get(
            f"{self.base_url}/events",
            params=params,
            headers={"Consumer-Key": self.api_key, "Accept": "application/json"},
        )
        response.raise_for_status()

        data = normalize_maersk_events(query.tracking_number, response.json(), retrieved_at)
        if data is None:
            return self.fail("No tracking events found for this number.")
        return self.success(data, retrieved_at)
