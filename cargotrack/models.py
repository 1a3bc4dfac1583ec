"""
CargoTrack Models - Canonical tracking data shared by every provider

Every provider adapter normalizes its own payload into these types, so the
aggregator and the HTTP layer never see provider-specific shapes.

The dataclasses are frozen: results are produced fresh per query and are not
mutated afterwards. ``to_dict()`` renders the camelCase JSON shape and omits
optional fields that are absent (never ``null``), except ``timeline`` and
``events`` which are always present.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidTrackingQuery

INVALID_DATE = "Invalid Date"


class ShipmentType(str, Enum):
    """Mode of transport hint supplied by the caller."""
    OCEAN = "ocean"
    AIR = "air"
    LCL = "lcl"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ShipmentType":
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class EventType(str, Enum):
    """Type tag for a timeline event. Unmapped provider subtypes become EVENT."""
    EVENT = "event"
    VESSEL_ARRIVAL = "vessel-arrival"
    VESSEL_DEPARTURE = "vessel-departure"
    GATE = "gate"
    LOAD = "load"
    CARGO_RECEIVED = "cargo-received"
    CUSTOMS_CLEARED = "customs-cleared"


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in values.items() if v is not None}


def normalize_tracking_number(tracking_number: str) -> str:
    """Normalize tracking number (remove spaces, dashes, dots, uppercase)."""
    normalized = re.sub(r"[\s\-\.]", "", tracking_number or "")
    return normalized.upper()


@dataclass(frozen=True)
class TrackingQuery:
    """
    Input to a single tracking call.

    Build with ``TrackingQuery.create()`` so the tracking number is
    normalized and validated before any provider sees it.
    """
    tracking_number: str
    preferred_provider: Optional[str] = None
    carrier_hint: Optional[str] = None
    shipment_type: ShipmentType = ShipmentType.UNKNOWN
    gocomet_token: Optional[str] = None

    @classmethod
    def create(
        cls,
        tracking_number: Optional[str],
        preferred_provider: Optional[str] = None,
        carrier_hint: Optional[str] = None,
        shipment_type: Optional[str] = None,
        gocomet_token: Optional[str] = None,
    ) -> "TrackingQuery":
        if not isinstance(tracking_number, str) or not tracking_number.strip():
            raise InvalidTrackingQuery("Tracking number is required")

        normalized = normalize_tracking_number(tracking_number)
        if not normalized:
            raise InvalidTrackingQuery("Tracking number is required")

        return cls(
            tracking_number=normalized,
            preferred_provider=(preferred_provider or "").strip() or None,
            carrier_hint=(carrier_hint or "").strip().lower() or None,
            shipment_type=ShipmentType.parse(shipment_type),
            gocomet_token=gocomet_token or None,
        )


@dataclass(frozen=True)
class TrackingEvent:
    """
    One timeline entry.

    ``timestamp`` is the sort key and is always populated. ``date`` and
    ``time`` are display strings derived from the raw provider field and may
    be the "Invalid Date" marker.
    """
    type: EventType
    status: str
    location: str
    timestamp: str
    date: str = INVALID_DATE
    time: str = INVALID_DATE
    description: Optional[str] = None
    vessel: Optional[str] = None
    voyage: Optional[str] = None
    pieces: Optional[int] = None
    volume: Optional[str] = None
    weight: Optional[str] = None
    planned_at: Optional[str] = None
    actual_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type.value,
            "status": self.status,
            "location": self.location,
            "timestamp": self.timestamp,
            "date": self.date,
            "time": self.time,
            "description": self.description,
            "vessel": self.vessel,
            "voyage": self.voyage,
            "pieces": self.pieces,
            "volume": self.volume,
            "weight": self.weight,
            "plannedAt": self.planned_at,
            "actualAt": self.actual_at,
        })


@dataclass(frozen=True)
class TimelineEntry:
    """Events grouped under one location."""
    location: str
    terminal: Optional[str] = None
    events: Tuple[TrackingEvent, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "location": self.location,
            "terminal": self.terminal,
            "events": [e.to_dict() for e in self.events],
        })


@dataclass(frozen=True)
class TrackingData:
    """Canonical normalized shipment snapshot."""
    shipment_number: str
    status: str
    carrier: Optional[str] = None
    container_number: Optional[str] = None
    container_type: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    pol: Optional[str] = None
    pod: Optional[str] = None
    eta: Optional[str] = None
    etd: Optional[str] = None
    last_location: Optional[str] = None
    timeline: Tuple[TimelineEntry, ...] = ()

    def iter_events(self):
        for entry in self.timeline:
            yield from entry.events

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "shipmentNumber": self.shipment_number,
            "status": self.status,
            "carrier": self.carrier,
            "containerNumber": self.container_number,
            "containerType": self.container_type,
            "origin": self.origin,
            "destination": self.destination,
            "pol": self.pol,
            "pod": self.pod,
            "eta": self.eta,
            "etd": self.etd,
            "lastLocation": self.last_location,
            "timeline": [t.to_dict() for t in self.timeline],
        })


@dataclass(frozen=True)
class TrackingResult:
    """
    Outcome of a tracking attempt.

    Success carries ``data``; failure carries ``error`` and, for the
    aggregator's terminal failure, ``fallback_options`` naming the providers
    that were skipped for missing configuration.

    Example:
        TrackingResult.ok(data, source="maersk", is_live_data=True)
        TrackingResult.fail("Container not found", source="searates")
    """
    success: bool
    source: str
    data: Optional[TrackingData] = None
    error: Optional[str] = None
    is_live_data: bool = False
    scraped_at: Optional[str] = None
    fallback_options: Optional[Tuple[str, ...]] = None

    @classmethod
    def ok(
        cls,
        data: TrackingData,
        source: str,
        is_live_data: bool = True,
        scraped_at: Optional[str] = None,
    ) -> "TrackingResult":
        return cls(
            success=True,
            source=source,
            data=data,
            is_live_data=is_live_data,
            scraped_at=scraped_at,
        )

    @classmethod
    def fail(
        cls,
        error: str,
        source: str,
        fallback_options: Optional[List[str]] = None,
        is_live_data: bool = False,
    ) -> "TrackingResult":
        return cls(
            success=False,
            source=source,
            error=error,
            is_live_data=is_live_data,
            fallback_options=tuple(fallback_options) if fallback_options is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return _compact({
                "success": True,
                "data": self.data.to_dict() if self.data else None,
                "source": self.source,
                "isLiveData": self.is_live_data,
                "scrapedAt": self.scraped_at,
            })
        return _compact({
            "success": False,
            "error": self.error,
            "source": self.source,
            "isLiveData": self.is_live_data,
            "fallbackOptions": list(self.fallback_options) if self.fallback_options is not None else None,
        })


@dataclass(frozen=True)
class ProviderStatus:
    """Availability of one provider, derived from configuration only."""
    name: str
    available: bool
    priority: int
    supported_carriers: Tuple[str, ...] = ("*",)
    requires: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "available": self.available,
            "priority": self.priority,
            "supportedCarriers": list(self.supported_carriers),
            "requires": list(self.requires),
        }


@dataclass(frozen=True)
class ProviderAttempt:
    """Record of a single failed provider attempt during fallback."""
    source: str
    error: str


@dataclass
class BatchItem:
    """Outcome for one tracking number inside a batch."""
    tracking_number: str
    result: TrackingResult

    def to_dict(self) -> Dict[str, Any]:
        return {"trackingNumber": self.tracking_number, "result": self.result.to_dict()}


@dataclass
class BatchReport:
    """Settled outcomes of a batch refresh."""
    items: List[BatchItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.result.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": [item.to_dict() for item in self.items],
        }
