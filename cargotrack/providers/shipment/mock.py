"""
Offline tracking provider backed by a fixed in-memory dataset.

Used for demos and tests; it makes no network calls and reports its results
as non-live data.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ...config import PROVIDER_MOCK, ProviderSettings
from ...errors import ProviderConfigurationError
from ...models import TrackingData, TrackingQuery, TrackingResult
from .base import BaseTrackingProvider
from .normalizer import build_event, group_timeline

logger = logging.getLogger(__name__)

# Dataset records use the same raw shape as the live adapters: events carry
# their own actual timestamp and the location they belong to.
MOCK_SHIPMENTS: Dict[str, Dict[str, Any]] = {
    "MAEU1234567": {
        "status": "In Transit",
        "carrier": "Maersk",
        "container_number": "MAEU1234567",
        "container_type": "40' HC",
        "origin": "Shanghai, China",
        "destination": "Rotterdam, Netherlands",
        "pol": "CNSHA",
        "pod": "NLRTM",
        "eta": "2025-08-15T06:00:00Z",
        "etd": "2025-07-20T14:30:00Z",
        "last_location": "Suez Canal",
        "events": [
            {
                "location": "Shanghai, China",
                "terminal": "Yangshan Port",
                "at": "2025-07-18T10:00:00Z",
                "status": "Cargo Received",
                "type": "cargo-received",
                "description": "Cargo received at origin terminal",
                "weight": "20,000 kg",
            },
            {
                "location": "Shanghai, China",
                "at": "2025-07-20T14:30:00Z",
                "status": "Departed",
                "type": "vessel-departure",
                "description": "Vessel departed from Shanghai",
                "vessel": "Maersk Triple E",
                "voyage": "V123",
            },
            {
                "location": "Suez Canal",
                "at": "2025-08-05T08:00:00Z",
                "status": "In Transit",
                "type": "event",
                "description": "Passed through Suez Canal",
            },
            {
                "location": "Rotterdam, Netherlands",
                "terminal": "APM Terminals Maasvlakte II",
                "planned": "2025-08-15T06:00:00Z",
                "status": "Arrival",
                "type": "vessel-arrival",
                "description": "Vessel expected at destination port",
                "vessel": "Maersk Triple E",
                "voyage": "V123",
            },
        ],
    },
    "MSCU9876543": {
        "status": "Customs Cleared",
        "carrier": "MSC",
        "container_number": "MSCU9876543",
        "container_type": "20' GP",
        "origin": "Busan, South Korea",
        "destination": "Los Angeles, USA",
        "pol": "KRPUS",
        "pod": "USLAX",
        "eta": "2025-08-10T00:00:00Z",
        "etd": "2025-07-10T11:00:00Z",
        "last_location": "Los Angeles, USA",
        "events": [
            {
                "location": "Busan, South Korea",
                "at": "2025-07-08T09:00:00Z",
                "status": "Loaded",
                "type": "load",
                "description": "Container loaded onto vessel",
                "pieces": 15,
            },
            {
                "location": "Busan, South Korea",
                "at": "2025-07-10T11:00:00Z",
                "status": "Departed",
                "type": "vessel-departure",
                "description": "Vessel departed from Busan",
                "vessel": "MSC GULSUN",
                "voyage": "001W",
            },
            {
                "location": "Los Angeles, USA",
                "at": "2025-08-08T16:00:00Z",
                "planned": "2025-08-10T00:00:00Z",
                "status": "Arrived",
                "type": "vessel-arrival",
                "description": "Vessel arrived at Los Angeles",
                "vessel": "MSC GULSUN",
                "voyage": "001W",
            },
            {
                "location": "Los Angeles, USA",
                "at": "2025-08-09T10:00:00Z",
                "status": "Customs Cleared",
                "type": "customs-cleared",
                "description": "Shipment cleared customs",
            },
        ],
    },
    "MOCKTRACK123": {
        "status": "Out for Delivery",
        "carrier": "Mock Courier",
        "origin": "New York, USA",
        "destination": "Boston, USA",
        "eta": "2025-07-25T18:00:00Z",
        "etd": "2025-07-24T09:00:00Z",
        "last_location": "Springfield, USA",
        "events": [
            {
                "location": "New York, USA",
                "at": "2025-07-24T09:00:00Z",
                "status": "Picked Up",
                "type": "pickup",
                "description": "Package picked up",
            },
            {
                "location": "New York, USA",
                "terminal": "JFK Gateway",
                "at": "2025-07-24T12:00:00Z",
                "status": "In Transit",
                "type": "gate",
                "description": "Departed from sorting facility",
            },
            {
                "location": "Springfield, USA",
                "at": "2025-07-25T08:30:00Z",
                "status": "Out for Delivery",
                "type": "out-for-delivery",
                "description": "Out for delivery",
            },
        ],
    },
}

# Records carry fixed dates, so the fallback time is never reached.
_REFERENCE_TIME = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_mock_record(tracking_number: str, record: Dict[str, Any]) -> TrackingData:
    events = []
    for raw in record.get("events", []):
        event = build_event(
            status=raw.get("status", ""),
            location=raw.get("location"),
            reference_time=_REFERENCE_TIME,
            actual=raw.get("at"),
            planned=raw.get("planned"),
            type_hint=raw.get("type"),
            description=raw.get("description"),
            vessel=raw.get("vessel"),
            voyage=raw.get("voyage"),
            pieces=raw.get("pieces"),
            weight=raw.get("weight"),
        )
        events.append((event, raw.get("terminal")))

    return TrackingData(
        shipment_number=tracking_number,
        status=record.get("status", "Unknown"),
        carrier=record.get("carrier"),
        container_number=record.get("container_number"),
        container_type=record.get("container_type"),
        origin=record.get("origin"),
        destination=record.get("destination"),
        pol=record.get("pol"),
        pod=record.get("pod"),
        eta=record.get("eta"),
        etd=record.get("etd"),
        last_location=record.get("last_location"),
        timeline=group_timeline(events),
    )


class MockTrackingProvider(BaseTrackingProvider):
    """Looks tracking numbers up in MOCK_SHIPMENTS (or a supplied dataset)."""

    name = PROVIDER_MOCK

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        dataset: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        super().__init__(settings)
        self.dataset = MOCK_SHIPMENTS if dataset is None else dataset

    def is_available(self, query: Optional[TrackingQuery] = None) -> bool:
        return self.settings.enabled

    async def attempt(self, query: TrackingQuery) -> TrackingResult:
        if not self.is_available(query):
            raise ProviderConfigurationError(self.name, "providers.mock.enabled")

        record = self.dataset.get(query.tracking_number.upper())
        if record is None:
            return self.fail("No mock tracking information found for this number.")

        logger.info(f"Mock dataset hit for {query.tracking_number}")
        return TrackingResult.ok(
            normalize_mock_record(query.tracking_number, record),
            source=self.name,
            is_live_data=False,
        )
