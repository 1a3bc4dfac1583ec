"""Tests for the Maersk adapter and the shared HTTP error mapping"""

from datetime import datetime, timezone

import httpx
import pytest

from conftest import json_transport

from cargotrack.config import ProviderSettings
from cargotrack.errors import ProviderConfigurationError
from cargotrack.models import EventType, ShipmentType, TrackingQuery
from cargotrack.providers.shipment.base import get_user_friendly_error
from cargotrack.providers.shipment.maersk import MaerskTrackingProvider, normalize_maersk_events

REF = datetime(2025, 9, 1, tzinfo=timezone.utc)

EVENTS = [
    {
        "eventType": "EQUIPMENT",
        "equipmentEventTypeCode": "LOAD",
        "eventClassifierCode": "ACT",
        "eventDateTime": "2025-07-20T08:00:00Z",
        "equipmentReference": "MAEU1234567",
        "ISOEquipmentCode": "45G1",
        "transportCall": {
            "facilityCode": "CNSHA-YS",
            "location": {"locationName": "Shanghai", "UNLocationCode": "CNSHA"},
            "exportVoyageNumber": "V123",
            "vessel": {"vesselName": "Maersk Triple E"},
        },
    },
    {
        "eventType": "TRANSPORT",
        "transportEventTypeCode": "DEPA",
        "eventClassifierCode": "ACT",
        "eventDateTime": "2025-07-20T14:30:00Z",
        "transportCall": {
            "location": {"locationName": "Shanghai"},
            "exportVoyageNumber": "V123",
            "vessel": {"vesselName": "Maersk Triple E"},
        },
    },
    {
        "eventType": "TRANSPORT",
        "transportEventTypeCode": "ARRI",
        "eventClassifierCode": "PLN",
        "eventDateTime": "2025-08-16T06:00:00Z",
        "transportCall": {
            "location": {"locationName": "Rotterdam"},
            "exportVoyageNumber": "V123",
            "vessel": {"vesselName": "Maersk Triple E"},
        },
    },
    {
        "eventType": "TRANSPORT",
        "transportEventTypeCode": "ARRI",
        "eventClassifierCode": "EST",
        "eventDateTime": "2025-08-15T06:00:00Z",
        "transportCall": {
            "location": {"locationName": "Rotterdam"},
            "exportVoyageNumber": "V123",
            "vessel": {"vesselName": "Maersk Triple E"},
        },
    },
]


def _provider(transport=None, api_key="mk-test"):
    return MaerskTrackingProvider(ProviderSettings(api_key=api_key), timeout=5, transport=transport)


# =========================================================================
# Normalization
# =========================================================================


class TestNormalizeMaerskEvents:

    def test_folds_planned_and_estimated(self):
        data = normalize_maersk_events("MAEU1234567", {"events": EVENTS}, REF)
        rotterdam = [t for t in data.timeline if t.location == "Rotterdam"][0]
        assert len(rotterdam.events) == 1
        arrival = rotterdam.events[0]
        assert arrival.type == EventType.VESSEL_ARRIVAL
        assert arrival.planned_at == "2025-08-15T06:00:00Z"
        assert arrival.actual_at is None

    def test_summary_fields(self):
        data = normalize_maersk_events("MAEU1234567", EVENTS, REF)
        assert data.carrier == "Maersk"
        assert data.container_number == "MAEU1234567"
        assert data.container_type == "45G1"
        assert data.status == "Vessel Departure"
        assert data.origin == "Shanghai"
        assert data.destination == "Rotterdam"
        assert data.etd == "2025-07-20T14:30:00Z"
        assert data.eta == "2025-08-15T06:00:00Z"
        assert data.last_location == "Shanghai"
        assert data.timeline[0].terminal == "CNSHA-YS"

    def test_unknown_code_kept_as_event(self):
        raw = [{"equipmentEventTypeCode": "INSP", "eventClassifierCode": "ACT",
                "eventDateTime": "2025-07-01T00:00:00Z", "description": "Inspection"}]
        data = normalize_maersk_events("X", raw, REF)
        event = data.timeline[0].events[0]
        assert event.type == EventType.EVENT
        assert event.status == "Inspection"

    def test_no_events(self):
        assert normalize_maersk_events("X", {"events": []}, REF) is None
        assert normalize_maersk_events("X", [], REF) is None


# =========================================================================
# Provider
# =========================================================================


class TestMaerskProvider:

    def test_availability(self):
        assert _provider().is_available() is True
        assert _provider(api_key=None).is_available() is False

    def test_supports_only_maersk_ocean(self):
        provider = _provider()
        assert provider.supports(TrackingQuery.create("MAEU1234567"), "maersk") is True
        assert provider.supports(TrackingQuery.create("MSCU9876543"), "msc") is False
        assert provider.supports(TrackingQuery.create("X1", shipment_type="air")) is False
        assert provider.supports(TrackingQuery.create("X1")) is True

    @pytest.mark.asyncio
    async def test_unconfigured_attempt_raises(self):
        with pytest.raises(ProviderConfigurationError, match="MAERSK_API_KEY"):
            await _provider(api_key=None).attempt(TrackingQuery.create("MAEU1234567"))

    @pytest.mark.asyncio
    async def test_container_request(self):
        seen = []
        provider = _provider(json_transport({"events": EVENTS}, seen=seen))
        result = await provider.attempt(TrackingQuery.create("MAEU1234567"))

        assert result.success is True
        assert result.source == "maersk"
        assert result.is_live_data is True
        assert result.scraped_at.endswith("Z")
        assert len(seen) == 1
        request = seen[0]
        assert request.url.path.endswith("/events")
        assert request.url.params["equipmentReference"] == "MAEU1234567"
        assert request.headers["Consumer-Key"] == "mk-test"

    @pytest.mark.asyncio
    async def test_bill_of_lading_request(self):
        seen = []
        provider = _provider(json_transport({"events": EVENTS}, seen=seen))
        await provider.attempt(TrackingQuery.create("221234567", shipment_type=ShipmentType.OCEAN.value))
        assert seen[0].url.params["transportDocumentReference"] == "221234567"

    @pytest.mark.asyncio
    async def test_empty_events_fail(self):
        result = await _provider(json_transport({"events": []})).attempt(TrackingQuery.create("MAEU1234567"))
        assert result.success is False
        assert result.source == "maersk"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,expected", [
        (401, get_user_friendly_error("http_error", 401)),
        (404, "No tracking information found for this number."),
        (429, get_user_friendly_error("http_error", 429)),
        (503, get_user_friendly_error("http_error", 503)),
    ])
    async def test_http_errors_become_failures(self, status, expected):
        provider = _provider(json_transport({"error": "x"}, status_code=status))
        result = await provider.attempt(TrackingQuery.create("MAEU1234567"))
        assert result.success is False
        assert result.error == expected

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        result = await _provider(httpx.MockTransport(handler)).attempt(TrackingQuery.create("MAEU1234567"))
        assert result.success is False
        assert result.error == get_user_friendly_error("timeout")

    @pytest.mark.asyncio
    async def test_connection_error_becomes_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = await _provider(httpx.MockTransport(handler)).attempt(TrackingQuery.create("MAEU1234567"))
        assert result.error == get_user_friendly_error("connection_error")

    @pytest.mark.asyncio
    async def test_invalid_json_becomes_failure(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        result = await _provider(transport).attempt(TrackingQuery.create("MAEU1234567"))
        assert result.success is False
        assert result.error.startswith("Failed to parse tracking data")


class TestUserFriendlyError:

    def test_other_status(self):
        assert get_user_friendly_error("http_error", 418) == "Tracking service returned an error (418)."

    def test_unknown_type(self):
        assert get_user_friendly_error("weird") == "Something went wrong. Please try again later."
