"""Tests for the offline mock provider"""

import pytest

from cargotrack.config import ProviderSettings
from cargotrack.errors import ProviderConfigurationError
from cargotrack.models import EventType, TrackingQuery
from cargotrack.providers.shipment.mock import MOCK_SHIPMENTS, MockTrackingProvider, normalize_mock_record


@pytest.fixture
def provider():
    return MockTrackingProvider()


class TestMockProvider:

    @pytest.mark.asyncio
    async def test_known_number(self, provider):
        result = await provider.attempt(TrackingQuery.create("MAEU1234567"))
        assert result.success is True
        assert result.source == "mock"
        assert result.is_live_data is False
        assert result.data.carrier == "Maersk"
        assert result.data.status == "In Transit"

    @pytest.mark.asyncio
    async def test_lookup_uses_normalized_number(self, provider):
        result = await provider.attempt(TrackingQuery.create("mscu-987 6543"))
        assert result.success is True
        assert result.data.shipment_number == "MSCU9876543"

    @pytest.mark.asyncio
    async def test_unknown_number_fails(self, provider):
        result = await provider.attempt(TrackingQuery.create("UNKNOWN000"))
        assert result.success is False
        assert result.source == "mock"
        assert result.error

    @pytest.mark.asyncio
    async def test_disabled_raises(self):
        provider = MockTrackingProvider(ProviderSettings(enabled=False))
        assert provider.is_available() is False
        with pytest.raises(ProviderConfigurationError):
            await provider.attempt(TrackingQuery.create("MAEU1234567"))

    @pytest.mark.asyncio
    async def test_custom_dataset(self):
        provider = MockTrackingProvider(dataset={"ABC1": {"status": "Delivered", "events": []}})
        result = await provider.attempt(TrackingQuery.create("abc1"))
        assert result.data.status == "Delivered"
        assert result.data.timeline == ()


class TestNormalizeMockRecord:

    def test_timeline_grouped_by_location(self):
        data = normalize_mock_record("MAEU1234567", MOCK_SHIPMENTS["MAEU1234567"])
        locations = [t.location for t in data.timeline]
        assert locations[0] == "Shanghai, China"
        assert locations[-1] == "Rotterdam, Netherlands"
        assert data.timeline[0].terminal == "Yangshan Port"

    def test_planned_arrival(self):
        data = normalize_mock_record("MAEU1234567", MOCK_SHIPMENTS["MAEU1234567"])
        arrival = data.timeline[-1].events[-1]
        assert arrival.type == EventType.VESSEL_ARRIVAL
        assert arrival.actual_at is None
        assert arrival.timestamp == "2025-08-15T06:00:00Z"

    def test_unmapped_types_become_event(self):
        data = normalize_mock_record("MOCKTRACK123", MOCK_SHIPMENTS["MOCKTRACK123"])
        types = [e.type for e in data.iter_events()]
        assert types[0] == EventType.EVENT
        assert EventType.GATE in types

    def test_every_record_normalizes(self):
        for number, record in MOCK_SHIPMENTS.items():
            data = normalize_mock_record(number, record)
            assert data.shipment_number == number
            assert all(e.timestamp for e in data.iter_events())

    def test_deterministic(self):
        record = MOCK_SHIPMENTS["MSCU9876543"]
        assert normalize_mock_record("MSCU9876543", record) == normalize_mock_record("MSCU9876543", record)
