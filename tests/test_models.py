"""Tests for cargotrack.models: query validation and JSON rendering"""

import pytest

from cargotrack.errors import InvalidTrackingQuery
from cargotrack.models import (
    BatchItem,
    BatchReport,
    EventType,
    ProviderStatus,
    ShipmentType,
    TimelineEntry,
    TrackingData,
    TrackingEvent,
    TrackingQuery,
    TrackingResult,
    normalize_tracking_number,
)


# =========================================================================
# TrackingQuery
# =========================================================================


class TestTrackingQuery:

    def test_normalizes_number(self):
        query = TrackingQuery.create("  maeu-123 4567 ")
        assert query.tracking_number == "MAEU1234567"

    def test_dots_removed(self):
        assert normalize_tracking_number("msc.u.987") == "MSCU987"

    @pytest.mark.parametrize("value", [None, "", "   ", "- . -"])
    def test_blank_number_rejected(self, value):
        with pytest.raises(InvalidTrackingQuery):
            TrackingQuery.create(value)

    def test_invalid_query_is_value_error(self):
        with pytest.raises(ValueError):
            TrackingQuery.create("")

    def test_non_string_rejected(self):
        with pytest.raises(InvalidTrackingQuery):
            TrackingQuery.create(12345)

    def test_carrier_hint_lowercased(self):
        query = TrackingQuery.create("X1", carrier_hint=" Maersk ")
        assert query.carrier_hint == "maersk"

    def test_shipment_type_parsed(self):
        assert TrackingQuery.create("X1", shipment_type="OCEAN").shipment_type == ShipmentType.OCEAN
        assert TrackingQuery.create("X1", shipment_type="lcl").shipment_type == ShipmentType.LCL

    def test_unknown_shipment_type(self):
        assert TrackingQuery.create("X1", shipment_type="rail").shipment_type == ShipmentType.UNKNOWN
        assert TrackingQuery.create("X1").shipment_type == ShipmentType.UNKNOWN

    def test_empty_optional_fields_become_none(self):
        query = TrackingQuery.create("X1", preferred_provider="  ", carrier_hint="", gocomet_token="")
        assert query.preferred_provider is None
        assert query.carrier_hint is None
        assert query.gocomet_token is None

    def test_query_is_immutable(self):
        query = TrackingQuery.create("X1")
        with pytest.raises(AttributeError):
            query.tracking_number = "X2"


# =========================================================================
# to_dict rendering
# =========================================================================


def _event(**overrides):
    values = dict(
        type=EventType.LOAD,
        status="Loaded",
        location="Busan",
        timestamp="2025-07-08T09:00:00Z",
        date="2025-07-08",
        time="09:00",
    )
    values.update(overrides)
    return TrackingEvent(**values)


class TestToDict:

    def test_event_omits_absent_fields(self):
        d = _event().to_dict()
        assert d["type"] == "load"
        assert "vessel" not in d
        assert "plannedAt" not in d
        assert "actualAt" not in d

    def test_event_camel_case_times(self):
        d = _event(planned_at="2025-07-08T00:00:00Z", actual_at="2025-07-08T09:00:00Z").to_dict()
        assert d["plannedAt"] == "2025-07-08T00:00:00Z"
        assert d["actualAt"] == "2025-07-08T09:00:00Z"

    def test_data_always_has_timeline(self):
        d = TrackingData(shipment_number="X1", status="Unknown").to_dict()
        assert d == {"shipmentNumber": "X1", "status": "Unknown", "timeline": []}

    def test_timeline_entry_always_has_events(self):
        d = TimelineEntry(location="Busan").to_dict()
        assert d == {"location": "Busan", "events": []}

    def test_data_renders_nested_timeline(self):
        data = TrackingData(
            shipment_number="X1",
            status="Loaded",
            pol="KRPUS",
            timeline=(TimelineEntry(location="Busan", terminal="PNC", events=(_event(),)),),
        )
        d = data.to_dict()
        assert d["pol"] == "KRPUS"
        assert d["timeline"][0]["terminal"] == "PNC"
        assert d["timeline"][0]["events"][0]["status"] == "Loaded"

    def test_iter_events_flattens_timeline(self):
        data = TrackingData(
            shipment_number="X1",
            status="Loaded",
            timeline=(
                TimelineEntry(location="A", events=(_event(location="A"),)),
                TimelineEntry(location="B", events=(_event(location="B"), _event(location="B"))),
            ),
        )
        assert [e.location for e in data.iter_events()] == ["A", "B", "B"]


class TestTrackingResult:

    def test_success_shape(self):
        result = TrackingResult.ok(
            TrackingData(shipment_number="X1", status="Delivered"),
            source="maersk",
            scraped_at="2025-01-01T00:00:00Z",
        )
        d = result.to_dict()
        assert d["success"] is True
        assert d["source"] == "maersk"
        assert d["isLiveData"] is True
        assert d["scrapedAt"] == "2025-01-01T00:00:00Z"
        assert d["data"]["status"] == "Delivered"
        assert "error" not in d

    def test_failure_shape(self):
        d = TrackingResult.fail("not found", source="searates").to_dict()
        assert d == {"success": False, "error": "not found", "source": "searates", "isLiveData": False}

    def test_failure_with_fallback_options(self):
        result = TrackingResult.fail("none", source="Multi-Provider", fallback_options=["maersk", "gocomet"])
        assert result.fallback_options == ("maersk", "gocomet")
        assert result.to_dict()["fallbackOptions"] == ["maersk", "gocomet"]

    def test_empty_fallback_options_kept(self):
        d = TrackingResult.fail("none", source="Multi-Provider", fallback_options=[]).to_dict()
        assert d["fallbackOptions"] == []


class TestStatusAndBatch:

    def test_provider_status_dict(self):
        status = ProviderStatus(
            name="maersk", available=False, priority=2,
            supported_carriers=("maersk",), requires=("MAERSK_API_KEY",),
        )
        assert status.to_dict() == {
            "name": "maersk",
            "available": False,
            "priority": 2,
            "supportedCarriers": ["maersk"],
            "requires": ["MAERSK_API_KEY"],
        }

    def test_batch_counts(self):
        ok = TrackingResult.ok(TrackingData(shipment_number="A", status="x"), source="mock")
        bad = TrackingResult.fail("nope", source="Multi-Provider")
        report = BatchReport(items=[BatchItem("A", ok), BatchItem("B", bad), BatchItem("C", ok)])
        assert (report.total, report.succeeded, report.failed) == (3, 2, 1)
        d = report.to_dict()
        assert d["results"][1] == {"trackingNumber": "B", "result": bad.to_dict()}
