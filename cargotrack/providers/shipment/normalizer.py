"""
Normalization helpers shared by provider adapters.

Each adapter owns the mapping of its own payload; the helpers here enforce the
common rules:
- the event timestamp comes from the actual time, then the planned time, then
  the caller-supplied reference time, so it is always populated
- display date/time strings degrade to "Invalid Date" instead of raising
- unknown event subtypes become EventType.EVENT
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dateutil import parser as date_parser

from ...models import INVALID_DATE, EventType, TimelineEntry, TrackingEvent

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"

# Fills components missing from partial values so parsing never depends on today.
_PARSE_DEFAULT = datetime(1970, 1, 1)

# Checked in order; the first keyword found in the lower-cased subtype wins.
_EVENT_KEYWORDS: Tuple[Tuple[Tuple[str, ...], EventType], ...] = (
    (("customs cleared", "customs released", "cleared customs"), EventType.CUSTOMS_CLEARED),
    (("departure", "departed"), EventType.VESSEL_DEPARTURE),
    (("arrival", "arrived"), EventType.VESSEL_ARRIVAL),
    (("gate",), EventType.GATE),
    (("unload", "discharg"), EventType.EVENT),
    (("load",), EventType.LOAD),
    (("received",), EventType.CARGO_RECEIVED),
)
_EVENT_TYPE_VALUES = frozenset(t.value for t in EventType)


def parse_datetime(value: Any, dayfirst: bool = False) -> Optional[datetime]:
    """
    Parse a provider date/time value into an aware UTC datetime.

    Naive values are assumed to be UTC. Returns None for empty or
    unparsable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.parse(str(value), dayfirst=dayfirst, default=_PARSE_DEFAULT)
        except (ValueError, OverflowError):
            logger.debug(f"Unparsable date value: {value!r}")
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # Offset pushes the value outside datetime's year range
        logger.debug(f"Date value out of range: {value!r}")
        return None


def to_iso(value: datetime) -> str:
    """Format an aware datetime as an ISO-8601 UTC string."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def iso_or_none(value: Any, dayfirst: bool = False) -> Optional[str]:
    parsed = parse_datetime(value, dayfirst=dayfirst)
    return to_iso(parsed) if parsed else None


def display_date(value: Any, dayfirst: bool = False) -> str:
    parsed = parse_datetime(value, dayfirst=dayfirst)
    return parsed.strftime("%Y-%m-%d") if parsed else INVALID_DATE


def display_time(value: Any, dayfirst: bool = False) -> str:
    parsed = parse_datetime(value, dayfirst=dayfirst)
    return parsed.strftime("%H:%M") if parsed else INVALID_DATE


def map_event_type(name: Optional[str]) -> EventType:
    """Map a provider event name or code to an EventType."""
    if not name:
        return EventType.EVENT
    lowered = str(name).strip().lower()
    if lowered in _EVENT_TYPE_VALUES:
        return EventType(lowered)
    for keywords, event_type in _EVENT_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return event_type
    return EventType.EVENT


def build_event(
    status: str,
    location: Optional[str],
    reference_time: datetime,
    actual: Any = None,
    planned: Any = None,
    event_type: Optional[EventType] = None,
    type_hint: Optional[str] = None,
    dayfirst: bool = False,
    **extra: Any,
) -> TrackingEvent:
    """
    Build a TrackingEvent from raw actual/planned values.

    Args:
        status: Human readable status text
        location: Event location (defaults to "Unknown Location")
        reference_time: Explicit fallback when neither time is parsable
        actual: Raw actual date/time value
        planned: Raw planned/estimated date/time value
        event_type: Pre-mapped type; otherwise derived from type_hint
        type_hint: Provider subtype used for keyword mapping
        dayfirst: Parse ambiguous dates as DD/MM/YYYY
        **extra: Optional TrackingEvent fields (vessel, voyage, description, ...)
    """
    actual_dt = parse_datetime(actual, dayfirst=dayfirst)
    planned_dt = parse_datetime(planned, dayfirst=dayfirst)
    timestamp = actual_dt or planned_dt or reference_time

    # Display strings follow the most authoritative raw field that is present,
    # even when it fails to parse.
    display_source = actual if actual not in (None, "") else planned
    if display_source in (None, ""):
        display_source = timestamp

    fields = {k: v for k, v in extra.items() if v not in (None, "")}

    return TrackingEvent(
        type=event_type or map_event_type(type_hint or status),
        status=status or "Unknown",
        location=location or UNKNOWN_LOCATION,
        timestamp=to_iso(timestamp),
        date=display_date(display_source, dayfirst=dayfirst),
        time=display_time(display_source, dayfirst=dayfirst),
        planned_at=to_iso(planned_dt) if planned_dt else None,
        actual_at=to_iso(actual_dt) if actual_dt else None,
        **fields,
    )


def group_timeline(
    events: Iterable[Tuple[TrackingEvent, Optional[str]]],
) -> Tuple[TimelineEntry, ...]:
    """
    Group events by location, keeping first-seen location order.

    Args:
        events: (event, terminal) pairs in provider order

    Returns:
        Timeline entries; events keep provider order within a location
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for event, terminal in events:
        entry = grouped.setdefault(event.location, {"terminal": None, "events": []})
        if terminal and not entry["terminal"]:
            entry["terminal"] = terminal
        entry["events"].append(event)

    return tuple(
        TimelineEntry(location=location, terminal=entry["terminal"], events=tuple(entry["events"]))
        for location, entry in grouped.items()
    )


def first_present(*values: Any) -> Optional[Any]:
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value not in (None, ""):
            return value
    return None


def latest_event(events: List[TrackingEvent]) -> Optional[TrackingEvent]:
    """Most recent event that actually happened, by canonical timestamp."""
    actual = [e for e in events if e.actual_at]
    if not actual:
        return None
    return max(actual, key=lambda e: e.timestamp)
