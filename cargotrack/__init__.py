"""
CargoTrack - Multi-provider shipment tracking

CargoTrack looks up a container, bill of lading or air waybill across several
tracking sources (carrier APIs, multi-carrier services and an offline
dataset), tries them in priority order and returns the first result,
normalized into one tracking model.

Quick Start:
    from cargotrack import CargoTrack

    app = CargoTrack("config.yaml")
    result = await app.track("MAEU1234567")
    if result.success:
        print(result.data.status, result.source)
    else:
        print(result.error, result.fallback_options)

Server:
    cargotrack-server --port 8000
"""

from .app import CargoTrack
from .config import ProviderSettings, TrackingSettings, load_config
from .errors import (
    CargoTrackError,
    InvalidTrackingQuery,
    ProviderAuthenticationError,
    ProviderConfigurationError,
)
from .models import (
    BatchReport,
    EventType,
    ProviderStatus,
    ShipmentType,
    TimelineEntry,
    TrackingData,
    TrackingEvent,
    TrackingQuery,
    TrackingResult,
)

__version__ = "0.1.0"

__all__ = [
    "CargoTrack",
    "TrackingSettings",
    "ProviderSettings",
    "load_config",
    "CargoTrackError",
    "InvalidTrackingQuery",
    "ProviderConfigurationError",
    "ProviderAuthenticationError",
    "TrackingQuery",
    "TrackingResult",
    "TrackingData",
    "TrackingEvent",
    "TimelineEntry",
    "EventType",
    "ShipmentType",
    "ProviderStatus",
    "BatchReport",
]
