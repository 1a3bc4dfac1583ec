"""
Shipment providers - Tracking adapters, carrier detection, fallback chain
"""

from .aggregator import MultiProviderTracker
from .base import BaseTrackingProvider, HttpTrackingProvider
from .carrier_detector import TrackingNumberInfo, detect_carrier, detect_tracking_info, is_container_number
from .gocomet import GocometTrackingProvider
from .maersk import MaerskTrackingProvider
from .mock import MockTrackingProvider
from .registry import ProviderRegistry
from .searates import SeaRatesTrackingProvider
from .track17 import Track17TrackingProvider
from .trackship import TrackShipTrackingProvider

__all__ = [
    "BaseTrackingProvider",
    "HttpTrackingProvider",
    "MultiProviderTracker",
    "ProviderRegistry",
    "MockTrackingProvider",
    "MaerskTrackingProvider",
    "GocometTrackingProvider",
    "SeaRatesTrackingProvider",
    "TrackShipTrackingProvider",
    "Track17TrackingProvider",
    "TrackingNumberInfo",
    "detect_carrier",
    "detect_tracking_info",
    "is_container_number",
]
