"""
CargoTrack Providers - Shipment tracking sources

Providers receive their settings directly. They hold no connections between
calls; each attempt opens its own HTTP client.
"""

from .shipment import MultiProviderTracker, ProviderRegistry

__all__ = [
    "MultiProviderTracker",
    "ProviderRegistry",
]
