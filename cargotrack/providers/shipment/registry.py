"""
Provider Registry - Builds tracking providers from settings and reports
which of them are configured.
"""

import logging
from typing import Dict, List, Optional

import httpx

from ...config import (
    DEFAULT_PROVIDER_ORDER,
    PROVIDER_GOCOMET,
    PROVIDER_MAERSK,
    PROVIDER_MOCK,
    PROVIDER_SEARATES,
    PROVIDER_TRACK17,
    PROVIDER_TRACKSHIP,
    TrackingSettings,
)
from ...models import ProviderStatus, TrackingQuery
from .base import BaseTrackingProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Ordered collection of tracking providers.

    Every known provider is constructed, configured or not, so status()
    can report the unconfigured ones. Priority follows ``settings.order``;
    known providers missing from the order are appended after it.

    Example:
        registry = ProviderRegistry(TrackingSettings.from_env())
        for status in registry.status():
            print(status.name, status.available)
    """

    def __init__(
        self,
        settings: Optional[TrackingSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        providers: Optional[List[BaseTrackingProvider]] = None,
    ):
        self.settings = settings or TrackingSettings()
        if providers is None:
            providers = [
                self.create_provider(name, self.settings, transport)
                for name in DEFAULT_PROVIDER_ORDER
            ]
        self._providers: Dict[str, BaseTrackingProvider] = {p.name.lower(): p for p in providers}
        self._order = self._resolve_order(self.settings.order)

    def _resolve_order(self, order) -> List[str]:
        resolved = []
        for name in order:
            key = name.lower()
            if key not in self._providers:
                logger.warning(f"Ignoring unknown provider in order: {name}")
                continue
            if key not in resolved:
                resolved.append(key)
        for key in self._providers:
            if key not in resolved:
                resolved.append(key)
        return resolved

    @staticmethod
    def create_provider(
        name: str,
        settings: TrackingSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> BaseTrackingProvider:
        """
        Create a provider instance.

        Args:
            name: Provider name ("mock", "maersk", "gocomet", "searates", "trackship", "17track")
            settings: Tracking settings holding the provider's credentials
            transport: Optional httpx transport for the network providers

        Returns:
            Provider instance

        Raises:
            ValueError: Unknown provider name
        """
        name = name.lower()
        provider_settings = settings.provider(name)
        timeout = settings.timeout_for(name)

        if name == PROVIDER_MOCK:
            from .mock import MockTrackingProvider
            return MockTrackingProvider(provider_settings)

        elif name == PROVIDER_MAERSK:
            from .maersk import MaerskTrackingProvider
            return MaerskTrackingProvider(provider_settings, timeout=timeout, transport=transport)

        elif name == PROVIDER_GOCOMET:
            from .gocomet import GocometTrackingProvider
            return GocometTrackingProvider(provider_settings, timeout=timeout, transport=transport)

        elif name == PROVIDER_SEARATES:
            from .searates import SeaRatesTrackingProvider
            return SeaRatesTrackingProvider(provider_settings, timeout=timeout, transport=transport)

        elif name == PROVIDER_TRACKSHIP:
            from .trackship import TrackShipTrackingProvider
            return TrackShipTrackingProvider(provider_settings, timeout=timeout, transport=transport)

        elif name == PROVIDER_TRACK17:
            from .track17 import Track17TrackingProvider
            return Track17TrackingProvider(provider_settings, timeout=timeout, transport=transport)

        raise ValueError(f"Unknown tracking provider: {name}")

    def get(self, name: Optional[str]) -> Optional[BaseTrackingProvider]:
        if not name:
            return None
        return self._providers.get(name.strip().lower())

    def names(self) -> List[str]:
        return [self._providers[key].name for key in self._order]

    def ordered(self) -> List[BaseTrackingProvider]:
        return [self._providers[key] for key in self._order]

    def status(self, query: Optional[TrackingQuery] = None) -> List[ProviderStatus]:
        """Availability of every provider, from configuration only (no I/O)."""
        return [
            ProviderStatus(
                name=provider.name,
                available=provider.is_available(query),
                priority=index + 1,
                supported_carriers=tuple(provider.supported_carriers),
                requires=tuple(provider.requires),
            )
            for index, provider in enumerate(self.ordered())
        ]
