"""
CargoTrack Application - Single entry point for shipment tracking.

Usage:
    from cargotrack import CargoTrack

    app = CargoTrack("config.yaml")
    result = await app.track("MAEU1234567")

    # Without a config file, settings come from environment variables
    app = CargoTrack()
    print(app.provider_status())
"""

import logging
from typing import List, Optional, Sequence

import httpx

from .config import PROVIDER_GOCOMET, TrackingSettings
from .errors import InvalidTrackingQuery, ProviderConfigurationError
from .models import BatchItem, BatchReport, ProviderStatus, TrackingQuery, TrackingResult
from .notifications import LoggingResultListener, WebhookResultListener
from .providers.shipment import MultiProviderTracker, ProviderRegistry
from .providers.shipment.aggregator import MULTI_PROVIDER_SOURCE
from .providers.shipment.carrier_detector import TrackingNumberInfo, detect_tracking_info
from .providers.shipment.gocomet import GocometTrackingProvider

logger = logging.getLogger(__name__)


class CargoTrack:
    """
    CargoTrack application entry point.

    Built once at process start. Holds the settings, the provider registry
    and the fallback tracker; none of them keep per-request state.

    Args:
        config_path: Optional path to a YAML configuration file. When the
            file is missing, settings are read from environment variables.
        settings: Pre-built settings (takes precedence over config_path).
        transport: Optional httpx transport shared by network providers.

    Example:
        app = CargoTrack("config.yaml")
        result = await app.track("MSCU9876543", carrier_hint="msc")
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        settings: Optional[TrackingSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or TrackingSettings.load(config_path)
        self.registry = ProviderRegistry(self.settings, transport=transport)
        self.tracker = MultiProviderTracker(self.registry, listeners=self._build_listeners())

        available = [s.name for s in self.registry.status() if s.available]
        logger.info(f"CargoTrack ready: {len(available)} provider(s) configured ({', '.join(available) or 'none'})")

    def _build_listeners(self) -> list:
        listeners = [LoggingResultListener()]
        notify = self.settings.notifications
        if notify.webhook_url:
            listeners.append(WebhookResultListener(
                notify.webhook_url,
                token=notify.webhook_token,
                only_success=notify.only_success,
            ))
        return listeners

    async def track(
        self,
        tracking_number: Optional[str],
        preferred_provider: Optional[str] = None,
        carrier_hint: Optional[str] = None,
        shipment_type: Optional[str] = None,
        gocomet_token: Optional[str] = None,
    ) -> TrackingResult:
        """Track one shipment. Raises InvalidTrackingQuery for a blank number."""
        query = TrackingQuery.create(
            tracking_number,
            preferred_provider=preferred_provider,
            carrier_hint=carrier_hint,
            shipment_type=shipment_type,
            gocomet_token=gocomet_token,
        )
        return await self.tracker.track(query)

    async def track_many(
        self,
        tracking_numbers: Sequence[str],
        shipment_type: Optional[str] = None,
    ) -> BatchReport:
        """
        Track many shipments concurrently.

        Numbers that fail validation are recorded as failed items in place;
        the rest of the batch is still tracked.
        """
        slots: List[Optional[BatchItem]] = []
        queries = []
        for tn in tracking_numbers:
            try:
                queries.append(TrackingQuery.create(tn, shipment_type=shipment_type))
                slots.append(None)
            except InvalidTrackingQuery as e:
                logger.warning(f"Skipping batch entry {tn!r}: {e}")
                slots.append(BatchItem(
                    tn.strip() if isinstance(tn, str) else str(tn),
                    TrackingResult.fail(str(e), source=MULTI_PROVIDER_SOURCE),
                ))

        report = await self.tracker.track_many(queries, concurrency=self.settings.batch_concurrency)
        tracked = iter(report.items)
        return BatchReport(items=[item or next(tracked) for item in slots])

    def detect(self, tracking_number: Optional[str]) -> TrackingNumberInfo:
        """Classify a number (container, bl, awb, booking) without calling any provider."""
        query = TrackingQuery.create(tracking_number)
        return detect_tracking_info(query.tracking_number)

    def provider_status(self, query: Optional[TrackingQuery] = None) -> List[ProviderStatus]:
        return self.registry.status(query)

    async def gocomet_token(self, email: Optional[str] = None, password: Optional[str] = None) -> str:
        """Exchange GoComet credentials for a live-tracking token."""
        provider = self.registry.get(PROVIDER_GOCOMET)
        if not isinstance(provider, GocometTrackingProvider):
            raise ProviderConfigurationError(PROVIDER_GOCOMET, "provider registration")
        return await provider.authenticate(email, password)
