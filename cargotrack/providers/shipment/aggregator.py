"""
CargoTrack Multi-Provider Tracker - Ordered fallback across tracking providers

Tries providers one at a time in priority order and returns the first
successful result. Provider failures are collected as ProviderAttempt
records; when every candidate fails the caller gets a single synthesized
failure from "Multi-Provider".

Usage:
    registry = ProviderRegistry(TrackingSettings.from_env())
    tracker = MultiProviderTracker(registry)
    result = await tracker.track(TrackingQuery.create("MAEU1234567"))
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from ...errors import ProviderConfigurationError
from ...models import BatchItem, BatchReport, ProviderAttempt, ShipmentType, TrackingQuery, TrackingResult
from .base import BaseTrackingProvider
from .carrier_detector import detect_carrier, infer_shipment_type
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

MULTI_PROVIDER_SOURCE = "Multi-Provider"
EXHAUSTED_MESSAGE = "Unable to track shipment with any available provider"


class MultiProviderTracker:
    """
    Fallback chain over a ProviderRegistry.

    Features:
      - Preferred provider first (when known and configured), then the
        configured order. No provider is tried twice in one call.
      - Unconfigured providers are skipped without a call and reported in
        ``fallback_options``.
      - Providers that don't handle the carrier or shipment type are skipped.
      - Attempts are sequential; the first success is returned unchanged.
      - Result listeners are awaited after every result.

    Args:
        registry: Provider registry holding the adapters.
        order: Optional explicit order overriding the registry's.
        listeners: Objects with ``async on_result(query, result)``.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        order: Optional[Sequence[str]] = None,
        listeners: Optional[Iterable] = None,
    ) -> None:
        self.registry = registry
        self._order = [name.lower() for name in order] if order else None
        self.listeners = list(listeners or [])

    def add_listener(self, listener) -> None:
        self.listeners.append(listener)

    # ------------------------------------------------------------------
    # Candidate selection
    # ------------------------------------------------------------------

    def _ordered_providers(self) -> List[BaseTrackingProvider]:
        if self._order is None:
            return self.registry.ordered()
        providers = []
        for name in self._order:
            provider = self.registry.get(name)
            if provider is None:
                logger.warning(f"Ignoring unknown provider in order: {name}")
                continue
            if provider not in providers:
                providers.append(provider)
        return providers

    def candidates(self, query: TrackingQuery) -> List[BaseTrackingProvider]:
        """Providers in the order they would be considered for ``query``."""
        providers = self._ordered_providers()

        if query.preferred_provider:
            preferred = self.registry.get(query.preferred_provider)
            if preferred is None:
                logger.warning(f"Unknown preferred provider '{query.preferred_provider}', using default order")
            else:
                providers = [preferred] + [p for p in providers if p is not preferred]

        return providers

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def track(self, query: TrackingQuery) -> TrackingResult:
        """
        Track one shipment through the fallback chain.

        Returns:
            The first successful provider result, or a "Multi-Provider"
            failure listing each failed attempt and the unconfigured providers.

        Raises:
            ProviderConfigurationError: An adapter reported missing
                configuration after passing its availability check.
        """
        result = await self._run_chain(query)
        await self._notify(query, result)
        return result

    async def track_many(
        self,
        queries: Sequence[TrackingQuery],
        concurrency: int = 5,
    ) -> BatchReport:
        """
        Track several shipments concurrently, each through its own chain.

        An exception from one query is recorded as that query's failure and
        never cancels the others.
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _run(query: TrackingQuery) -> TrackingResult:
            async with semaphore:
                return await self.track(query)

        outcomes = await asyncio.gather(*(_run(q) for q in queries), return_exceptions=True)

        report = BatchReport()
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Batch tracking failed for {query.tracking_number}: {outcome}")
                outcome = TrackingResult.fail(str(outcome) or type(outcome).__name__, source=MULTI_PROVIDER_SOURCE)
            report.items.append(BatchItem(tracking_number=query.tracking_number, result=outcome))

        logger.info(
            f"Batch tracking finished: {report.succeeded}/{report.total} succeeded, {report.failed} failed"
        )
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_chain(self, query: TrackingQuery) -> TrackingResult:
        attempts: List[ProviderAttempt] = []
        skipped: List[str] = []
        carrier_hint = query.carrier_hint or detect_carrier(query.tracking_number)
        mode = query.shipment_type
        if mode is ShipmentType.UNKNOWN:
            mode = infer_shipment_type(query.tracking_number)

        for provider in self.candidates(query):
            if not provider.is_available(query):
                logger.debug(f"Skipping {provider.name}: not configured")
                skipped.append(provider.name)
                continue

            is_preferred = (
                query.preferred_provider is not None
                and provider is self.registry.get(query.preferred_provider)
            )
            if not is_preferred and not provider.supports(query, carrier_hint, mode):
                logger.debug(
                    f"Skipping {provider.name}: does not handle carrier={carrier_hint} "
                    f"type={mode.value}"
                )
                continue

            try:
                logger.debug(f"Trying provider {provider.name} for {query.tracking_number}")
                result = await provider.attempt(query)
            except ProviderConfigurationError:
                raise
            except Exception as e:
                logger.error(f"Provider {provider.name} raised an unexpected error: {e}", exc_info=True)
                attempts.append(ProviderAttempt(source=provider.name, error=str(e) or type(e).__name__))
                continue

            if result.success:
                logger.info(f"Tracked {query.tracking_number} via {provider.name}")
                return result

            logger.warning(
                f"Provider {provider.name} returned no data for {query.tracking_number}: "
                f"{result.error or 'no error message'}"
            )
            attempts.append(ProviderAttempt(source=provider.name, error=result.error or "Unknown error"))

        logger.error(f"All tracking providers failed for {query.tracking_number}")
        return TrackingResult.fail(
            self._exhausted_message(attempts),
            source=MULTI_PROVIDER_SOURCE,
            fallback_options=skipped,
            is_live_data=False,
        )

    @staticmethod
    def _exhausted_message(attempts: List[ProviderAttempt]) -> str:
        if not attempts:
            return "No tracking providers are configured for this shipment."
        details = "; ".join(f"{a.source}: {a.error}" for a in attempts)
        return f"{EXHAUSTED_MESSAGE}. {details}"

    async def _notify(self, query: TrackingQuery, result: TrackingResult) -> None:
        for listener in self.listeners:
            try:
                await listener.on_result(query, result)
            except Exception as e:
                logger.error(f"Result listener {type(listener).__name__} failed: {e}", exc_info=True)
