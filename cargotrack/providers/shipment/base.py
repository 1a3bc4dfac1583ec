"""
Base Tracking Provider - Contract shared by every tracking source
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

import httpx

from ...config import ProviderSettings
from ...errors import ProviderConfigurationError
from ...models import ShipmentType, TrackingData, TrackingQuery, TrackingResult
from .normalizer import to_iso

logger = logging.getLogger(__name__)

ALL_CARRIERS = ("*",)
ALL_MODES: Tuple[ShipmentType, ...] = tuple(ShipmentType)


class BaseTrackingProvider(ABC):
    """
    Abstract base class for tracking providers.

    All tracking providers must implement:
    - is_available(query) - Check configuration, without any network I/O
    - attempt(query) - Perform one lookup and return a TrackingResult

    attempt() never raises for "not found" or "provider down"; those are
    returned as failed results with ``source`` set to the provider name.
    It raises ProviderConfigurationError when called on an unconfigured
    provider.
    """

    name: str = ""
    supported_carriers: Tuple[str, ...] = ALL_CARRIERS
    supported_modes: Tuple[ShipmentType, ...] = ALL_MODES
    requires: Tuple[str, ...] = ()

    def __init__(self, settings: Optional[ProviderSettings] = None):
        self.settings = settings or ProviderSettings()

    @abstractmethod
    def is_available(self, query: Optional[TrackingQuery] = None) -> bool:
        """
        Check if provider is configured and enabled.

        Args:
            query: Optional query carrying per-call credentials

        Returns:
            True if provider can be attempted, False otherwise
        """
        pass

    @abstractmethod
    async def attempt(self, query: TrackingQuery) -> TrackingResult:
        """
        Track one shipment.

        Args:
            query: Normalized tracking query

        Returns:
            Successful result with normalized data, or a failed result
        """
        pass

    def supports(
        self,
        query: TrackingQuery,
        carrier_hint: Optional[str] = None,
        shipment_type: Optional[ShipmentType] = None,
    ) -> bool:
        """Whether this provider handles the query's carrier and transport mode."""
        if (shipment_type or query.shipment_type) not in self.supported_modes:
            return False
        hint = carrier_hint or query.carrier_hint
        if not hint or "*" in self.supported_carriers:
            return True
        return hint in self.supported_carriers

    def fail(self, error: str) -> TrackingResult:
        return TrackingResult.fail(error, source=self.name)

    def __repr__(self):
        return f"<{self.__class__.__name__} name={self.name}>"


class HttpTrackingProvider(BaseTrackingProvider):
    """
    Base class for providers backed by a REST API.

    Subclasses implement ``_track(client, query, retrieved_at)`` and may
    raise httpx errors or parsing errors freely; they are mapped to failed
    results here. Each attempt opens one client with a bounded timeout and
    makes one request.
    """

    default_base_url: str = ""

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings)
        self.timeout = timeout
        self.base_url = (self.settings.base_url or self.default_base_url).rstrip("/")
        self._transport = transport

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.api_key

    def is_available(self, query: Optional[TrackingQuery] = None) -> bool:
        return self.settings.enabled and bool(self.api_key)

    def _require_configuration(self, query: TrackingQuery) -> None:
        if not self.is_available(query):
            raise ProviderConfigurationError(self.name, ", ".join(self.requires) or "configuration")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def attempt(self, query: TrackingQuery) -> TrackingResult:
        self._require_configuration(query)

        retrieved_at = datetime.now(timezone.utc)
        logger.info(f"Tracking {query.tracking_number} via {self.name}")

        try:
            async with self._client() as client:
                return await self._track(client, query, retrieved_at)

        except httpx.HTTPStatusError as e:
            logger.error(f"{self.name} API HTTP error: {e.response.status_code} - {e.response.text[:200]}")
            return self.fail(get_user_friendly_error("http_error", e.response.status_code))
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name} API timed out after {self.timeout}s: {e}")
            return self.fail(get_user_friendly_error("timeout"))
        except httpx.HTTPError as e:
            logger.error(f"{self.name} API connection error: {e}", exc_info=True)
            return self.fail(get_user_friendly_error("connection_error"))
        except (ValueError, KeyError, TypeError, AttributeError, OverflowError) as e:
            logger.error(f"Failed to parse {self.name} response: {e}", exc_info=True)
            return self.fail(f"Failed to parse tracking data: {str(e)}")

    @abstractmethod
    async def _track(
        self,
        client: httpx.AsyncClient,
        query: TrackingQuery,
        retrieved_at: datetime,
    ) -> TrackingResult:
        pass

    def success(self, data: TrackingData, retrieved_at: datetime) -> TrackingResult:
        return TrackingResult.ok(
            data,
            source=self.name,
            is_live_data=True,
            scraped_at=to_iso(retrieved_at),
        )


def get_user_friendly_error(error_type: str, details: Any = None) -> str:
    """Convert technical errors to user-friendly messages."""
    if error_type == "connection_error":
        return "Unable to reach the tracking service right now. Please try again in a few minutes."

    elif error_type == "timeout":
        return "Tracking service did not respond in time."

    elif error_type == "http_error":
        status_code = details or 0
        if status_code in (401, 403):
            return "Tracking service authentication failed. Please contact support."
        elif status_code == 429:
            return "Too many tracking requests. Please try again later."
        elif status_code == 404:
            return "No tracking information found for this number."
        elif status_code >= 500:
            return "Tracking service is experiencing issues. Please try again later."
        else:
            return f"Tracking service returned an error ({status_code})."

    elif error_type == "not_found":
        return "No tracking info found yet. The carrier may not have scanned it yet - try again later."

    else:
        return "Something went wrong. Please try again later."
