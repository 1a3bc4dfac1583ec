"""
GoComet live-tracking provider

GoComet needs a token, either configured (GOCOMET_TOKEN) or supplied per
query. Exchanging email/password for a token is a separate operation
(``authenticate``) and is never done inside ``attempt``.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ...config import PROVIDER_GOCOMET
from ...errors import ProviderAuthenticationError, ProviderConfigurationError
from ...models import TrackingData, TrackingQuery, TrackingResult
from .base import HttpTrackingProvider
from .normalizer import build_event, first_present, group_timeline, iso_or_none

logger = logging.getLogger(__name__)

GOCOMET_AUTH_URL = "https://login.gocomet.com/api/v1/integrations/generate-token-number"


def _date_value(date: Optional[str], date_time: Optional[str]) -> Optional[str]:
    """GoComet sends DD/MM/YYYY dates and 'DD/MM/YYYY HH:MM:SS' datetimes."""
    return first_present(date_time, date)


def normalize_gocomet_item(
    item: Dict[str, Any],
    reference_time: datetime,
    tracking_number: str = "",
) -> TrackingData:
    """Convert one ``updated_trackings`` item into TrackingData."""
    raw_events: List[Dict[str, Any]] = item.get("events") or []

    events = []
    for raw in raw_events:
        vessel_details = raw.get("vessel_details") or {}
        event = build_event(
            status=first_present(raw.get("display_event"), raw.get("event")) or "",
            location=raw.get("location"),
            reference_time=reference_time,
            actual=_date_value(raw.get("actual_date"), raw.get("actual_datetime")),
            planned=_date_value(raw.get("planned_date"), raw.get("planned_datetime")),
            type_hint=raw.get("event"),
            dayfirst=True,
            description=raw.get("remarks"),
            vessel=vessel_details.get("vessel_name"),
            voyage=vessel_details.get("voyage_num"),
        )
        events.append((event, raw.get("connected_port")))

    arrival = next(
        (e for e in raw_events if e.get("event") == "arrival" or e.get("display_event") == "Arrival"),
        None,
    )
    departure = next(
        (e for e in raw_events if e.get("event") == "origin_departure" or e.get("display_event") == "Origin Departure"),
        None,
    )

    eta = None
    if arrival:
        eta = iso_or_none(_date_value(arrival.get("planned_date"), arrival.get("planned_datetime")), dayfirst=True)
    etd = None
    if departure:
        etd = iso_or_none(
            first_present(
                _date_value(departure.get("actual_date"), departure.get("actual_datetime")),
                _date_value(departure.get("planned_date"), departure.get("planned_datetime")),
            ),
            dayfirst=True,
        )

    return TrackingData(
        shipment_number=item.get("tracking_number") or tracking_number,
        status=item.get("status") or "Unknown",
        carrier=item.get("carrier_name") or None,
        container_number=item.get("container_number") or None,
        container_type=item.get("container_type") or None,
        origin=item.get("pol_name") or None,
        destination=item.get("pod_name") or None,
        pol=item.get("pol_code") or item.get("pol_name") or None,
        pod=item.get("pod_code") or item.get("pod_name") or None,
        eta=eta,
        etd=etd,
        last_location=raw_events[-1].get("location") if raw_events else None,
        timeline=group_timeline(events),
    )


class GocometTrackingProvider(HttpTrackingProvider):
    """Token-gated multi-mode aggregator."""

    name = PROVIDER_GOCOMET
    requires = ("GOCOMET_TOKEN",)
    default_base_url = "https://tracking.gocomet.com/api/v1/integrations"

    def _token(self, query: Optional[TrackingQuery]) -> Optional[str]:
        if query is not None and query.gocomet_token:
            return query.gocomet_token
        return self.settings.token

    def is_available(self, query: Optional[TrackingQuery] = None) -> bool:
        return self.settings.enabled and bool(self._token(query))

    async def _track(
        self,
        client: httpx.AsyncClient,
        query: TrackingQuery,
        retrieved_at: datetime,
    ) -> TrackingResult:
        response = await client.get(
            f"{self.base_url}/live-tracking",
            params={"tracking_numbers[]": query.tracking_number, "token": self._token(query)},
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        body = response.json()

        trackings = body.get("updated_trackings") or []
        if not trackings:
            return self.fail("No live tracking information found for this number from GoComet.")

        data = normalize_gocomet_item(trackings[0], retrieved_at, query.tracking_number)
        return self.success(data, retrieved_at)

    async def authenticate(self, email: Optional[str] = None, password: Optional[str] = None) -> str:
        """
        Exchange GoComet credentials for a live-tracking token.

        Args:
            email: Account email (defaults to configured GOCOMET_EMAIL)
            password: Account password (defaults to configured GOCOMET_PASSWORD)

        Returns:
            Token string

        Raises:
            ProviderConfigurationError: No credentials supplied or configured
            ProviderAuthenticationError: GoComet rejected the credentials or was unreachable
        """
        email = email or self.settings.email
        password = password or self.settings.password
        if not email or not password:
            raise ProviderConfigurationError(self.name, "GOCOMET_EMAIL, GOCOMET_PASSWORD")

        try:
            async with self._client() as client:
                response = await client.post(
                    GOCOMET_AUTH_URL,
                    json={"email": email, "password": password},
                )
        except httpx.HTTPError as e:
            logger.error(f"GoComet authentication request failed: {e}")
            raise ProviderAuthenticationError(self.name, "service unreachable") from e

        if response.status_code >= 400:
            logger.error(f"GoComet authentication failed with status {response.status_code}: {response.text[:200]}")
            raise ProviderAuthenticationError(self.name, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"GoComet authentication returned a non-JSON body: {response.text[:200]}")
            raise ProviderAuthenticationError(self.name, "invalid response") from e
        if not isinstance(body, dict):
            raise ProviderAuthenticationError(self.name, "invalid response")

        token = body.get("token")
        if not token:
            raise ProviderAuthenticationError(self.name, "no token in response")
        logger.info("GoComet token issued")
        return token
