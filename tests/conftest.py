"""Shared fixtures: settings builders and scripted tracking providers."""

from typing import List, Optional

import httpx
import pytest

from cargotrack.config import ProviderSettings, TrackingSettings
from cargotrack.models import TrackingData, TrackingQuery, TrackingResult
from cargotrack.providers.shipment.base import BaseTrackingProvider


def make_settings(order=None, **providers) -> TrackingSettings:
    """TrackingSettings with only the given providers configured.

    Every known provider not listed is left unconfigured; mock is disabled
    unless passed explicitly. Use ``track17`` for the 17track provider.
    """
    provider_settings = {"mock": ProviderSettings(enabled=False)}
    for name, values in providers.items():
        key = "17track" if name == "track17" else name
        provider_settings[key] = (
            values if isinstance(values, ProviderSettings) else ProviderSettings(**values)
        )
    kwargs = {"providers": provider_settings}
    if order is not None:
        kwargs["order"] = tuple(order)
    return TrackingSettings(**kwargs)


class ScriptedProvider(BaseTrackingProvider):
    """Provider returning a canned result and recording every call."""

    def __init__(
        self,
        name: str,
        succeed: bool = False,
        available: bool = True,
        raises: Optional[BaseException] = None,
        supported_carriers=("*",),
    ):
        super().__init__()
        self.name = name
        self.supported_carriers = tuple(supported_carriers)
        self._succeed = succeed
        self._available = available
        self._raises = raises
        self.calls: List[TrackingQuery] = []

    def is_available(self, query=None) -> bool:
        return self._available

    async def attempt(self, query: TrackingQuery) -> TrackingResult:
        self.calls.append(query)
        if self._raises is not None:
            raise self._raises
        if self._succeed:
            return TrackingResult.ok(
                TrackingData(shipment_number=query.tracking_number, status="In Transit"),
                source=self.name,
            )
        return self.fail(f"{self.name} has no data")


@pytest.fixture
def scripted():
    return ScriptedProvider


def json_transport(payload, status_code: int = 200, seen: Optional[list] = None) -> httpx.MockTransport:
    """MockTransport answering every request with ``payload`` as JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)
