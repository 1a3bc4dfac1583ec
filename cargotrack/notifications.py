"""Result listeners: audit logging and webhook delivery of tracking results."""

import json
import logging
from typing import Dict, Optional

import httpx

from .models import TrackingQuery, TrackingResult

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 10


class LoggingResultListener:
    """Writes one audit log line per tracking outcome."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    async def on_result(self, query: TrackingQuery, result: TrackingResult) -> None:
        if result.success:
            self._log.info(
                f"Tracking result: number={query.tracking_number} source={result.source} "
                f"status={result.data.status if result.data else 'unknown'} live={result.is_live_data}"
            )
        else:
            self._log.info(
                f"Tracking result: number={query.tracking_number} source={result.source} "
                f"failed error={result.error}"
            )


class WebhookResultListener:
    """POST tracking results to an HTTPS webhook.

    Raises:
        ValueError: URL is not HTTPS.
    """

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        only_success: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Basic SSRF guard
        if not url or not url.startswith("https://"):
            raise ValueError(f"Webhook URL must use HTTPS: {url}")
        self.url = url
        self.token = token
        self.only_success = only_success
        self._transport = transport

    async def on_result(self, query: TrackingQuery, result: TrackingResult) -> None:
        if self.only_success and not result.success:
            return

        payload = {
            "event": "tracking.result",
            "trackingNumber": query.tracking_number,
            "result": result.to_dict(),
        }

        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        async with httpx.AsyncClient(timeout=WEBHOOK_TIMEOUT_SECONDS, transport=self._transport) as client:
            response = await client.post(
                self.url,
                content=json.dumps(payload, ensure_ascii=False),
                headers=headers,
            )
            if response.status_code >= 400:
                raise RuntimeError(
                    f"Webhook returned {response.status_code}: {response.text[:200]}"
                )
        logger.debug(f"Delivered tracking result for {query.tracking_number} to webhook")
