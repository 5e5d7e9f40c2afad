"""Mail relay HTTP client for transactional email"""

import logging
from typing import Optional

import httpx

from ccb_gateway.config import settings
from ccb_gateway.infrastructure.observability.metrics import mail_latency_histogram, mail_failure_counter

logger = logging.getLogger(__name__)


class MailClient:
    """Client for the outbound mail relay"""

    def __init__(self, api_url: str | None = None, sender: str | None = None, timeout: float | None = None):
        self.api_url = api_url or settings.mail_api_url
        self.sender = sender or settings.mail_sender
        self.timeout = timeout or settings.http_timeout_seconds

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
        """
        Deliver one message through the relay.

        Fire-and-forget: failures are logged and counted but never raised,
        and there is no retry.

        Returns:
            True when the relay accepted the message
        """
        payload = {"from": self.sender, "to": to, "subject": subject, "text": text}
        if html:
            payload["html"] = html

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with mail_latency_histogram.time():
                    response = await client.post(self.api_url, json=payload)
                    response.raise_for_status()
                return True

            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                mail_failure_counter.inc()
                logger.error(
                    f"Mail delivery failed: {e}",
                    extra={"step": "mail_delivery_failed", "subject": subject},
                )
                return False
