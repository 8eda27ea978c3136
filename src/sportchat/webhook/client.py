"""Async client for the external agent webhook."""

import logging
from typing import Optional

import httpx

from ..config import config
from .schemas import WebhookPayload, WebhookResponseError, decode_webhook_payload

logger = logging.getLogger(__name__)


class WebhookError(RuntimeError):
    """The agent webhook could not be reached or answered with an error."""


class WebhookClient:
    """Sends chat messages to the agent webhook and decodes its answers."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> Optional[str]:
        return self._url or config.webhook.url

    async def initialize(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=self._timeout or config.webhook.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    async def send(self, message: str, user_email: str, user_name: str) -> WebhookPayload:
        """POST a message to the agent and return the decoded payload.

        Raises WebhookError for a missing URL, transport failures, non-2xx
        statuses and bodies that are not a known payload.
        """
        if not self.url:
            raise WebhookError("Webhook URL not configured")
        if self._client is None:
            await self.initialize()

        logger.info("Sending message to webhook (%d chars)", len(message))
        try:
            response = await self._client.post(
                self.url,
                json={"message": message, "user_email": user_email, "user_name": user_name},
            )
        except httpx.HTTPError as e:
            raise WebhookError(f"Webhook request failed: {e}") from e

        if response.is_error:
            raise WebhookError(f"Webhook failed: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise WebhookError("Webhook returned malformed JSON") from e

        try:
            return decode_webhook_payload(data)
        except WebhookResponseError as e:
            raise WebhookError(str(e)) from e

    async def close(self) -> None:
        """Clean up HTTP client resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Global webhook client instance
webhook_client = WebhookClient()
