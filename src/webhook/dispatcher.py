"""Outbound webhook delivery.

One POST per message, no retry. Remote 200/204 is success; anything else,
including transport failures, raises DeliveryError.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from src.models import DeliveryEnvelope

logger = logging.getLogger(__name__)

_SUCCESS_STATUSES = frozenset({200, 204})
_DEFAULT_TIMEOUT_SECONDS = 30.0


class DeliveryError(Exception):
    """Raised when a webhook does not accept a delivery."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MessageDeliverer(Protocol):
    async def deliver(self, url: str, message: str) -> None: ...


class WebhookDispatcher:
    """Posts ``{"content": message}`` envelopes to webhook URLs."""

    def __init__(self, timeout: float = _DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    async def deliver(self, url: str, message: str) -> None:
        envelope = DeliveryEnvelope(content=message)
        headers = {"Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    url, content=envelope.model_dump_json(), headers=headers,
                )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            # Invalid IDNA hosts surface as ValueError.
            raise DeliveryError(f"failed to send message to webhook: {exc}") from exc

        if resp.status_code not in _SUCCESS_STATUSES:
            raise DeliveryError(
                f"failed to send message, status code: {resp.status_code}",
                status_code=resp.status_code,
            )
        logger.info("Delivered message to webhook (status %d)", resp.status_code)
