"""Webhook relay pipeline.

POST flow:
1. Decode ``{code, message}`` body
2. Load the webhook map from disk
3. Resolve the code
4. Deliver ``{content: message}`` to the resolved URL
5. Audit log

GET flow reloads the map and returns it as JSON.

Disk access (map reads, audit appends) runs in the threadpool so the event
loop keeps serving other requests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from src.models import AuditEvent, AuditEventType, RelayRequest
from src.webhook.dispatcher import DeliveryError
from src.webhook.mapping import (
    MappingEncodeError,
    MappingLoadError,
    WebhookMap,
    dump_webhook_map,
    load_webhook_map,
)
from src.webhook.models import RelayResponse

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.webhook.dispatcher import MessageDeliverer

logger = logging.getLogger(__name__)

INVALID_BODY = "Invalid request body"
INVALID_CODE = "Invalid code"
MAP_LOAD_FAILED = "Failed to load webhook map"
MAP_ENCODE_FAILED = "Failed to encode webhook map"
SENT_OK = "Message sent successfully"


class WebhookRelayPipeline:
    """Resolves codes against the map file and relays messages to webhooks."""

    def __init__(
        self,
        map_path: str,
        dispatcher: MessageDeliverer,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._map_path = map_path
        self._dispatcher = dispatcher
        self._audit = audit_logger

    async def relay(self, body: bytes, source_ip: str | None = None) -> RelayResponse:
        """Run the POST pipeline for a raw request body."""
        try:
            request = RelayRequest.model_validate_json(body)
        except ValidationError:
            await self._log_event(
                AuditEventType.INVALID_REQUEST, "relay", "rejected", source_ip,
            )
            return RelayResponse(body=INVALID_BODY, status_code=400)

        webhook_map = await self._load_map(source_ip)
        if webhook_map is None:
            return RelayResponse(body=MAP_LOAD_FAILED, status_code=500)

        target = webhook_map.get(request.code)
        if target is None:
            await self._log_event(
                AuditEventType.UNKNOWN_CODE, "relay", "rejected", source_ip,
                code=request.code,
            )
            return RelayResponse(body=INVALID_CODE, status_code=400)

        try:
            await self._dispatcher.deliver(target.webhooks_url, request.message)
        except DeliveryError as exc:
            logger.warning("Delivery for code %r failed: %s", request.code, exc)
            await self._log_event(
                AuditEventType.DELIVERY, "relay", "failure", source_ip,
                code=request.code,
                details={"error": str(exc), "remote_status": exc.status_code},
            )
            return RelayResponse(body=str(exc), status_code=500)

        await self._log_event(
            AuditEventType.DELIVERY, "relay", "success", source_ip, code=request.code,
        )
        return RelayResponse(body=SENT_OK, status_code=200)

    async def listing(self, source_ip: str | None = None) -> RelayResponse:
        """Run the GET pipeline: the full map as JSON."""
        webhook_map = await self._load_map(source_ip)
        if webhook_map is None:
            return RelayResponse(body=MAP_LOAD_FAILED, status_code=500)

        try:
            payload = dump_webhook_map(webhook_map)
        except MappingEncodeError:
            logger.exception("Error encoding webhook map")
            return RelayResponse(body=MAP_ENCODE_FAILED, status_code=500)

        await self._log_event(
            AuditEventType.MAP_LISTED, "list", "success", source_ip,
            details={"entries": len(webhook_map)},
        )
        return RelayResponse(
            body=payload, status_code=200, media_type="application/json",
        )

    async def _load_map(self, source_ip: str | None) -> WebhookMap | None:
        try:
            return await run_in_threadpool(load_webhook_map, self._map_path)
        except MappingLoadError as exc:
            logger.error("Error loading webhook map: %s", exc)
            await self._log_event(
                AuditEventType.MAP_LOAD_FAILURE, "load_map", "failure", source_ip,
                details={"error": str(exc), "error_type": type(exc).__name__},
            )
            return None

    async def _log_event(
        self,
        event_type: AuditEventType,
        action: str,
        result: str,
        source_ip: str | None,
        code: str | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        if not self._audit:
            return
        event = AuditEvent(
            event_type=event_type,
            source_ip=source_ip,
            code=code,
            action=action,
            result=result,
            details=details,
        )
        # The audit trail never changes the response the caller gets.
        try:
            await run_in_threadpool(self._audit.log, event)
        except OSError:
            logger.exception("Failed to write audit event")
