"""FastAPI application exposing the relay on ``/dl``."""

from __future__ import annotations

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from src.audit.logger import AuditLogger
from src.config import RelayConfig
from src.webhook.dispatcher import MessageDeliverer, WebhookDispatcher
from src.webhook.relay import WebhookRelayPipeline

RELAY_PATH = "/dl"

# Every method is routed so unsupported ones get a plain-text 405
# instead of the framework's JSON one.
_ROUTED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    return create_app_from_config(RelayConfig.from_env())


def create_app_from_config(config: RelayConfig) -> FastAPI:
    audit_logger = None
    if config.audit_log_path:
        audit_logger = AuditLogger(
            config.audit_log_path,
            max_bytes=config.audit_log_max_bytes,
            backup_count=config.audit_log_backup_count,
        )
    return create_app(
        config.map_path,
        WebhookDispatcher(timeout=config.delivery_timeout),
        audit_logger,
    )


def create_app(
    map_path: str,
    dispatcher: MessageDeliverer | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the relay FastAPI app."""
    app = FastAPI(
        docs_url=None, redoc_url=None, openapi_url=None, redirect_slashes=False,
    )
    pipeline = WebhookRelayPipeline(
        map_path=map_path,
        dispatcher=dispatcher or WebhookDispatcher(),
        audit_logger=audit_logger,
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.api_route(RELAY_PATH, methods=_ROUTED_METHODS)
    async def relay(request: Request) -> Response:
        source_ip = request.client.host if request.client else None

        if request.method == "POST":
            body = await request.body()
            result = await pipeline.relay(body, source_ip=source_ip)
        elif request.method == "GET":
            result = await pipeline.listing(source_ip=source_ip)
        else:
            return PlainTextResponse("Method not allowed", status_code=405)

        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.media_type,
        )

    return app
