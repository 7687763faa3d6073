"""Shared Pydantic data models for the webhook relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictStr

# --- Mapping Models ---


class WebhookTarget(BaseModel):
    """One mapping file entry: where messages for a code are delivered."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    webhooks_url: StrictStr = ""


# --- Relay Models ---


class RelayRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    code: StrictStr = ""
    message: StrictStr = ""


class DeliveryEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str


# --- Audit Models ---


class AuditEventType(str, Enum):
    DELIVERY = "delivery"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN_CODE = "unknown_code"
    MAP_LOAD_FAILURE = "map_load_failure"
    MAP_LISTED = "map_listed"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    code: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    details: dict[str, object] | None = None
