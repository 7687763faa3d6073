"""Webhook map loader: reads the code-to-webhook mapping file on demand.

The file is re-read on every call so operator edits are picked up by the
next request without a restart.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from src.models import WebhookTarget

WebhookMap = dict[str, WebhookTarget]

_MAP_ADAPTER: TypeAdapter[WebhookMap] = TypeAdapter(WebhookMap)


class MappingLoadError(Exception):
    """Base class for failures to produce a webhook map from disk."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class MappingReadError(MappingLoadError):
    """The mapping file is missing or cannot be read."""


class MappingParseError(MappingLoadError):
    """The mapping file is not JSON or not an object of objects."""


class MappingEncodeError(Exception):
    """Raised when a loaded map cannot be serialized back to JSON."""


def load_webhook_map(path: str | Path) -> WebhookMap:
    """Read and parse the mapping file at ``path``."""
    file_path = Path(path)
    try:
        raw = file_path.read_bytes()
    except OSError as exc:
        raise MappingReadError(
            str(file_path), f"failed to read webhook map file ({exc.strerror or exc})",
        ) from exc

    try:
        return _MAP_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise MappingParseError(
            str(file_path),
            f"failed to parse webhook map ({exc.error_count()} error(s): "
            f"{exc.errors()[0]['msg']})",
        ) from exc


def dump_webhook_map(mapping: WebhookMap, indent: int | None = None) -> bytes:
    """Serialize a map back into the file's ``{code: {webhooks_url}}`` shape."""
    try:
        return _MAP_ADAPTER.dump_json(mapping, indent=indent)
    except (TypeError, ValueError) as exc:
        raise MappingEncodeError(f"failed to encode webhook map: {exc}") from exc
