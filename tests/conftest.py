"""Shared test fixtures for the webhook relay."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.models import AuditEvent, AuditEventType

TEAM_A_URL = "https://hooks.example/abc"


@pytest.fixture
def write_map(tmp_path: Path):
    """Write a webhook map file and return its path."""

    def _write(data: Any, filename: str = "webhook_map.json") -> Path:
        path = tmp_path / filename
        if isinstance(data, (str, bytes)):
            path.write_bytes(data.encode() if isinstance(data, str) else data)
        else:
            path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def map_file(write_map) -> Path:
    return write_map({"team-a": {"webhooks_url": TEAM_A_URL}})


@pytest.fixture
def mock_dispatcher() -> MagicMock:
    dispatcher = MagicMock()
    dispatcher.deliver = AsyncMock(return_value=None)
    return dispatcher


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


def make_mock_client(response: MagicMock | None = None) -> AsyncMock:
    """Build an httpx.AsyncClient stand-in usable as an async context manager."""
    mock_client = AsyncMock()
    if response is not None:
        mock_client.post.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def make_audit_event(**kwargs: object) -> AuditEvent:
    """Factory for AuditEvent with sensible defaults."""
    defaults: dict[str, object] = {
        "event_type": AuditEventType.DELIVERY,
        "action": "relay",
        "result": "success",
    }
    defaults.update(kwargs)
    return AuditEvent(**defaults)  # type: ignore[arg-type]
