"""Data models for the relay pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RelayResponse:
    """Pipeline outcome to be written back to the HTTP caller."""

    body: str | bytes
    status_code: int
    media_type: str = "text/plain"
