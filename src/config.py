"""Startup configuration read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_PORT = 8080
DEFAULT_MAP_PATH = "webhook_map.json"


class ConfigError(Exception):
    """Raised when the environment holds an unusable setting."""


class RelayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    map_path: str = DEFAULT_MAP_PATH
    delivery_timeout: float = Field(default=30.0, gt=0)
    audit_log_path: str | None = None
    audit_log_max_bytes: int = Field(default=10_485_760, gt=0)
    audit_log_backup_count: int = Field(default=5, ge=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelayConfig:
        """Build config from ``environ`` (defaults to ``os.environ``).

        Empty values fall back to defaults, matching an unset variable.
        """
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for key, field_name in (
            ("HOST", "host"),
            ("PORT", "port"),
            ("WEBHOOK_MAP_PATH", "map_path"),
            ("DELIVERY_TIMEOUT", "delivery_timeout"),
            ("AUDIT_LOG_PATH", "audit_log_path"),
            ("AUDIT_LOG_MAX_BYTES", "audit_log_max_bytes"),
            ("AUDIT_LOG_BACKUP_COUNT", "audit_log_backup_count"),
        ):
            value = env.get(key, "")
            if value:
                values[field_name] = value
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            bad = ", ".join(str(err["loc"][0]) for err in exc.errors())
            raise ConfigError(f"Invalid relay configuration: {bad}") from exc
