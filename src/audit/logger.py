"""Audit logger — append-only JSON Lines record of relay outcomes with rotation."""

from __future__ import annotations

import fcntl
from pathlib import Path

from src.models import AuditEvent


class AuditLogger:
    """Appends one JSON line per relay event, rotating by size."""

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    def _backup_path(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def _maybe_rotate(self) -> None:
        if not self.log_path.exists() or self.log_path.stat().st_size < self._max_bytes:
            return
        if self._backup_count < 1:
            self.log_path.unlink()
            return

        self._backup_path(self._backup_count).unlink(missing_ok=True)
        for i in range(self._backup_count - 1, 0, -1):
            older = self._backup_path(i)
            if older.exists():
                older.rename(self._backup_path(i + 1))
        self.log_path.rename(self._backup_path(1))

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        line = event.model_dump_json(exclude_none=True)

        # Rotation and append happen under one lock so concurrent
        # workers never write into a file that is being renamed.
        lock_file = self.log_path.with_name(f".{self.log_path.name}.lock")
        with open(lock_file, "w") as lf:
            fcntl.flock(lf, fcntl.LOCK_EX)
            try:
                self._maybe_rotate()
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lf, fcntl.LOCK_UN)
