"""Domain entity representing an audited payment callback payload."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationRecord:
    """Raw callback body as it was received, kept for audit and replay."""

    id: int | None
    raw_data: str | None = None
    create_time: datetime | None = None

    def __str__(self) -> str:
        return str(self.id or "")


__all__ = ["NotificationRecord"]
