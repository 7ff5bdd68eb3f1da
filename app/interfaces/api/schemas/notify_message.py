"""Pydantic models describing audited pay notifications."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotifyMessageRead(BaseModel):
    """Representation of an audited pay notification."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    raw_data: str | None = None
    create_time: datetime | None = None


__all__ = ["NotifyMessageRead"]
