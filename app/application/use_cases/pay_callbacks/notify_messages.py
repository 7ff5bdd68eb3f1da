"""Use cases for browsing audited pay notifications."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import NotificationRecord
from app.infrastructure.repositories import NotificationRecordRepository


def list_notify_messages(
    session: Session,
    *,
    keyword: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    skip: int = 0,
    limit: int = 20,
) -> Sequence[NotificationRecord]:
    """Return audited notifications, newest first."""

    return NotificationRecordRepository(session).list(
        keyword=keyword,
        created_from=created_from,
        created_to=created_to,
        skip=skip,
        limit=limit,
    )


def get_notify_message(session: Session, record_id: int) -> NotificationRecord:
    """Return the audited notification ``record_id`` or raise an error."""

    record = NotificationRecordRepository(session).get(record_id)
    if record is None:
        raise ValueError("Pay notification not found")
    return record


__all__ = ["get_notify_message", "list_notify_messages"]
