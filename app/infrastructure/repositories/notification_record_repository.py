"""Persistence helpers for audited callback payloads."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import NotificationRecord
from app.infrastructure.models import NotificationRecordModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRecordRepository:
    """Insert and read :class:`NotificationRecord` rows.

    Records are never updated or deleted once committed, so no such
    operations are offered.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, record: NotificationRecord) -> NotificationRecord:
        model = NotificationRecordModel()
        model.raw_data = record.raw_data
        model.create_time = ensure_app_naive_datetime(
            record.create_time or now_in_app_timezone()
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, record_id: int) -> NotificationRecord | None:
        model = self.session.get(NotificationRecordModel, record_id)
        return self._to_entity(model) if model else None

    def list(
        self,
        *,
        keyword: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        skip: int = 0,
        limit: int | None = 20,
    ) -> Sequence[NotificationRecord]:
        query = self.session.query(NotificationRecordModel)
        if keyword:
            query = query.filter(NotificationRecordModel.raw_data.contains(keyword))
        if created_from is not None:
            query = query.filter(
                NotificationRecordModel.create_time
                >= ensure_app_naive_datetime(created_from)
            )
        if created_to is not None:
            query = query.filter(
                NotificationRecordModel.create_time
                <= ensure_app_naive_datetime(created_to)
            )
        query = query.order_by(NotificationRecordModel.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count(self) -> int:
        return self.session.query(NotificationRecordModel).count()

    @staticmethod
    def _to_entity(model: NotificationRecordModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            raw_data=model.raw_data,
            create_time=ensure_app_timezone(model.create_time),
        )


__all__ = ["NotificationRecordRepository"]
