"""Tests for the append-only notification record repository."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.domain.entities import NotificationRecord
from app.infrastructure.repositories import NotificationRecordRepository
from app.utils import get_app_timezone


def test_create_assigns_id_and_create_time(db_session: Session) -> None:
    repository = NotificationRecordRepository(db_session)

    saved = repository.create(NotificationRecord(id=None, raw_data='{"id": "EV-1"}'))

    assert saved.id is not None
    assert saved.raw_data == '{"id": "EV-1"}'
    assert saved.create_time is not None
    assert saved.create_time.tzinfo is not None
    assert repository.get(saved.id) == saved


def test_get_missing_record_returns_none(db_session: Session) -> None:
    assert NotificationRecordRepository(db_session).get(999) is None


def test_list_filters_by_keyword_and_orders_newest_first(db_session: Session) -> None:
    repository = NotificationRecordRepository(db_session)
    first = repository.create(NotificationRecord(id=None, raw_data='{"id": "EV-1"}'))
    repository.create(NotificationRecord(id=None, raw_data="garbage"))
    third = repository.create(NotificationRecord(id=None, raw_data='{"id": "EV-3"}'))

    listed = repository.list(keyword="EV-")

    assert [record.id for record in listed] == [third.id, first.id]
    assert repository.count() == 3


def test_list_filters_by_creation_window(db_session: Session) -> None:
    repository = NotificationRecordRepository(db_session)
    tz = get_app_timezone()
    old = repository.create(
        NotificationRecord(
            id=None, raw_data="old", create_time=datetime(2024, 1, 1, 8, 0, tzinfo=tz)
        )
    )
    recent = repository.create(
        NotificationRecord(
            id=None, raw_data="recent", create_time=datetime(2024, 6, 1, 8, 0, tzinfo=tz)
        )
    )

    window_start = datetime(2024, 5, 1, tzinfo=tz)
    assert [r.id for r in repository.list(created_from=window_start)] == [recent.id]
    assert [
        r.id for r in repository.list(created_to=window_start - timedelta(days=1))
    ] == [old.id]


def test_list_paginates(db_session: Session) -> None:
    repository = NotificationRecordRepository(db_session)
    created = [
        repository.create(NotificationRecord(id=None, raw_data=f"payload-{index}"))
        for index in range(5)
    ]

    page = repository.list(skip=1, limit=2)

    assert [record.id for record in page] == [created[3].id, created[2].id]
