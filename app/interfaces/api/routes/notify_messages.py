"""Read-only admin endpoints for audited pay notifications."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.application.use_cases.pay_callbacks import (
    get_notify_message as get_notify_message_uc,
    list_notify_messages as list_notify_messages_uc,
)
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import require_admin_token
from app.interfaces.api.schemas import NotifyMessageRead

router = APIRouter(
    prefix="/payment-notify-messages",
    tags=["payment_notify_messages"],
    dependencies=[Depends(require_admin_token)],
)


@router.get("/", response_model=list[NotifyMessageRead])
def list_notify_messages(
    keyword: str | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[NotifyMessageRead]:
    """Return audited notifications, newest first."""

    records = list_notify_messages_uc(
        db,
        keyword=keyword,
        created_from=created_from,
        created_to=created_to,
        skip=skip,
        limit=limit,
    )
    return [NotifyMessageRead.model_validate(record) for record in records]


@router.get("/{record_id}", response_model=NotifyMessageRead)
def read_notify_message(record_id: int, db: Session = Depends(get_db)) -> NotifyMessageRead:
    """Return the audited notification identified by ``record_id``."""

    try:
        record = get_notify_message_uc(db, record_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotifyMessageRead.model_validate(record)


__all__ = ["router"]
