"""Use case for ingesting a WeChat Pay payment notification."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.domain.entities import (
    Account,
    CallbackResponse,
    NotificationRecord,
    PayCallbackEvent,
    PayCallbackFailedEvent,
    PayCallbackSuccessEvent,
    PayOrder,
)
from app.domain.exceptions import (
    NotifyMessageStorageError,
    PayNotificationDecodingError,
    PaymentConfigurationError,
)
from app.infrastructure.events import CallbackEventDispatcher
from app.infrastructure.repositories import (
    AccountRepository,
    NotificationRecordRepository,
    PayOrderRepository,
)
from app.infrastructure.wechat import CallbackContext, PayNotificationVerifier
from app.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

# Outcomes of the verifier that are answered with a failure event rather
# than aborting the request.
_FAILURE_OUTCOME_ERRORS = (
    PayNotificationDecodingError,
    PaymentConfigurationError,
    NotImplementedError,
    TimeoutError,
)


def record_notify_message(
    session: Session, raw_body: bytes, *, max_bytes: int | None = None
) -> NotificationRecord:
    """Persist ``raw_body`` as an audit record, truncating oversized payloads."""

    limit = max_bytes if max_bytes is not None else get_settings().notify_message_max_bytes
    stored = raw_body
    if len(raw_body) > limit:
        logger.warning(
            "Pay notification of %d bytes truncated to %d bytes for audit",
            len(raw_body),
            limit,
        )
        stored = raw_body[:limit]

    record = NotificationRecord(
        id=None,
        raw_data=stored.decode("utf-8", errors="replace"),
        create_time=now_in_app_timezone(),
    )
    try:
        return NotificationRecordRepository(session).create(record)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to store pay notification audit record: %s", exc)
        raise NotifyMessageStorageError("Unable to store the pay notification") from exc


def _resolve_context(
    session: Session, *, app_id: str, trade_no: str
) -> tuple[Account, PayOrder]:
    account = AccountRepository(session).get_by_app_id(app_id)
    if account is None:
        raise PayNotificationDecodingError(f"Unknown mini-program {app_id}")
    pay_order = PayOrderRepository(session).get_by_trade_no(trade_no)
    if pay_order is None:
        raise PayNotificationDecodingError(f"Unknown pay order {trade_no}")
    if pay_order.app_id != account.app_id:
        raise PayNotificationDecodingError(
            f"Pay order {trade_no} does not belong to mini-program {app_id}"
        )
    return account, pay_order


def _default_response(event: PayCallbackEvent) -> CallbackResponse:
    if isinstance(event, PayCallbackFailedEvent):
        return CallbackResponse.rejected(event.reason)
    return CallbackResponse.acknowledged()


def handle_pay_notification(
    session: Session,
    *,
    app_id: str,
    trade_no: str,
    raw_body: bytes,
    headers: Mapping[str, str],
    verifier: PayNotificationVerifier,
    dispatcher: CallbackEventDispatcher,
) -> CallbackResponse:
    """Audit, verify and dispatch one payment notification.

    The audit record is written before anything else, so it exists even when
    the payload turns out to be forged or unreadable. Storage failures raise
    :class:`NotifyMessageStorageError` and an unknown order or account raises
    :class:`PayNotificationDecodingError`; every other verification problem
    is reported to reactors as a :class:`PayCallbackFailedEvent`.
    """

    record = record_notify_message(session, raw_body)
    account, pay_order = _resolve_context(session, app_id=app_id, trade_no=trade_no)

    event: PayCallbackEvent
    try:
        verified = verifier.verify_and_decrypt(
            raw_body, CallbackContext(account=account, pay_order=pay_order, headers=headers)
        )
    except _FAILURE_OUTCOME_ERRORS as exc:
        logger.warning(
            "Pay notification %s for order %s rejected: %s",
            record.id,
            trade_no,
            exc,
        )
        event = PayCallbackFailedEvent(
            pay_order=pay_order, account=account, reason=str(exc) or type(exc).__name__
        )
    else:
        logger.info(
            "Pay notification %s verified for order %s (transaction %s)",
            record.id,
            trade_no,
            verified.fields.get("transaction_id"),
        )
        event = PayCallbackSuccessEvent(
            pay_order=verified.pay_order,
            account=verified.account,
            decrypt_data=dict(verified.fields),
        )

    dispatcher.publish(event)
    return event.response or _default_response(event)


__all__ = ["handle_pay_notification", "record_notify_message"]
