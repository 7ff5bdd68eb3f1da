"""Republish WeChat callback outcomes as provider-neutral payment events."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from app.domain.entities import (
    PAYMENT_TYPE_WECHAT_MINI_PROGRAM,
    PayCallbackEvent,
    PayCallbackFailedEvent,
    PayCallbackSuccessEvent,
    PaymentFailed,
    PaymentSucceeded,
    PayOrder,
)
from app.infrastructure.events import CallbackEventDispatcher
from app.utils import now_in_app_timezone, parse_provider_datetime

logger = logging.getLogger(__name__)

_FEN_PER_YUAN = Decimal(100)


@dataclass(frozen=True)
class AttachData:
    """Business order reference stored in a pay order's ``attach`` field."""

    order_id: int | None
    order_sn: str = ""

    @classmethod
    def parse(cls, attach: str | None) -> "AttachData | None":
        if not attach:
            return None
        try:
            data = json.loads(attach)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict) or "order_id" not in data:
            return None
        try:
            order_id = int(data["order_id"]) if data["order_id"] is not None else None
        except (TypeError, ValueError):
            return None
        return cls(order_id=order_id, order_sn=str(data.get("order_sn") or ""))


def fen_to_yuan(value: Any) -> Decimal:
    """Convert an amount in fen (int or numeric string) to yuan."""

    if value is None or isinstance(value, bool):
        return Decimal("0.00")
    try:
        fen = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0.00")
    return (fen / _FEN_PER_YUAN).quantize(Decimal("0.01"))


class PaymentEventBridgeReactor:
    """Translate callback outcomes into :class:`PaymentSucceeded` / :class:`PaymentFailed`."""

    def __init__(self, dispatcher: CallbackEventDispatcher) -> None:
        self._dispatcher = dispatcher

    def __call__(self, event: PayCallbackEvent) -> None:
        attach = AttachData.parse(event.pay_order.attach)
        if attach is None:
            logger.warning(
                "Cannot parse attach data of pay order %s: %r",
                event.pay_order.id,
                event.pay_order.attach,
            )
            return

        order_number = attach.order_sn or event.pay_order.trade_no
        if isinstance(event, PayCallbackSuccessEvent):
            self._publish_success(event, attach, order_number)
        elif isinstance(event, PayCallbackFailedEvent):
            self._dispatcher.publish(
                PaymentFailed(
                    payment_type=PAYMENT_TYPE_WECHAT_MINI_PROGRAM,
                    order_number=order_number,
                    order_id=attach.order_id,
                    fail_reason=event.reason,
                )
            )
            logger.info("Published payment failure for order %s", order_number)

    def _publish_success(
        self, event: PayCallbackSuccessEvent, attach: AttachData, order_number: str
    ) -> None:
        data = event.decrypt_data
        transaction_id = data.get("transaction_id")
        success_time = data.get("success_time")
        pay_time = parse_provider_datetime(
            success_time if isinstance(success_time, str) else None
        )

        self._dispatcher.publish(
            PaymentSucceeded(
                payment_type=PAYMENT_TYPE_WECHAT_MINI_PROGRAM,
                order_number=order_number,
                order_id=attach.order_id,
                transaction_id=transaction_id if isinstance(transaction_id, str) else "",
                amount=fen_to_yuan(_total_fee(data, event.pay_order)),
                pay_time=pay_time or now_in_app_timezone(),
                raw_data=dict(data),
            )
        )
        logger.info("Published payment success for order %s", order_number)


def _total_fee(data: dict[str, Any], pay_order: PayOrder) -> Any:
    amount = data.get("amount")
    if isinstance(amount, dict) and isinstance(amount.get("total"), (int, str)):
        return amount["total"]
    return pay_order.total_fee


__all__ = ["AttachData", "PaymentEventBridgeReactor", "fen_to_yuan"]
