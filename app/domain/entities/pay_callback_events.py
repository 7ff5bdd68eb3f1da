"""Events published while processing a payment callback.

``PayCallbackSuccessEvent`` and ``PayCallbackFailedEvent`` form a tagged union
over :class:`PayCallbackEvent`. Reactors receive the same instance in
registration order and may replace ``response``; the last value set is the
one returned to WeChat Pay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Literal

from .wechat import Account, PayOrder

PAYMENT_TYPE_WECHAT_MINI_PROGRAM = "wechat_mini_program"


@dataclass
class CallbackResponse:
    """Reply sent back to the payment provider."""

    status_code: int = 200
    body: dict[str, Any] | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def acknowledged(cls) -> "CallbackResponse":
        return cls(status_code=200)

    @classmethod
    def rejected(cls, message: str, *, status_code: int = 400) -> "CallbackResponse":
        return cls(status_code=status_code, body={"code": "FAIL", "message": message})


@dataclass
class PayCallbackEvent:
    """Fields shared by both callback outcomes."""

    outcome: ClassVar[Literal["success", "failure"]]

    pay_order: PayOrder
    account: Account
    response: CallbackResponse | None = None


@dataclass
class PayCallbackSuccessEvent(PayCallbackEvent):
    """The callback was verified and its resource decrypted."""

    outcome: ClassVar[Literal["success", "failure"]] = "success"

    decrypt_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class PayCallbackFailedEvent(PayCallbackEvent):
    """The callback could not be verified or decrypted."""

    outcome: ClassVar[Literal["success", "failure"]] = "failure"

    reason: str = "signature verification failed"


@dataclass(frozen=True)
class PaymentSucceeded:
    """Provider-neutral notice that an order has been paid."""

    payment_type: str
    order_number: str
    order_id: int | None
    transaction_id: str
    amount: Decimal
    pay_time: datetime
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentFailed:
    """Provider-neutral notice that a payment callback was rejected."""

    payment_type: str
    order_number: str
    order_id: int | None
    fail_reason: str
    raw_data: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "CallbackResponse",
    "PAYMENT_TYPE_WECHAT_MINI_PROGRAM",
    "PayCallbackEvent",
    "PayCallbackFailedEvent",
    "PayCallbackSuccessEvent",
    "PaymentFailed",
    "PaymentSucceeded",
]
