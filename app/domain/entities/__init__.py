"""Domain entities exposed by the application."""

from .notification_record import NotificationRecord
from .pay_callback_events import (
    PAYMENT_TYPE_WECHAT_MINI_PROGRAM,
    CallbackResponse,
    PayCallbackEvent,
    PayCallbackFailedEvent,
    PayCallbackSuccessEvent,
    PaymentFailed,
    PaymentSucceeded,
)
from .wechat import (
    PAY_ORDER_STATUS_FAILED,
    PAY_ORDER_STATUS_INIT,
    PAY_ORDER_STATUS_SUCCESS,
    Account,
    Merchant,
    MiniProgramUser,
    PayOrder,
)

__all__ = [
    "Account",
    "CallbackResponse",
    "Merchant",
    "MiniProgramUser",
    "NotificationRecord",
    "PAYMENT_TYPE_WECHAT_MINI_PROGRAM",
    "PAY_ORDER_STATUS_FAILED",
    "PAY_ORDER_STATUS_INIT",
    "PAY_ORDER_STATUS_SUCCESS",
    "PayCallbackEvent",
    "PayCallbackFailedEvent",
    "PayCallbackSuccessEvent",
    "PayOrder",
    "PaymentFailed",
    "PaymentSucceeded",
]
