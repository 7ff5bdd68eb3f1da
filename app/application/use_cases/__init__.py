"""Aggregate application use cases."""

from .pay_callbacks import (
    get_notify_message,
    handle_pay_notification,
    list_notify_messages,
    record_notify_message,
)

__all__ = [
    "get_notify_message",
    "handle_pay_notification",
    "list_notify_messages",
    "record_notify_message",
]
