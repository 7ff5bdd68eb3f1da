"""Use cases for WeChat Pay payment callbacks."""

from .handle_pay_notification import handle_pay_notification, record_notify_message
from .notify_messages import get_notify_message, list_notify_messages

__all__ = [
    "get_notify_message",
    "handle_pay_notification",
    "list_notify_messages",
    "record_notify_message",
]
