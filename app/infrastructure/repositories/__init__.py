"""Repository implementations for infrastructure layer."""

from .notification_record_repository import NotificationRecordRepository
from .wechat_repositories import (
    AccountRepository,
    MerchantRepository,
    MiniProgramUserRepository,
    PayOrderRepository,
)

__all__ = [
    "AccountRepository",
    "MerchantRepository",
    "MiniProgramUserRepository",
    "NotificationRecordRepository",
    "PayOrderRepository",
]
