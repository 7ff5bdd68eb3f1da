"""ORM models used by the application infrastructure."""

from .notification_record import NotificationRecordModel
from .wechat import AccountModel, MerchantModel, MiniProgramUserModel, PayOrderModel

__all__ = [
    "AccountModel",
    "MerchantModel",
    "MiniProgramUserModel",
    "NotificationRecordModel",
    "PayOrderModel",
]
