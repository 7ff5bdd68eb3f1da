"""SQLAlchemy model for audited payment callback payloads."""

from sqlalchemy import Column, DateTime, Integer, Text

from app.infrastructure.database import Base


class NotificationRecordModel(Base):
    """Append-only table holding every inbound pay callback body."""

    __tablename__ = "wechat_mini_program_payment_notify_message"

    id = Column(Integer, primary_key=True, index=True)
    raw_data = Column(Text(65535), nullable=True)
    create_time = Column(DateTime(), nullable=True, index=True)


__all__ = ["NotificationRecordModel"]
