"""SQLAlchemy models for accounts, merchants, pay orders and users."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.domain.entities import PAY_ORDER_STATUS_INIT
from app.infrastructure.database import Base


class AccountModel(Base):
    """Registered mini-program."""

    __tablename__ = "wechat_mini_program_account"

    id = Column(Integer, primary_key=True, index=True)
    app_id = Column(String(64), nullable=False, unique=True, index=True)
    app_secret = Column(String(128), nullable=True)
    name = Column(String(120), nullable=True)


class MerchantModel(Base):
    """WeChat Pay merchant configuration."""

    __tablename__ = "wechat_pay_merchant"

    id = Column(Integer, primary_key=True, index=True)
    mch_id = Column(String(32), nullable=False, unique=True)
    api_v3_key = Column(String(64), nullable=True)
    platform_cert_serial = Column(String(64), nullable=True)


class PayOrderModel(Base):
    """Pay order created when a mini-program transaction is placed."""

    __tablename__ = "wechat_pay_order"

    id = Column(Integer, primary_key=True, index=True)
    app_id = Column(String(64), nullable=False, index=True)
    trade_no = Column(String(64), nullable=False, unique=True, index=True)
    open_id = Column(String(128), nullable=True)
    attach = Column(String(255), nullable=True)
    total_fee = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=PAY_ORDER_STATUS_INIT)
    merchant_id = Column(Integer, ForeignKey("wechat_pay_merchant.id"), nullable=True)

    merchant = relationship("MerchantModel", lazy="joined")


class MiniProgramUserModel(Base):
    """Mini-program user identified by ``open_id`` within an account."""

    __tablename__ = "wechat_mini_program_user"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(
        Integer, ForeignKey("wechat_mini_program_account.id"), nullable=True, index=True
    )
    open_id = Column(String(128), nullable=False, index=True)
    union_id = Column(String(128), nullable=True)


__all__ = ["AccountModel", "MerchantModel", "MiniProgramUserModel", "PayOrderModel"]
