"""Persistence helpers for accounts, merchants, pay orders and users."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import Account, Merchant, MiniProgramUser, PayOrder
from app.infrastructure.models import (
    AccountModel,
    MerchantModel,
    MiniProgramUserModel,
    PayOrderModel,
)


class AccountRepository:
    """Look up and register mini-program accounts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_app_id(self, app_id: str) -> Account | None:
        model = (
            self.session.query(AccountModel)
            .filter(AccountModel.app_id == app_id)
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def create(self, account: Account) -> Account:
        model = AccountModel(
            app_id=account.app_id,
            app_secret=account.app_secret,
            name=account.name,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: AccountModel) -> Account:
        return Account(
            id=model.id,
            app_id=model.app_id,
            app_secret=model.app_secret,
            name=model.name,
        )


class MerchantRepository:
    """Look up and register WeChat Pay merchants."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_mch_id(self, mch_id: str) -> Merchant | None:
        model = (
            self.session.query(MerchantModel)
            .filter(MerchantModel.mch_id == mch_id)
            .one_or_none()
        )
        return self.to_entity(model) if model else None

    def create(self, merchant: Merchant) -> Merchant:
        model = MerchantModel(
            mch_id=merchant.mch_id,
            api_v3_key=merchant.api_v3_key,
            platform_cert_serial=merchant.platform_cert_serial,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self.to_entity(model)

    @staticmethod
    def to_entity(model: MerchantModel) -> Merchant:
        return Merchant(
            id=model.id,
            mch_id=model.mch_id,
            api_v3_key=model.api_v3_key,
            platform_cert_serial=model.platform_cert_serial,
        )


class PayOrderRepository:
    """Look up pay orders together with their merchant."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_trade_no(self, trade_no: str) -> PayOrder | None:
        model = (
            self.session.query(PayOrderModel)
            .filter(PayOrderModel.trade_no == trade_no)
            .one_or_none()
        )
        return self._to_entity(model) if model else None

    def create(self, pay_order: PayOrder) -> PayOrder:
        model = PayOrderModel(
            app_id=pay_order.app_id,
            trade_no=pay_order.trade_no,
            open_id=pay_order.open_id,
            attach=pay_order.attach,
            total_fee=pay_order.total_fee,
            status=pay_order.status,
            merchant_id=pay_order.merchant.id if pay_order.merchant else None,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: PayOrderModel) -> PayOrder:
        return PayOrder(
            id=model.id,
            app_id=model.app_id,
            trade_no=model.trade_no,
            open_id=model.open_id,
            attach=model.attach,
            total_fee=model.total_fee,
            status=model.status,
            merchant=MerchantRepository.to_entity(model.merchant)
            if model.merchant is not None
            else None,
        )


class MiniProgramUserRepository:
    """Find users by ``open_id`` and record their union id."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_open_id(
        self, open_id: str, *, account_id: int | None = None
    ) -> MiniProgramUser | None:
        query = self.session.query(MiniProgramUserModel).filter(
            MiniProgramUserModel.open_id == open_id
        )
        if account_id is not None:
            query = query.filter(MiniProgramUserModel.account_id == account_id)
        model = query.order_by(MiniProgramUserModel.id).first()
        return self._to_entity(model) if model else None

    def create(self, user: MiniProgramUser) -> MiniProgramUser:
        model = MiniProgramUserModel(
            account_id=user.account_id,
            open_id=user.open_id,
            union_id=user.union_id,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, user: MiniProgramUser) -> MiniProgramUser:
        model = self.session.get(MiniProgramUserModel, user.id) if user.id else None
        if model is None:
            msg = f"Mini-program user with id {user.id} not found"
            raise ValueError(msg)
        model.open_id = user.open_id
        model.union_id = user.union_id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: MiniProgramUserModel) -> MiniProgramUser:
        return MiniProgramUser(
            id=model.id,
            account_id=model.account_id,
            open_id=model.open_id,
            union_id=model.union_id,
        )


__all__ = [
    "AccountRepository",
    "MerchantRepository",
    "MiniProgramUserRepository",
    "PayOrderRepository",
]
