"""Shared fixtures: an in-memory database seeded with one paying customer."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from typing import Any

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"
os.environ["APP_TIMEZONE"] = "Asia/Shanghai"

from sqlalchemy.orm import Session  # noqa: E402

from app.domain.entities import (  # noqa: E402
    Account,
    Merchant,
    MiniProgramUser,
    PayOrder,
)
from app.infrastructure import database  # noqa: E402
from app.infrastructure.repositories import (  # noqa: E402
    AccountRepository,
    MerchantRepository,
    MiniProgramUserRepository,
    PayOrderRepository,
)
from app.infrastructure.wechat import (  # noqa: E402
    CallbackContext,
    PayNotificationVerifier,
    VerifiedNotification,
    clear_access_token_cache,
)

API_V3_KEY = "0123456789abcdef0123456789abcdef"


class StubVerifier(PayNotificationVerifier):
    """Verifier returning canned fields, or raising ``error`` when set."""

    def __init__(
        self, fields: Mapping[str, Any] | None = None, error: Exception | None = None
    ) -> None:
        self.fields = dict(fields or {})
        self.error = error
        self.calls: list[tuple[bytes, CallbackContext]] = []

    def verify_and_decrypt(
        self, raw_body: bytes, context: CallbackContext
    ) -> VerifiedNotification:
        self.calls.append((raw_body, context))
        if self.error is not None:
            raise self.error
        return VerifiedNotification(
            pay_order=context.pay_order, account=context.account, fields=dict(self.fields)
        )


class RecordingReactor:
    """Reactor remembering every event it receives."""

    def __init__(self, name: str = "recorder", log: list[str] | None = None) -> None:
        self.name = name
        self.events: list[Any] = []
        self.log = log

    def __call__(self, event: Any) -> None:
        self.events.append(event)
        if self.log is not None:
            self.log.append(self.name)


@pytest.fixture(autouse=True)
def _reset_database() -> Iterator[None]:
    database.initialize_database()
    database.Base.metadata.drop_all(bind=database.engine)
    database.Base.metadata.create_all(bind=database.engine)
    clear_access_token_cache()
    yield
    database.Base.metadata.drop_all(bind=database.engine)


@pytest.fixture()
def db_session() -> Iterator[Session]:
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def account(db_session: Session) -> Account:
    return AccountRepository(db_session).create(
        Account(id=None, app_id="wx-app-1", app_secret="app-secret", name="Shop")
    )


@pytest.fixture()
def merchant(db_session: Session) -> Merchant:
    return MerchantRepository(db_session).create(
        Merchant(id=None, mch_id="1900000001", api_v3_key=API_V3_KEY)
    )


@pytest.fixture()
def pay_order(db_session: Session, account: Account, merchant: Merchant) -> PayOrder:
    return PayOrderRepository(db_session).create(
        PayOrder(
            id=None,
            app_id=account.app_id,
            trade_no="T20240101000001",
            open_id="open-id-1",
            attach='{"order_id": 123, "order_sn": "ORDER-001"}',
            total_fee=10000,
            merchant=merchant,
        )
    )


@pytest.fixture()
def paying_user(db_session: Session, account: Account) -> MiniProgramUser:
    return MiniProgramUserRepository(db_session).create(
        MiniProgramUser(id=None, account_id=account.id, open_id="open-id-1")
    )
