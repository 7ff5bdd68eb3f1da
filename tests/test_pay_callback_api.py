"""HTTP tests for the pay callback endpoint and the audit listing."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import reset_settings_cache
from app.domain.entities import (
    CallbackResponse,
    PayCallbackEvent,
    PayCallbackFailedEvent,
    PayCallbackSuccessEvent,
    PayOrder,
)
from app.domain.exceptions import PayNotificationDecodingError
from app.infrastructure.events import CallbackEventDispatcher
from app.infrastructure.repositories import NotificationRecordRepository
from app.interfaces.api.dependencies import (
    get_callback_dispatcher,
    get_pay_notification_verifier,
)
from main import create_app

from conftest import RecordingReactor, StubVerifier

CALLBACK_URL = "/wechat-payment/mini-program/pay/wx-app-1/T20240101000001"
ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}
BODY = b'{"id": "EV-1", "event_type": "TRANSACTION.SUCCESS"}'


@pytest.fixture()
def dispatcher() -> CallbackEventDispatcher:
    return CallbackEventDispatcher()


@pytest.fixture()
def verifier() -> StubVerifier:
    return StubVerifier(fields={"transaction_id": "4200000001"})


@pytest.fixture()
def client(verifier: StubVerifier, dispatcher: CallbackEventDispatcher) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_pay_notification_verifier] = lambda: verifier
    app.dependency_overrides[get_callback_dispatcher] = lambda: dispatcher
    return TestClient(app)


def test_verified_callback_is_acknowledged_with_empty_body(
    client: TestClient,
    dispatcher: CallbackEventDispatcher,
    verifier: StubVerifier,
    pay_order: PayOrder,
) -> None:
    reactor = RecordingReactor()
    dispatcher.subscribe(PayCallbackSuccessEvent, reactor)

    response = client.post(
        CALLBACK_URL,
        content=BODY,
        headers={"Wechatpay-Signature": "sig", "Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.content == b""
    assert len(reactor.events) == 1
    raw_body, context = verifier.calls[0]
    assert raw_body == BODY
    assert context.header("Wechatpay-Signature") == "sig"


def test_failed_verification_answers_with_fail_json(
    client: TestClient,
    dispatcher: CallbackEventDispatcher,
    verifier: StubVerifier,
    pay_order: PayOrder,
) -> None:
    verifier.error = PayNotificationDecodingError("Signature verification failed")
    reactor = RecordingReactor()
    dispatcher.subscribe(PayCallbackFailedEvent, reactor)

    response = client.post(CALLBACK_URL, content=BODY)

    assert response.status_code == 400
    assert response.json() == {"code": "FAIL", "message": "Signature verification failed"}
    assert len(reactor.events) == 1


def test_reactor_can_choose_the_reply(
    client: TestClient, dispatcher: CallbackEventDispatcher, pay_order: PayOrder
) -> None:
    def reply(event: PayCallbackEvent) -> None:
        event.response = CallbackResponse(status_code=200, body={"code": "SUCCESS"})

    dispatcher.subscribe(PayCallbackEvent, reply)

    response = client.post(CALLBACK_URL, content=BODY)

    assert response.status_code == 200
    assert response.json() == {"code": "SUCCESS"}


def test_unknown_order_is_rejected_and_audited(
    client: TestClient, dispatcher: CallbackEventDispatcher, db_session: Session, account
) -> None:
    reactor = RecordingReactor()
    dispatcher.subscribe(PayCallbackEvent, reactor)

    response = client.post(
        "/wechat-payment/mini-program/pay/wx-app-1/UNKNOWN", content=BODY
    )

    assert response.status_code == 400
    assert response.json()["code"] == "FAIL"
    assert reactor.events == []
    assert NotificationRecordRepository(db_session).count() == 1


def test_storage_failure_answers_500(
    client: TestClient,
    dispatcher: CallbackEventDispatcher,
    pay_order: PayOrder,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    from sqlalchemy.exc import OperationalError

    def broken_create(self, record):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(NotificationRecordRepository, "create", broken_create)
    reactor = RecordingReactor()
    dispatcher.subscribe(PayCallbackEvent, reactor)

    response = client.post(CALLBACK_URL, content=BODY)

    assert response.status_code == 500
    assert response.json()["code"] == "FAIL"
    assert reactor.events == []


def test_notify_messages_are_listed_newest_first(
    client: TestClient, pay_order: PayOrder
) -> None:
    client.post(CALLBACK_URL, content=b'{"id": "EV-1"}')
    client.post(CALLBACK_URL, content=b'{"id": "EV-2"}')

    response = client.get("/payment-notify-messages/", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    payload = response.json()
    assert [item["raw_data"] for item in payload] == ['{"id": "EV-2"}', '{"id": "EV-1"}']
    assert all(item["create_time"] for item in payload)

    filtered = client.get(
        "/payment-notify-messages/", params={"keyword": "EV-1"}, headers=ADMIN_HEADERS
    )
    assert [item["raw_data"] for item in filtered.json()] == ['{"id": "EV-1"}']

    detail = client.get(
        f"/payment-notify-messages/{payload[0]['id']}", headers=ADMIN_HEADERS
    )
    assert detail.status_code == 200
    assert detail.json()["raw_data"] == '{"id": "EV-2"}'


def test_missing_notify_message_returns_404(client: TestClient) -> None:
    response = client.get("/payment-notify-messages/999", headers=ADMIN_HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"] == "Pay notification not found"


def test_notify_messages_require_admin_token(client: TestClient) -> None:
    assert client.get("/payment-notify-messages/").status_code == 401
    assert (
        client.get(
            "/payment-notify-messages/", headers={"X-Admin-Token": "wrong"}
        ).status_code
        == 401
    )


def test_notify_messages_unavailable_without_configured_token(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("ADMIN_API_TOKEN")
    reset_settings_cache()
    try:
        response = client.get("/payment-notify-messages/", headers=ADMIN_HEADERS)
    finally:
        monkeypatch.undo()
        reset_settings_cache()

    assert response.status_code == 503


def test_listing_rejects_out_of_range_limit(client: TestClient) -> None:
    response = client.get(
        "/payment-notify-messages/", params={"limit": 1000}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 422
