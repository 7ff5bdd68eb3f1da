"""Tests for the ordered, failure-isolating callback event dispatcher."""

from __future__ import annotations

import logging

import pytest

from app.domain.entities import (
    Account,
    CallbackResponse,
    PayCallbackEvent,
    PayCallbackFailedEvent,
    PayCallbackSuccessEvent,
    PayOrder,
)
from app.infrastructure.events import CallbackEventDispatcher

from conftest import RecordingReactor


def _success_event() -> PayCallbackSuccessEvent:
    return PayCallbackSuccessEvent(
        pay_order=PayOrder(id=1, app_id="wx-app-1", trade_no="T1"),
        account=Account(id=1, app_id="wx-app-1"),
        decrypt_data={"transaction_id": "TX1"},
    )


def test_reactors_run_in_registration_order() -> None:
    dispatcher = CallbackEventDispatcher()
    log: list[str] = []
    dispatcher.subscribe(PayCallbackSuccessEvent, RecordingReactor("first", log))
    dispatcher.subscribe(PayCallbackEvent, RecordingReactor("second", log))
    dispatcher.subscribe(PayCallbackSuccessEvent, RecordingReactor("third", log))

    dispatcher.publish(_success_event())

    assert log == ["first", "second", "third"]


def test_reactors_only_receive_matching_events() -> None:
    dispatcher = CallbackEventDispatcher()
    on_success = RecordingReactor()
    on_failure = RecordingReactor()
    on_any = RecordingReactor()
    dispatcher.subscribe(PayCallbackSuccessEvent, on_success)
    dispatcher.subscribe(PayCallbackFailedEvent, on_failure)
    dispatcher.subscribe(PayCallbackEvent, on_any)

    event = _success_event()
    dispatcher.publish(event)

    assert on_success.events == [event]
    assert on_failure.events == []
    assert on_any.events == [event]


def test_failing_reactor_is_logged_and_does_not_stop_others(
    caplog: pytest.LogCaptureFixture,
) -> None:
    dispatcher = CallbackEventDispatcher()
    after = RecordingReactor()

    def explode(event: PayCallbackEvent) -> None:
        raise RuntimeError("boom")

    dispatcher.subscribe(PayCallbackEvent, explode)
    dispatcher.subscribe(PayCallbackEvent, after)

    event = _success_event()
    with caplog.at_level(logging.ERROR):
        returned = dispatcher.publish(event)

    assert returned is event
    assert after.events == [event]
    assert "explode" in caplog.text
    assert "boom" in caplog.text


def test_response_set_by_a_reactor_is_visible_to_later_ones() -> None:
    dispatcher = CallbackEventDispatcher()
    seen: list[CallbackResponse | None] = []

    def first(event: PayCallbackEvent) -> None:
        event.response = CallbackResponse(status_code=202)

    def second(event: PayCallbackEvent) -> None:
        seen.append(event.response)
        event.response = CallbackResponse(status_code=204)

    dispatcher.subscribe(PayCallbackEvent, first)
    dispatcher.subscribe(PayCallbackEvent, second)

    event = dispatcher.publish(_success_event())

    assert seen == [CallbackResponse(status_code=202)]
    assert event.response == CallbackResponse(status_code=204)


def test_reactors_for_matches_event_type() -> None:
    dispatcher = CallbackEventDispatcher()
    reactor = RecordingReactor()
    dispatcher.subscribe(PayCallbackFailedEvent, reactor)

    assert dispatcher.reactors_for(_success_event()) == []

    failed = PayCallbackFailedEvent(
        pay_order=PayOrder(id=1, app_id="wx-app-1", trade_no="T1"),
        account=Account(id=1, app_id="wx-app-1"),
    )
    assert dispatcher.reactors_for(failed) == [reactor]


def test_outcome_tags() -> None:
    assert PayCallbackSuccessEvent.outcome == "success"
    assert PayCallbackFailedEvent.outcome == "failure"
