"""Reactors subscribed to payment callback events, and their wiring."""

from __future__ import annotations

from typing import Callable

from sqlalchemy.orm import Session

from app.domain.entities import (
    Account,
    PayCallbackEvent,
    PayCallbackSuccessEvent,
)
from app.infrastructure.events import CallbackEventDispatcher

from .payment_bridge import AttachData, PaymentEventBridgeReactor, fen_to_yuan
from .union_id import PaySuccessUnionIdReactor, UnionIdResolver


def build_callback_dispatcher(
    session_factory: Callable[[], Session],
    client_factory: Callable[[Account], UnionIdResolver],
) -> CallbackEventDispatcher:
    """Return a dispatcher with the default reactors registered in order.

    The union id backfill runs first, then the bridge republishes each outcome
    as :class:`PaymentSucceeded` or :class:`PaymentFailed` on the same
    dispatcher. Nothing here consumes those; order and accounting modules
    subscribe to them on the returned dispatcher.
    """

    dispatcher = CallbackEventDispatcher()
    dispatcher.subscribe(
        PayCallbackSuccessEvent,
        PaySuccessUnionIdReactor(session_factory, client_factory),
    )
    dispatcher.subscribe(PayCallbackEvent, PaymentEventBridgeReactor(dispatcher))
    return dispatcher


__all__ = [
    "AttachData",
    "PaySuccessUnionIdReactor",
    "PaymentEventBridgeReactor",
    "UnionIdResolver",
    "build_callback_dispatcher",
    "fen_to_yuan",
]
