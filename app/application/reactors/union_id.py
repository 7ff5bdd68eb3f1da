"""Record the union id of users right after they pay."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Callable, Protocol

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import Account, PayCallbackSuccessEvent
from app.domain.exceptions import MiniProgramApiError, PaymentConfigurationError
from app.infrastructure.repositories import MiniProgramUserRepository

logger = logging.getLogger(__name__)


class UnionIdResolver(Protocol):
    """Account-scoped client able to look up a paying user's union id."""

    def resolve_union_id(
        self, open_id: str, *, transaction_id: str | None = None
    ) -> str | None: ...

    def close(self) -> None: ...


class PaySuccessUnionIdReactor:
    """Backfill ``union_id`` for the paying user when it is still unknown.

    WeChat only answers ``getpaidunionid`` for a few minutes after payment,
    which is why this runs on the success callback. Every failure is logged
    and swallowed so the provider still gets its acknowledgment.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        client_factory: Callable[[Account], UnionIdResolver],
    ) -> None:
        self._session_factory = session_factory
        self._client_factory = client_factory

    def __call__(self, event: PayCallbackSuccessEvent) -> None:
        open_id = event.pay_order.open_id
        if not open_id:
            return

        with closing(self._session_factory()) as session:
            repository = MiniProgramUserRepository(session)
            user = repository.get_by_open_id(open_id, account_id=event.account.id)
            if user is None:
                logger.info("No local user for open id %s; skipping union id lookup", open_id)
                return
            if user.has_union_id():
                return

            transaction_id = event.decrypt_data.get("transaction_id")
            try:
                with closing(self._client_factory(event.account)) as client:
                    union_id = client.resolve_union_id(
                        open_id,
                        transaction_id=transaction_id if isinstance(transaction_id, str) else None,
                    )
            except (MiniProgramApiError, PaymentConfigurationError, httpx.HTTPError) as exc:
                logger.error("Fetching union id after payment failed for %s: %s", open_id, exc)
                return

            if not union_id:
                logger.error("Union id response for open id %s was empty", open_id)
                return

            user.union_id = union_id
            try:
                repository.update(user)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error("Saving union id for open id %s failed: %s", open_id, exc)
                return
            logger.info("Recorded union id for open id %s", open_id)


__all__ = ["PaySuccessUnionIdReactor", "UnionIdResolver"]
