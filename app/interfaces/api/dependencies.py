"""FastAPI dependency utilities."""

from __future__ import annotations

import secrets
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from app.application.reactors import build_callback_dispatcher
from app.config import get_settings
from app.infrastructure.database import SessionLocal
from app.infrastructure.events import CallbackEventDispatcher
from app.infrastructure.wechat import (
    MiniProgramClient,
    PayNotificationVerifier,
    WechatPayNotificationVerifier,
)

admin_token_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


@lru_cache
def get_pay_notification_verifier() -> PayNotificationVerifier:
    """Return the verifier used for inbound pay notifications."""

    return WechatPayNotificationVerifier(get_settings().wechat_pay_cert_dir)


@lru_cache
def get_callback_dispatcher() -> CallbackEventDispatcher:
    """Return the process-wide dispatcher with its reactors registered."""

    return build_callback_dispatcher(SessionLocal, MiniProgramClient.for_account)


def require_admin_token(token: str | None = Depends(admin_token_header)) -> None:
    """Reject requests whose ``X-Admin-Token`` does not match the configured token."""

    expected = get_settings().admin_api_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API is not configured",
        )
    if token is None or not secrets.compare_digest(token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token",
        )


__all__ = [
    "get_callback_dispatcher",
    "get_pay_notification_verifier",
    "require_admin_token",
]
