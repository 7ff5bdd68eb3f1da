"""Client for the mini-program server API.

Only the endpoints the callback reactors need are implemented: access token
retrieval and ``getpaidunionid``.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import httpx

from app.config import get_settings
from app.domain.entities import Account
from app.domain.exceptions import MiniProgramApiError, PaymentConfigurationError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_PATH = "/cgi-bin/token"
GET_PAID_UNION_ID_PATH = "/wxa/getpaidunionid"

# Refresh tokens this many seconds before WeChat says they expire.
_TOKEN_EXPIRY_MARGIN = 300

_token_cache: dict[str, tuple[str, float]] = {}
_token_lock = threading.Lock()


def clear_access_token_cache() -> None:
    """Forget every cached access token."""

    with _token_lock:
        _token_cache.clear()


class MiniProgramClient:
    """Account-scoped wrapper around the mini-program HTTP API."""

    def __init__(
        self,
        account: Account,
        *,
        base_url: str,
        timeout: float = 5.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.account = account
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_http = http_client is None

    @classmethod
    def for_account(cls, account: Account) -> "MiniProgramClient":
        """Build a client for ``account`` using the configured API settings."""

        settings = get_settings()
        return cls(
            account,
            base_url=settings.wechat_api_base_url,
            timeout=settings.wechat_api_timeout_seconds,
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "MiniProgramClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_access_token(self) -> str:
        """Return a valid access token, fetching a new one when needed."""

        app_id = self.account.app_id
        with _token_lock:
            cached = _token_cache.get(app_id)
            if cached and cached[1] > time.monotonic():
                return cached[0]

        if not self.account.app_secret:
            raise PaymentConfigurationError(
                f"Mini-program {app_id} has no app secret configured"
            )

        payload = self._get(
            ACCESS_TOKEN_PATH,
            params={
                "grant_type": "client_credential",
                "appid": app_id,
                "secret": self.account.app_secret,
            },
        )
        token = payload.get("access_token")
        if not isinstance(token, str) or not token:
            raise MiniProgramApiError("Access token response did not contain a token")

        expires_in = int(payload.get("expires_in") or 7200)
        with _token_lock:
            _token_cache[app_id] = (
                token,
                time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0),
            )
        return token

    def resolve_union_id(
        self,
        open_id: str,
        *,
        transaction_id: str | None = None,
        mch_id: str | None = None,
        out_trade_no: str | None = None,
    ) -> str | None:
        """Return the union id of a user who has just paid, if WeChat knows it.

        See https://developers.weixin.qq.com/miniprogram/dev/OpenApiDoc/user-info/basic-info/getPaidUnionid.html
        """

        params: dict[str, str] = {
            "access_token": self.get_access_token(),
            "openid": open_id,
        }
        if transaction_id:
            params["transaction_id"] = transaction_id
        if mch_id:
            params["mch_id"] = mch_id
        if out_trade_no:
            params["out_trade_no"] = out_trade_no

        payload = self._get(GET_PAID_UNION_ID_PATH, params=params)
        union_id = payload.get("unionid")
        if isinstance(union_id, str) and union_id:
            return union_id
        return None

    def _get(self, path: str, *, params: dict[str, str]) -> dict[str, Any]:
        response = self._http.get(path, params=params)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise MiniProgramApiError(f"{path} returned a non-JSON response") from exc
        if not isinstance(payload, dict):
            raise MiniProgramApiError(f"{path} returned an unexpected payload")

        errcode = payload.get("errcode") or 0
        if errcode:
            message = payload.get("errmsg") or "unknown error"
            logger.warning(
                "Mini-program API %s failed for %s: %s (%s)",
                path,
                self.account.app_id,
                message,
                errcode,
            )
            raise MiniProgramApiError(f"{path} failed: {message}", errcode=int(errcode))
        return payload


__all__ = ["MiniProgramClient", "clear_access_token_cache"]
