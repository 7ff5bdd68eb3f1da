"""Endpoints receiving WeChat Pay notifications for mini-program orders."""

from __future__ import annotations

import logging
from functools import partial

from anyio import to_thread
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.application.use_cases.pay_callbacks import handle_pay_notification
from app.domain.entities import CallbackResponse
from app.domain.exceptions import NotifyMessageStorageError, PayNotificationDecodingError
from app.infrastructure.database import get_db
from app.infrastructure.events import CallbackEventDispatcher
from app.infrastructure.wechat import PayNotificationVerifier
from app.interfaces.api.dependencies import (
    get_callback_dispatcher,
    get_pay_notification_verifier,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wechat-payment/mini-program", tags=["pay_callbacks"])


def _to_http_response(result: CallbackResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/pay/{app_id}/{trade_no}", name="wechat_mini_program_pay_callback")
async def pay_callback(
    app_id: str,
    trade_no: str,
    request: Request,
    db: Session = Depends(get_db),
    verifier: PayNotificationVerifier = Depends(get_pay_notification_verifier),
    dispatcher: CallbackEventDispatcher = Depends(get_callback_dispatcher),
) -> Response:
    """Audit, verify and dispatch a payment-success notification.

    See https://pay.weixin.qq.com/wiki/doc/apiv3/apis/chapter3_5_5.shtml
    """

    raw_body = await request.body()
    logger.debug("Pay callback for %s/%s: %s", app_id, trade_no, raw_body[:512])

    try:
        result = await to_thread.run_sync(
            partial(
                handle_pay_notification,
                db,
                app_id=app_id,
                trade_no=trade_no,
                raw_body=raw_body,
                headers=dict(request.headers),
                verifier=verifier,
                dispatcher=dispatcher,
            )
        )
    except PayNotificationDecodingError as exc:
        return _to_http_response(CallbackResponse.rejected(str(exc)))
    except NotifyMessageStorageError as exc:
        return _to_http_response(
            CallbackResponse.rejected(
                str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        )
    return _to_http_response(result)


__all__ = ["router"]
