from fastapi import FastAPI

from .notify_messages import router as notify_messages_router
from .pay_callbacks import router as pay_callbacks_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(pay_callbacks_router)
    app.include_router(notify_messages_router)
