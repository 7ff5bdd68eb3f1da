import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.interfaces.api.dependencies import get_pay_notification_verifier
from app.interfaces.api.routes import register_routes
from app.infrastructure.database import engine, initialize_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare logging, tables and the verifier at startup; release the engine on shutdown."""

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    initialize_database()
    # Fails here rather than per request when the build cannot decrypt callbacks.
    get_pay_notification_verifier()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Mini-program pay callbacks", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
