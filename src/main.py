"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from api.exception_handlers import setup_exception_handlers
from api.middleware.request_context import RequestIDMiddleware, RequestLoggingMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from infrastructure.database.session import dispose_engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Refuse to start without required settings; release the pool on shutdown."""
    missing = settings.missing_required()
    if missing:
        logger.error("startup_configuration_missing", missing=missing)
        raise ConfigurationError(missing)

    if not settings.telegram_webhook_secret:
        logger.warning("webhook_secret_not_configured", effect="all updates answered with 503")

    logger.info("startup", environment=settings.app_env, model=settings.openai_model)
    yield
    await dispose_engine()
    logger.info("shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Telegram ingestion gateway\n\n"
            "Authenticates Telegram webhook updates, resolves each sender to a "
            "durable profile and chat, runs timezone onboarding for new users "
            "and hands every other message to the processing service.\n\n"
            "### Authentication\n"
            "Telegram must send the configured secret in the "
            "`X-Telegram-Bot-Api-Secret-Token` header. Without a configured "
            "secret every update is refused with 503."
        ),
        version="1.0.0",
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "telegram",
                "description": "Telegram webhook",
            },
        ],
    )

    # LIFO order - last added = outermost
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
