"""Punto de entrada principal para la aplicación FastAPI."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from spamguard.api.routes.health import router as health_router
from spamguard.channels.whatsapp.router import router as whatsapp_router
from spamguard.core.config import Settings, get_settings
from spamguard.core.logging import configure_logging, get_logger, resolve_log_level
from spamguard.core.middleware import RequestLoggingMiddleware
from spamguard.core.security import mask_secret

log = get_logger("spamguard")


def _configure_logging(settings: Settings) -> None:
    default_log_level = logging.DEBUG if settings.environment != "production" else logging.INFO
    log_level = resolve_log_level(settings.log_level, default=default_log_level)

    per_logger_files: dict[str, str] = {}
    if settings.log_file_path:
        log_dir = Path(settings.log_file_path).parent
        per_logger_files = {
            "spamguard.request": str(log_dir / "request.log"),
            "spamguard.channels.whatsapp": str(log_dir / "whatsapp.log"),
        }

    configure_logging(
        level=log_level,
        log_file=settings.log_file_path,
        per_logger_files=per_logger_files,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    log.info(
        "app.startup",
        extra={
            "environment": settings.environment,
            "verify_token": mask_secret(settings.verify_token),
            "phone_number_id": mask_secret(settings.phone_number_id),
            "classifier_configured": settings.classifier_configured,
            "sender_configured": settings.sender_configured,
            "signature_check": bool(settings.app_secret),
        },
    )
    if not settings.classifier_configured:
        log.warning("app.classifier_not_configured")
    if not settings.sender_configured:
        log.warning("app.sender_not_configured")
    yield
    log.info("app.shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Crea y configura la instancia de FastAPI."""
    settings = settings or get_settings()
    _configure_logging(settings)

    app = FastAPI(title="SpamGuard WhatsApp", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        RequestLoggingMiddleware,
        skip_prefixes=settings.request_log_skip_prefixes,
    )

    app.include_router(health_router)
    app.include_router(whatsapp_router)

    @app.get("/info", tags=["info"])
    def info() -> dict[str, str | bool]:
        return {
            "environment": settings.environment,
            "classifier_configured": settings.classifier_configured,
            "sender_configured": settings.sender_configured,
            "verification_configured": bool(settings.verify_token),
        }

    return app


app = create_app()


def run() -> None:
    """Arranca uvicorn con el host y puerto configurados."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
