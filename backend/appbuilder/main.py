"""App Builder Backend: FastAPI application entry point."""

import signal
from contextlib import asynccontextmanager

# Logging is configured before the rest of the package is imported so that
# no module-level logger caches the default structlog chain.
from appbuilder.core.config import get_settings
from appbuilder.core.logging import configure_structlog

_boot_settings = get_settings()
configure_structlog(
    log_level="DEBUG" if _boot_settings.debug else "INFO",
    json_logs=not _boot_settings.debug,
)

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from appbuilder.api.errors import register_exception_handlers
from appbuilder.api.routes import api_router
from appbuilder.middleware.correlation import REQUEST_ID_HEADER, setup_correlation_middleware
from appbuilder.services.generation_service import GenerationService

logger = structlog.get_logger(__name__)


def _install_drain_signal(app: FastAPI) -> None:
    """Flip ``shutting_down`` on SIGTERM so /api/health starts answering 503."""

    def on_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="draining")

    try:
        signal.signal(signal.SIGTERM, on_sigterm)
    except ValueError:
        # Not the main thread (e.g. TestClient); no drain signal
        logger.debug("sigterm_handler_skipped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the generation service (worker and sweepers) and stop it on exit."""
    app.state.shutting_down = False
    _install_drain_signal(app)

    service: GenerationService | None = getattr(app.state, "generation_service", None)
    if service is None:
        service = GenerationService.from_settings(get_settings())
        app.state.generation_service = service

    await service.start()
    logger.info("app_started", provider=service.adapter.provider_id)
    try:
        yield
    finally:
        await service.stop()
        logger.info("app_stopped")


def create_app(generation_service: GenerationService | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        generation_service: Use this service instead of building one from
            settings at startup (tests inject one with a fake adapter)
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Prompt-to-code generation backed by a single-worker job queue",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    if generation_service is not None:
        app.state.generation_service = generation_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    # Added last so it wraps CORS and sees every request first
    setup_correlation_middleware(app)

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("appbuilder.main:app", host="0.0.0.0", port=8000, reload=_boot_settings.debug)
