"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from newsbrief.api.v1.router import api_router
from newsbrief.config import Settings, get_settings
from newsbrief.db.postgres import create_engine, create_session_factory, init_db
from newsbrief.services.errors import NewsbriefError, NoEligibleContentError, http_status_for
from newsbrief.services.news_client import NewsApiClient
from newsbrief.services.summarizer import GeminiSummarizer

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    settings: Settings = app.state.settings

    missing = settings.missing_secrets()
    if missing:
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")

    logger.info("Starting %s in %s mode", settings.app_name, settings.environment)

    engine = create_engine(settings)
    await init_db(engine)
    app.state.session_factory = create_session_factory(engine)
    app.state.news_client = NewsApiClient(settings)
    app.state.summarizer = GeminiSummarizer(settings)
    logger.info("Account store initialized")

    try:
        yield
    finally:
        logger.info("Shutting down...")
        await app.state.news_client.close()
        await app.state.summarizer.close()
        await engine.dispose()


async def handle_newsbrief_error(request: Request, exc: NewsbriefError) -> JSONResponse:
    """Render a batch-level failure as a JSON error response."""
    content: dict[str, object] = {
        "error": exc.message,
        "kind": exc.kind.value,
        "api": exc.api,
    }
    if isinstance(exc, NoEligibleContentError):
        content["total_results"] = exc.total_results
        content["suggestion"] = exc.suggestion
    return JSONResponse(status_code=http_status_for(exc), content=content)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Top news headlines with short AI-generated summaries",
        version="0.1.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NewsbriefError, handle_newsbrief_error)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    return app


app = create_app()
