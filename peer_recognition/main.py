"""
peer_recognition/main.py
FastAPI application: peer recognition API
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from peer_recognition.config.settings import Settings, get_settings
from peer_recognition.config.feature_flags import feature_flags
from peer_recognition.middleware.error_handler import setup_error_handlers
from peer_recognition.rate_limit import limiter
from peer_recognition.routes import router
from peer_recognition.storage import DocumentStore, create_document_store
from peer_recognition.tasks.auto_transition import start_auto_transition_task

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8000",
]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Defaults to the environment-derived settings
        store: Pre-built document store (tests); otherwise chosen from settings
    """
    settings = settings or get_settings()
    store = store or create_document_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting application...")
        try:
            await store.connect()
            logger.info(f"✓ Document store ready ({store.name})")
        except Exception as e:
            logger.error(f"Failed to connect document store: {str(e)}")
            raise

        sweep_task = None
        if settings.auto_transition_interval_seconds > 0:
            sweep_task = start_auto_transition_task(store, settings.auto_transition_interval_seconds)

        yield

        logger.info("Shutting down application...")
        if sweep_task is not None:
            sweep_task.cancel()
            try:
                await sweep_task
            except asyncio.CancelledError:
                pass
        await store.close()
        logger.info("Document store closed")

    is_development = settings.environment == "development"
    app = FastAPI(
        title="Peer Recognition API",
        description="Time-boxed chapters of peer notes and 100-point recognition allocations",
        version="1.0.0",
        docs_url="/docs" if is_development else None,
        redoc_url="/redoc" if is_development else None,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.settings = settings

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=DEFAULT_ORIGINS + settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_error_handlers(app, debug=is_development)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        return {
            "status": "healthy",
            "environment": settings.environment,
            "storage": request.app.state.store.name,
            "features": feature_flags.get_all_flags(),
            "version": "1.0.0",
        }

    app.include_router(router, prefix="/api")
    return app


def build_default_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    return create_app(settings)


app = build_default_app()
