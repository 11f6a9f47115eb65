"""FastAPI application main module.

This module builds the ShopSense application: it wires one engine instance from
settings at startup, registers the routers, maps engine exceptions to JSON
error responses, and serves the health and status endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src import __version__
from src.api.config import Settings, get_settings
from src.api.logging_config import RequestLoggingMiddleware, setup_logging
from src.api.metrics import MetricsService
from src.api.routes import assistant, recommend
from src.personalization.behavior import BehaviorStore
from src.personalization.catalog import SAMPLE_PRODUCTS, StaticCatalog, load_catalog_csv
from src.personalization.engine import EngineFacade
from src.personalization.exceptions import ShopSenseException
from src.personalization.recognition import MockRecognizer
from src.personalization.storage import (
    InMemoryStore,
    JSONFileStore,
    KeyValueStore,
    RedisStore,
)

# Configure module logger
logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> KeyValueStore:
    """Create the conversation store selected by ``storage_backend``."""
    if settings.storage_backend == "redis":
        if not settings.redis_url:
            raise ValueError("SHOPSENSE_REDIS_URL is required for the redis backend")
        return RedisStore.from_url(settings.redis_url)
    if settings.storage_backend == "file":
        return JSONFileStore(settings.history_dir)
    return InMemoryStore()


def build_engine(settings: Settings, store: Optional[KeyValueStore] = None) -> EngineFacade:
    """Create an engine from settings.

    Args:
        settings: Application settings.
        store: Store override, mainly for tests.

    Returns:
        A new EngineFacade with its own behavior store.
    """
    if settings.catalog_path:
        catalog = StaticCatalog(load_catalog_csv(settings.catalog_path))
    else:
        catalog = StaticCatalog(SAMPLE_PRODUCTS)

    logger.info(
        "Building engine",
        extra={
            "catalog_size": len(catalog),
            "storage_backend": settings.storage_backend,
        },
    )

    return EngineFacade(
        catalog=catalog,
        behavior=BehaviorStore(),
        store=store or build_store(settings),
        recognizer=MockRecognizer(catalog.product_ids, seed=settings.scan_seed),
        min_scan_confidence=settings.min_scan_confidence,
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to use; defaults to ``get_settings()``.
        store: Optional conversation store override.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = build_engine(settings, store)
        await engine.load()
        app.state.engine = engine
        app.state.metrics = MetricsService()
        app.state.settings = settings
        yield
        closing = getattr(engine.conversation.store, "close", None)
        if closing is not None:
            await closing()

    app = FastAPI(
        title=settings.app_name,
        description="Shopper behavior tracking, recommendations and shopping assistant",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(ShopSenseException)
    async def shopsense_exception_handler(request: Request, exc: ShopSenseException) -> JSONResponse:
        logger.warning(
            "Request rejected",
            extra={
                "path": str(request.url.path),
                "error_type": type(exc).__name__,
                "status_code": exc.status_code,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": type(exc).__name__,
                "message": exc.message,
                "details": exc.details,
            },
        )

    app.include_router(recommend.router)
    app.include_router(assistant.router)

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Returns:
            Dictionary with status key set to "ok".

        Example:
            >>> response = client.get("/ping")
            >>> assert response.json() == {"status": "ok"}
        """
        return {"status": "ok"}

    @app.get("/status")
    def status(request: Request) -> Dict[str, Any]:
        """Report catalog size, history length and request metrics."""
        engine: EngineFacade = request.app.state.engine
        return {
            "version": __version__,
            "catalog_size": len(engine.catalog()),
            "history_size": len(engine.history()),
            "metrics": request.app.state.metrics.get_metrics(),
        }

    return app


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
