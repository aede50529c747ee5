"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and runs the
sync worker and change watcher for the lifetime of the app.

Dependencies: fastapi, ragsync.api, ragsync.observability, ragsync.configs
System role: Application initialization and configuration
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ragsync import __version__
from ragsync.api.routers import health_router, search_router, sync_router
from ragsync.configs import Settings, get_settings
from ragsync.container import ServiceContainer
from ragsync.core.sync_queue import SyncQueue, watch
from ragsync.observability.logger import configure_logging
from ragsync.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def _build_lifespan(settings: Settings, container: ServiceContainer | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan context manager.

        Startup: schema initialization, sync worker, optional initial pass
        and watcher. Shutdown: stop watcher, drain queue, dispose engine.
        """
        configure_logging(settings.log_level)
        logger.info("Application startup: logging configured")

        services = container or ServiceContainer(settings)
        try:
            await services.refresher.initialize()
            await services.retriever.check_index_status()
        except Exception as e:
            logger.exception(
                "Failed to initialize application resources",
                extra={"error": str(e)},
            )
            raise

        queue = SyncQueue(services.refresher)
        queue.start()
        stop_event = asyncio.Event()
        watcher = None

        if settings.sync.sync_on_startup:
            queue.submit("startup").add_done_callback(lambda f: f.cancelled() or f.exception())
        if settings.sync.watch_enabled:
            watcher = asyncio.create_task(
                watch(
                    services.refresher,
                    queue,
                    settings.sync.watch_interval_seconds,
                    stop_event,
                ),
                name="ragsync-watcher",
            )

        app.state.container = services
        app.state.sync_queue = queue
        logger.info("Application startup complete: all resources initialized")

        yield

        logger.info("Application shutdown")
        stop_event.set()
        if watcher is not None:
            await watcher
        await queue.stop()
        await services.close()

    return lifespan


def create_app(
    settings: Settings | None = None,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings (loaded from environment if omitted)
        container: Prebuilt service container (built at startup if omitted)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="ragsync",
        description="Keeps a pgvector index synchronized with an S3 document corpus",
        version=__version__,
        lifespan=_build_lifespan(settings, container),
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(search_router, prefix="/api/v1")
    app.include_router(sync_router, prefix="/api/v1")

    return app
