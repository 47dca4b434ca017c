from fastapi import FastAPI
from contextlib import asynccontextmanager
from loguru import logger
from docfetch.api.routes import router
from docfetch.cache.db import SqliteCacheStore
from docfetch.core.config import settings
from docfetch.core.logging import configure_logging
from docfetch.fetch.requests_fetcher import RequestsFetcher
from docfetch.services.refresh import RefreshOrchestrator
from docfetch.services.registry import DocumentRegistry
from docfetch.services.scheduler import RefreshScheduler

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Build the store and refresh pipeline on startup, stop the schedule on shutdown.
    """
    configure_logging()
    logger.info("Initializing Document Export Fetcher...")

    store = SqliteCacheStore(settings.DATABASE_PATH)
    orchestrator = RefreshOrchestrator(store, RequestsFetcher())
    scheduler = RefreshScheduler(orchestrator)

    app.state.store = store
    app.state.registry = DocumentRegistry(store)
    app.state.orchestrator = orchestrator
    app.state.scheduler = scheduler
    logger.info("Database ready at {}", settings.DATABASE_PATH)

    if settings.SCHEDULER_ENABLED:
        scheduler.start()

    yield

    logger.info("Shutting down Document Export Fetcher...")
    scheduler.stop()

app = FastAPI(
    title="Document Export Fetcher",
    description="Periodically fetches exported HTML documents, sanitizes and caches them",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(router)

@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "service": "Document Export Fetcher",
        "version": "1.0.0",
        "endpoints": {
            "document": "GET /documents/{id}",
            "list": "GET /admin/documents",
            "save": "POST /admin/documents",
            "delete": "DELETE /admin/documents/{id}",
            "refresh": "POST /admin/refresh",
            "schedule": "GET /admin/schedule",
            "health": "GET /health",
            "cache_stats": "GET /cache/stats"
        }
    }
