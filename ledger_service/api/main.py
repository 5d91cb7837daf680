"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ledger_service.api.dependencies import get_store
from ledger_service.api.errors import register_error_handlers
from ledger_service.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ledger_service.api.v1 import accounts, transfers, users
from ledger_service.infrastructure.observability.logging import setup_logging
from ledger_service.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup against whichever store the app resolves"""
    if settings.create_schema_on_startup:
        store = app.dependency_overrides.get(get_store, get_store)()
        store.create_schema()
        logging.info("Ledger schema ready")
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Ledger Service",
        description="Accounts, deposits and idempotent transfers",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(transfers.router, prefix="/v1", tags=["transfers"])

    return app


app = create_app()
