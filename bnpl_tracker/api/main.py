"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from bnpl_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from bnpl_tracker.api.v1 import borrowers, credit_settings, cycles, data, payments, plans, transactions
from bnpl_tracker.domain.exceptions import (
    BorrowerError,
    InvalidDateError,
    NotFoundError,
    PaymentValidationError,
    TransactionValidationError,
)
from bnpl_tracker.infrastructure.database.session import init_db
from bnpl_tracker.infrastructure.observability.logging import setup_logging
from bnpl_tracker.infrastructure.observability.metrics import storage_failures_counter, validation_failures_counter
from bnpl_tracker.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses; nothing is retried"""

    @app.exception_handler(TransactionValidationError)
    @app.exception_handler(PaymentValidationError)
    @app.exception_handler(BorrowerError)
    @app.exception_handler(InvalidDateError)
    async def validation_error(request: Request, exc: Exception):
        kind = type(exc).__name__.replace("ValidationError", "").replace("Error", "").lower()
        validation_failures_counter.labels(kind=kind).inc()
        logging.warning(f"Validation failed: {exc}", extra={"request_id": _request_id(request)})
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        # The session is closed without commit, which rolls the change back
        storage_failures_counter.inc()
        logging.error(f"Storage error: {exc}", extra={"request_id": _request_id(request)})
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="BNPL Tracker",
        description="Personal buy-now-pay-later tracker for billing cycles and borrower balances",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(borrowers.router, prefix="/v1", tags=["borrowers"])
    app.include_router(credit_settings.router, prefix="/v1", tags=["settings"])
    app.include_router(cycles.router, prefix="/v1", tags=["cycles"])
    app.include_router(plans.router, prefix="/v1", tags=["plans"])
    app.include_router(data.router, prefix="/v1", tags=["data"])

    return app


app = create_app()
