"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from license_ledger.api.dependencies import get_current_user
from license_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from license_ledger.api.v1 import agreements, categories, customers, product_types, reports, users
from license_ledger.domain.exceptions import (
    AuthorizationError,
    ComputationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from license_ledger.infrastructure.database.session import init_db
from license_ledger.infrastructure.observability.logging import setup_logging
from license_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        init_db()
    yield


def _error(status_code: int, detail: str, request: Request) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    logging.warning(f"{request.method} {request.url.path} failed: {detail}", extra={"request_id": request_id})
    return JSONResponse(status_code=status_code, content={"detail": detail})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="License Ledger",
        description="Customers, license agreements, revenue and billing reports",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc), request)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error(409, str(exc), request)

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _error(422, str(exc), request)

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(request: Request, exc: AuthorizationError):
        return _error(exc.status_code, str(exc), request)

    @app.exception_handler(ComputationError)
    async def computation_handler(request: Request, exc: ComputationError):
        request_id = getattr(request.state, "request_id", "unknown")
        logging.error(f"Report invariant violated: {exc}", extra={"request_id": request_id})
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers; every /v1 route requires an identified caller
    authenticated = [Depends(get_current_user)]
    app.include_router(categories.router, prefix="/v1", tags=["categories"], dependencies=authenticated)
    app.include_router(product_types.router, prefix="/v1", tags=["product-types"], dependencies=authenticated)
    app.include_router(customers.router, prefix="/v1", tags=["customers"], dependencies=authenticated)
    app.include_router(agreements.router, prefix="/v1", tags=["agreements"], dependencies=authenticated)
    app.include_router(reports.router, prefix="/v1", tags=["reports"], dependencies=authenticated)
    app.include_router(users.router, prefix="/v1", tags=["users"], dependencies=authenticated)

    return app


app = create_app()
