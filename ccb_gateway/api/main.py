"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ccb_gateway.api.errors import register_exception_handlers
from ccb_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ccb_gateway.api.v1 import accounts, loans, notifications, users, withdrawals
from ccb_gateway.infrastructure.database.models import Base
from ccb_gateway.infrastructure.database.session import engine
from ccb_gateway.infrastructure.observability.logging import setup_logging
from ccb_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Central City Bank Gateway",
        description="Accounts, staged withdrawals, loans and notifications",
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
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(withdrawals.router, prefix="/v1", tags=["withdrawals"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])

    return app


app = create_app()
