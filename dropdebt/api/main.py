"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from dropdebt.api.middleware import MetricsMiddleware, RequestIDMiddleware
from dropdebt.api.v1 import alerts, priority, progress, timeline, triage
from dropdebt.config import settings
from dropdebt.infrastructure.database.models import Base
from dropdebt.infrastructure.database.session import engine
from dropdebt.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        lifespan=lifespan,
        title="DropDebt Priority Engine",
        description="Consequence-based bill priority, crisis triage and consequence timeline",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(priority.router, prefix="/v1", tags=["priority"])
    app.include_router(triage.router, prefix="/v1", tags=["triage"])
    app.include_router(timeline.router, prefix="/v1", tags=["timeline"])
    app.include_router(progress.router, prefix="/v1", tags=["progress"])
    app.include_router(alerts.router, prefix="/v1", tags=["alerts"])

    return app


app = create_app()
