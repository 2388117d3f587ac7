# backend/menu_booking/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response

from .core.config import settings
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import availability as availability_v1, bookings as bookings_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

API_TITLE = "Menu Booking API"
API_VERSION = "1.0.0"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{API_TITLE} starting up...")
    logger.info(
        f"Environment: {settings.environment} (lock backend={settings.booking_lock_backend})"
    )
    if settings.is_sqlite:
        # Local runs skip Alembic; PostgreSQL deployments migrate explicitly.
        init_db()
    yield
    logger.info(f"{API_TITLE} shutting down...")


def create_app() -> FastAPI:
    application = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    register_error_handlers(application)

    api_v1 = APIRouter(prefix="/api/v1")
    # /bookings/available-slots/{item_id} is declared before /bookings/{booking_id}
    api_v1.include_router(bookings_v1.router, prefix="/bookings")
    api_v1.include_router(availability_v1.router, prefix="/availability")
    application.include_router(api_v1)

    @application.get("/health", include_in_schema=False)
    def health_check() -> dict[str, str]:
        return {"status": "ok", "environment": settings.environment}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return application


app = create_app()
