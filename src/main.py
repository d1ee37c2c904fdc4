"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import API_VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    logger.info(
        "app_starting",
        environment=settings.app_env,
        beds24_configured=settings.beds24_configured,
        beds24_demo_mode=settings.beds24_demo_mode,
        sendgrid_configured=bool(settings.sendgrid_api_key.strip()),
    )
    if not settings.beds24_configured and not settings.beds24_demo_mode:
        logger.warning("booking_provider_unconfigured")
    yield
    logger.info("app_stopping")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Trust-network property rentals\n\n"
            "OnlyIfYouKnow lets owners invite guests into a private network, "
            "offer them trust-level discounts, and publish their properties "
            "to Beds24 once an admin has approved them.\n\n"
            "### Property lifecycle\n"
            "`draft` -> `pending_approval` -> `approved_pending_provider` -> "
            "`active` <-> `inactive` (or `rejected` after review)\n\n"
            "### Authentication\n"
            "All endpoints except `/health` and the public invitation "
            "validate/respond endpoints require a valid JWT token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PUT/DELETE: 10 requests/minute"
        ),
        version=API_VERSION,
        debug=settings.debug,
        contact={
            "name": "OnlyIfYouKnow Support",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "properties",
                "description": "Property creation, submission and listing state",
            },
            {
                "name": "admin",
                "description": "Property review and enlistment (admins only)",
            },
            {
                "name": "invitations",
                "description": "Platform invitations and token redemption",
            },
            {
                "name": "trust-levels",
                "description": "Owner discount tiers and guest assignments",
            },
            {
                "name": "activity",
                "description": "The caller's own audit trail",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
