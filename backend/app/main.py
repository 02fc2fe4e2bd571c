from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.database import engine, Base
from app.core.errors import register_exception_handlers
from app.core.logging_config import (
    setup_security_logging,
    CorrelationIdMiddleware,
    log_security_event,
)
from app.api.endpoints import auth, users, tags, snippets
from app import models  # noqa: F401  (registers all tables on Base.metadata)
import logging

# Configure structured JSON logging
security_logger = setup_security_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.ENABLE_HSTS and settings.is_production:
            hsts_value = f"max-age={settings.HSTS_MAX_AGE}"
            if settings.HSTS_INCLUDE_SUBDOMAINS:
                hsts_value += "; includeSubDomains"
            if settings.HSTS_PRELOAD:
                hsts_value += "; preload"
            response.headers["Strict-Transport-Security"] = hsts_value

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Snippet Vault API...")

    if not settings.google_sign_in_configured:
        logger.warning(
            "GOOGLE_CLIENT_ID / FIREBASE_PROJECT_ID not set: "
            "/auth/google-login will reject every assertion"
        )

    # Create database tables (use alembic for real deployments)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    yield

    logger.info("Shutting down Snippet Vault API...")
    engine.dispose()


def include_routers(app: FastAPI) -> None:
    prefix = settings.API_PREFIX
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(users.router, prefix=prefix, tags=["users"])
    app.include_router(tags.router, prefix=prefix, tags=["tags"])
    app.include_router(snippets.router, prefix=prefix, tags=["snippets"])


app = FastAPI(
    title="Snippet Vault",
    description="Personal code snippets and tags with bearer-token auth",
    version="1.0.0",
    lifespan=lifespan,
)

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

log_security_event(
    event_type="app.startup",
    message=f"Snippet Vault starting (production={settings.is_production})",
    event_category="system",
    production=settings.is_production,
    debug=settings.DEBUG,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
include_routers(app)


@app.get("/")
def root():
    return {
        "name": "Snippet Vault",
        "version": "1.0.0",
        "description": "Personal code snippets and tags",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
