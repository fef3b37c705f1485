"""Main FastAPI application"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError

from rankriot import __version__
from rankriot.core.config import settings
from rankriot.core.database import engine, mask_url
from rankriot.api.routes import (
    projects_router,
    scans_router,
    billing_router,
    webhooks_router,
    profiles_router,
    dashboard_router,
)
from rankriot.api.exception_handlers import (
    rankriot_error_handler,
    project_access_error_handler,
    project_type_error_handler,
    plan_limit_error_handler,
    crawler_error_handler,
    webhook_signature_error_handler,
    validation_exception_handler,
    integrity_error_handler,
)
from rankriot.exceptions import (
    RankRiotError,
    ProjectAccessError,
    ProjectTypeError,
    PlanLimitError,
    CrawlerError,
    WebhookSignatureError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting RankRiot API ({settings.environment}) against {mask_url(settings.database_url)}")
    if not settings.crawler_api_url:
        logger.warning("CRAWLER_API_URL is not set; scans cannot be started")

    # Schema is owned by the managed database; no create_all here

    yield

    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="RankRiot - SEO Dashboard API",
    description="Projects, crawl results and subscriptions for the RankRiot dashboard",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers (Starlette picks the most specific class)
app.add_exception_handler(RankRiotError, rankriot_error_handler)
app.add_exception_handler(ProjectAccessError, project_access_error_handler)
app.add_exception_handler(ProjectTypeError, project_type_error_handler)
app.add_exception_handler(PlanLimitError, plan_limit_error_handler)
app.add_exception_handler(CrawlerError, crawler_error_handler)
app.add_exception_handler(WebhookSignatureError, webhook_signature_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)

# Include routers
app.include_router(projects_router, prefix="/api")
app.include_router(scans_router, prefix="/api")
app.include_router(billing_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")
app.include_router(profiles_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "RankRiot",
        "version": __version__,
        "description": "SEO dashboard API",
        "status": "operational",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "crawler_configured": bool(settings.crawler_api_url),
    }
