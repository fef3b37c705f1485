"""Exception handlers for FastAPI application"""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from rankriot.exceptions import (
    RankRiotError,
    ProjectAccessError,
    ProjectTypeError,
    PlanLimitError,
    CrawlerError,
    CrawlerConfigurationError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)


def _error_response(request: Request, exc: RankRiotError, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.to_dict(),
            "path": str(request.url.path),
        },
    )


async def rankriot_error_handler(request: Request, exc: RankRiotError) -> JSONResponse:
    """Handle any RankRiot error without a more specific handler"""
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


async def project_access_error_handler(request: Request, exc: ProjectAccessError) -> JSONResponse:
    """Handle ownership failures; foreign projects look the same as missing ones"""
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


async def project_type_error_handler(request: Request, exc: ProjectTypeError) -> JSONResponse:
    """Handle SEO/audit action mismatches"""
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


async def plan_limit_error_handler(request: Request, exc: PlanLimitError) -> JSONResponse:
    """Handle plan limit violations"""
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN)


async def crawler_error_handler(request: Request, exc: CrawlerError) -> JSONResponse:
    """Handle crawler failures"""
    if isinstance(exc, CrawlerConfigurationError):
        logger.error("Crawler is not configured: CRAWLER_API_URL is not set")
        return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE)
    logger.warning(f"Crawler error on {request.url.path}: {exc.message}")
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY)


async def webhook_signature_error_handler(request: Request, exc: WebhookSignatureError) -> JSONResponse:
    """Handle invalid webhook signatures"""
    logger.warning(f"Rejected webhook with invalid signature on {request.url.path}")
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": exc.errors(),
            },
            "path": str(request.url.path),
        },
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Handle database integrity errors (e.g., unique constraint violations)"""
    error_message = str(exc.orig) if hasattr(exc, 'orig') else str(exc)
    logger.error(f"Database integrity error on {request.url.path}: {error_message}")

    if "unique" in error_message.lower() or "duplicate" in error_message.lower():
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": {
                    "code": "UNIQUE_CONSTRAINT_VIOLATION",
                    "message": "A record with this value already exists",
                    "details": error_message,
                },
                "path": str(request.url.path),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "DATABASE_ERROR",
                "message": "Database constraint violation",
                "details": error_message,
            },
            "path": str(request.url.path),
        },
    )
