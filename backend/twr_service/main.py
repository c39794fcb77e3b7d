# backend/twr_service/main.py
"""
ASGI application for the Time-Weighted Return service.

This file:
- Sets up root logging from settings
- Builds the FastAPI app and its middleware stack
- Maps service exceptions to ErrorDetail responses
- Registers the TWR router
- Serves the info and health endpoints

Run with:
    uvicorn twr_service.main:app --app-dir backend
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from twr_service.config import Settings, settings
from twr_service.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from twr_service.routers import twr_router
from twr_service.schemas.errors import ErrorDetail, ValidationErrorDetail
from twr_service.services.exceptions import (
    DuplicateDateError,
    ServiceError,
    ValidationError,
)
from twr_service.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING (configured before the app logs anything)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

def docs_urls(config: Settings) -> dict[str, str | None]:
    """Interactive API docs paths; both are switched off in production."""
    if config.is_production:
        return {"docs_url": None, "redoc_url": None}
    return {"docs_url": "/docs", "redoc_url": "/redoc"}


app = FastAPI(
    title=settings.app_name,
    description="Time-weighted return calculation over irregular NAV and cash flow series",
    version="0.1.0",
    debug=settings.debug,
    **docs_urls(settings),
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


# =============================================================================
# MIDDLEWARE (last added runs first)
# =============================================================================

# slowapi reads the limiter from app state
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)

# Outermost, so the ID is set before anything else logs
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Calculation failures never reach these handlers: the calculator turns them
# into a 200 response with twr = null. Only malformed input and unexpected
# service errors end up here.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(DuplicateDateError)
async def duplicate_date_handler(request: Request, exc: DuplicateDateError) -> JSONResponse:
    """Handle a series repeating a date (400)."""
    logger.warning(f"Duplicate date rejected: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="DuplicateDateError",
            message=str(exc),
            details={
                "field": exc.field,
                "date": exc.duplicate_date.isoformat(),
            },
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Caller input rejected by the service layer (400)."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="ValidationError",
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Unexpected service failure (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render framework HTTP errors as ErrorDetail.

    Converts FastAPI's default {"detail": "..."} format to the ErrorDetail
    format (e.g. 404 for unknown paths, 405 for wrong methods).
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
        request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Render request body validation failures as ValidationErrorDetail.

    Converts the default 422 validation error to the ValidationErrorDetail format.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning(f"Request validation failed: {len(errors)} error(s)")

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(twr_router)  # /twr, /twr/sub-periods


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """
    Service name and documentation links (null in production).
    """
    urls = docs_urls(settings)
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": urls["docs_url"],
        "redoc": urls["redoc_url"],
    }


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """
    Liveness probe endpoint.

    Returns HTTP 200 whenever the process is able to serve requests.
    """
    return {"status": "alive"}


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request):
    """
    Health check endpoint.

    The service has no external dependencies, so health reduces to the
    application being up and configured.
    """
    return {
        "status": "healthy",
        "environment": settings.environment,
        "rate_limiting": settings.rate_limit_enabled,
    }
