# backend/portfolio_tracker/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.orm import Session

from portfolio_tracker.config import settings
from portfolio_tracker.database import get_db
from portfolio_tracker.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from portfolio_tracker.routers import (
    cash_flows_router,
    lists_router,
    positions_router,
    quotes_router,
    recommendations_router,
    transactions_router,
    users_router,
)
from portfolio_tracker.schemas.errors import ErrorDetail, ValidationErrorDetail
from portfolio_tracker.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    InsufficientSharesError,
    DefaultListDeletionError,
    DuplicateListNameError,
    DuplicatePositionError,
    UserExistsError,
    MarketDataError,
    TickerNotFoundError,
    ProviderUnavailableError,
    RateLimitError,
    QuoteUnavailableError,
)
from portfolio_tracker.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Stock portfolio tracking API: positions, cash flows, returns and quotes",
    version="0.1.0",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Services raise ServiceError subclasses; these handlers turn them into
# ErrorDetail responses. The most specific handler for an exception's
# class wins.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _error_response(status_code: int, exc: Exception, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details=details,
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle service-level validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return _error_response(400, exc, {"field": exc.field} if exc.field else None)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing users, lists, positions and cash flows (404)."""
    logger.warning(f"Not found: {exc}")
    return _error_response(
        404,
        exc,
        {"resource_type": exc.resource_type, "resource_id": exc.resource_id},
    )


@app.exception_handler(InsufficientSharesError)
async def insufficient_shares_handler(request: Request, exc: InsufficientSharesError) -> JSONResponse:
    """Handle sells larger than the position (400)."""
    logger.warning(f"Insufficient shares: {exc}")
    return _error_response(
        400,
        exc,
        {
            "symbol": exc.symbol,
            "position_id": exc.position_id,
            "requested": str(exc.requested),
            "available": str(exc.available),
        },
    )


@app.exception_handler(DefaultListDeletionError)
async def default_list_deletion_handler(request: Request, exc: DefaultListDeletionError) -> JSONResponse:
    """Handle attempts to delete the default list (400)."""
    logger.warning(f"Refused to delete default list {exc.list_id}")
    return _error_response(400, exc, {"list_id": exc.list_id})


@app.exception_handler(DuplicateListNameError)
async def duplicate_list_name_handler(request: Request, exc: DuplicateListNameError) -> JSONResponse:
    """Handle list name conflicts (409)."""
    logger.warning(f"Duplicate list name: {exc.name}")
    return _error_response(409, exc, {"name": exc.name})


@app.exception_handler(DuplicatePositionError)
async def duplicate_position_handler(request: Request, exc: DuplicatePositionError) -> JSONResponse:
    """Handle adding a symbol that is already tracked in the list (409)."""
    logger.warning(f"Duplicate position: {exc}")
    return _error_response(409, exc, {"symbol": exc.symbol, "list_id": exc.list_id})


@app.exception_handler(UserExistsError)
async def user_exists_handler(request: Request, exc: UserExistsError) -> JSONResponse:
    """Handle user already exists errors (409)."""
    logger.warning(f"Registration attempt with existing email: {exc.email}")
    return _error_response(409, exc, {"email": exc.email})


@app.exception_handler(BusinessRuleError)
async def business_rule_handler(request: Request, exc: BusinessRuleError) -> JSONResponse:
    """Handle any other business rule violation (400)."""
    logger.warning(f"Business rule violated: {exc}")
    return _error_response(400, exc)


@app.exception_handler(TickerNotFoundError)
async def ticker_not_found_handler(request: Request, exc: TickerNotFoundError) -> JSONResponse:
    """Handle ticker not found on market data provider (404)."""
    logger.warning(f"Ticker not found on provider: {exc.symbol}")
    return _error_response(404, exc, {"symbol": exc.symbol})


@app.exception_handler(QuoteUnavailableError)
async def quote_unavailable_handler(request: Request, exc: QuoteUnavailableError) -> JSONResponse:
    """Handle quotes that could be neither fetched nor synthesized (503)."""
    logger.error(f"Quote unavailable: {exc}")
    return _error_response(503, exc, {"symbol": exc.symbol})


@app.exception_handler(ProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
    """Handle market data provider unavailable (503)."""
    logger.error(f"Provider unavailable: {exc}")
    return _error_response(503, exc)


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Handle upstream provider rate limiting (429)."""
    logger.warning(f"Rate limit exceeded: {exc}")
    return _error_response(429, exc, {"retry_after": exc.retry_after} if exc.retry_after else None)


@app.exception_handler(MarketDataError)
async def market_data_error_handler(request: Request, exc: MarketDataError) -> JSONResponse:
    """Handle generic market data errors (500)."""
    logger.error(f"Market data error: {exc}")
    return _error_response(500, exc)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return _error_response(500, exc)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle all HTTPExceptions with consistent error format.

    Converts FastAPI's default {"detail": "..."} format to ErrorDetail.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        409: "ConflictError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
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
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert the default 422 validation error to ValidationErrorDetail."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(users_router)  # /users/*
app.include_router(lists_router)  # /lists/*
app.include_router(positions_router)  # /positions/*
app.include_router(transactions_router)  # /transactions/*
app.include_router(cash_flows_router)  # /cash-flows/*
app.include_router(quotes_router)  # /quotes/{symbol}
app.include_router(recommendations_router)  # /recommendations


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Health of the application and its dependencies.

    **Response Status Codes:**
    - 200: Database reachable
    - 503: Database unreachable; do not route traffic here

    Market data is reported but never fails the check: an outage only
    affects the quotes themselves (synthetic when enabled, 503 otherwise).
    """
    from portfolio_tracker.dependencies import get_quote_service

    checks = {}
    overall_status = "healthy"

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = {
            "status": "healthy",
            "critical": True,
            "backend": "sqlite" if settings.is_sqlite else "postgresql",
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        checks["database"] = {
            "status": "unhealthy",
            "critical": True,
            "error": str(e),
        }
        overall_status = "unhealthy"

    quote_service = get_quote_service()
    checks["market_data"] = {
        "status": "configured",
        "critical": False,
        "provider": quote_service.provider_name,
        "synthetic_quotes": settings.synthetic_quotes_allowed,
    }

    response_data = {
        "status": overall_status,
        "environment": settings.environment,
        "checks": checks,
    }

    if overall_status == "unhealthy":
        return JSONResponse(status_code=503, content=response_data)
    return response_data


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """Liveness probe: succeeds whenever the process is running."""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def readiness_check(request: Request, db: Session = Depends(get_db)):
    """Readiness probe: 503 while the database is unreachable."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "error": "Database unavailable",
            },
        )
