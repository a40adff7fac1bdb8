# storefront/core/error_handlers.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
import logging
import traceback
import uuid

from .exceptions import StorefrontError, StoreUnavailableError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_CODE_MAP = {
    ErrorCode.UNAUTHENTICATED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.EMPTY_CART: 400,
    ErrorCode.OUT_OF_STOCK: 400,
    ErrorCode.INSUFFICIENT_STOCK: 400,
    ErrorCode.INVALID_SHIPPING_VALUE: 400,
    ErrorCode.INVALID_NOTIFICATION: 400,
    ErrorCode.PAYMENT_LOOKUP_FAILED: 400,
    ErrorCode.PAYMENT_NOT_APPROVED: 400,
    ErrorCode.EXTERNAL_REFERENCE_MISSING: 400,
    ErrorCode.ALREADY_PROCESSED: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PRODUCT_NOT_FOUND: 404,
    ErrorCode.ORDER_NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.UPSTREAM_REQUEST_FAILED: 502,
    ErrorCode.SHIPPING_STEP_FAILED: 502,
    ErrorCode.UPSTREAM_TIMEOUT: 500,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.STORE_UNAVAILABLE: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}


def setup_error_handlers(app: FastAPI):
    """Set up global error handlers for the FastAPI application."""

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        """Handle custom storefront errors."""
        status_code = STATUS_CODE_MAP.get(exc.code, 400)

        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"Storefront Error: {exc.code.value}",
            extra={
                "error_code": exc.code.value,
                "user_message": exc.user_message,
                "context": exc.context,
                "request_url": str(request.url),
                "request_method": request.method,
                "client_ip": request.client.host if request.client else None
            }
        )

        return JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(exc.to_response())
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with better formatting."""
        errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"]
            })

        logger.warning(
            "Validation error",
            extra={
                "validation_errors": errors,
                "request_url": str(request.url),
                "request_method": request.method
            }
        )

        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": errors
                }
            }
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle standard HTTP exceptions with consistent format."""
        logger.warning(
            f"HTTP Exception: {exc.status_code}",
            extra={
                "status_code": exc.status_code,
                "detail": exc.detail,
                "request_url": str(request.url),
                "request_method": request.method
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": f"HTTP_{exc.status_code}",
                    "message": exc.detail,
                    "status_code": exc.status_code
                }
            }
        )

    @app.exception_handler(OperationalError)
    @app.exception_handler(PoolTimeoutError)
    async def store_error_handler(request: Request, exc: Exception):
        """Store timeouts and lost connections are transient failures."""
        logger.error(
            f"Store failure: {type(exc).__name__}: {str(exc)}",
            extra={
                "request_url": str(request.url),
                "request_method": request.method
            }
        )

        error = StoreUnavailableError(technical_details=str(exc))
        return JSONResponse(status_code=500, content=error.to_response())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions with proper logging."""
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "exception_type": type(exc).__name__,
                "request_url": str(request.url),
                "request_method": request.method,
                "traceback": traceback.format_exc()
            }
        )

        # Don't expose internal details to clients
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
                    "message": "An internal server error occurred. Please try again later."
                }
            }
        )


async def add_request_id_middleware(request: Request, call_next):
    """Add request ID for better error tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
