"""Global exception handlers for the application."""
from typing import Union
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from pydantic import ValidationError

from expense_claims.exceptions import ErrorCode, ExpenseClaimsException
from expense_claims.utils.logging_config import get_logger

logger = get_logger(__name__)


def error_body(error_type: str, message: str, code=None, details=None) -> dict:
    """
    Build the JSON error body shared by every handler.

    `error` carries the user-facing message; `code`, `type` and `details`
    sit beside it for clients that branch on them.
    """
    return {
        "error": message,
        "code": code.value if isinstance(code, ErrorCode) else code,
        "type": error_type,
        "details": details or {},
    }


async def expense_claims_exception_handler(
    request: Request, exc: ExpenseClaimsException
) -> JSONResponse:
    """
    Handle application exceptions.

    Args:
        request: FastAPI request object
        exc: Application exception

    Returns:
        JSON response with error details
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.__class__.__name__}: {exc.message}",
        extra={
            "extra_fields": {
                "exception_type": exc.__class__.__name__,
                "error_code": exc.code.value if exc.code else None,
                "status_code": exc.status_code,
                "details": exc.details,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.__class__.__name__, exc.message, exc.code, exc.details),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle standard HTTP exceptions (unknown routes, wrong methods).

    Args:
        request: FastAPI request object
        exc: HTTP exception

    Returns:
        JSON response with error details
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"HTTP {exc.status_code}: {exc.detail}",
        extra={
            "extra_fields": {
                "status_code": exc.status_code,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("HTTPException", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, ValidationError]
) -> JSONResponse:
    """
    Handle malformed request bodies rejected by Pydantic.

    Args:
        request: FastAPI request object
        exc: Validation error

    Returns:
        JSON response with validation error details
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]

    logger.warning(
        f"Request validation error: {len(errors)} field(s) failed validation",
        extra={
            "extra_fields": {
                "validation_errors": errors,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            "ValidationError",
            "Request validation failed",
            details={"validation_errors": errors},
        ),
    )


async def sqlalchemy_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle database errors that escaped the service layer.

    Args:
        request: FastAPI request object
        exc: SQLAlchemy exception

    Returns:
        JSON response with a generic error message
    """
    logger.error(
        f"Database error: {str(exc)}",
        exc_info=True,
        extra={
            "extra_fields": {
                "exception_type": exc.__class__.__name__,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )

    if isinstance(exc, IntegrityError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_body(
                "DatabaseIntegrityError",
                "Database constraint violation. Resource may already exist.",
                ErrorCode.DATABASE_ERROR,
            ),
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "DatabaseError",
            "A database error occurred. Please try again later.",
            ErrorCode.DATABASE_ERROR,
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle any unhandled exceptions.

    Args:
        request: FastAPI request object
        exc: Any exception

    Returns:
        JSON response with generic error message
    """
    logger.error(
        f"Unhandled exception: {str(exc)}",
        exc_info=True,
        extra={
            "extra_fields": {
                "exception_type": exc.__class__.__name__,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )

    # Internal details stay in the logs
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "InternalServerError",
            "An unexpected error occurred. Please try again later.",
        ),
    )
