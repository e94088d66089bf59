"""Exception handlers for structured error responses.

Every error leaves the API as ``{"error": CODE, "message": str, "details": {}}``.
"""

import logging
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import AppException, DatabaseError, ErrorCode

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Client errors are logged at INFO, server errors at ERROR.

    Args:
        request: FastAPI request object
        exc: AppException instance

    Returns:
        JSONResponse with error details
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        f"AppException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are a 400, same shape as other errors."""
    errors = jsonable_encoder(exc.errors())
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "status_code": 400},
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": "Invalid request",
            "details": {"errors": errors},
        },
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures that escaped the service layer."""
    logger.error(
        "Unhandled database error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    error = DatabaseError("Database operation failed")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())
