"""
Error Handler Middleware

Maps the APIError taxonomy, request-shape errors and anything unexpected
onto the {"success": false, "error", "code", "details"} response body.
"""
import logging
import traceback
import uuid
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from peer_recognition.errors import APIError, ErrorCode

logger = logging.getLogger(__name__)


def _new_log_id() -> str:
    return str(uuid.uuid4())[:8]


def _request_context(request: Request, log_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "log_id": log_id,
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else None,
    }


def _simplify_errors(errors) -> list:
    """Keep loc/msg/type only; raw pydantic errors may carry unserializable ctx values."""
    return [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in errors
    ]


def setup_error_handlers(app, debug: bool = False):
    """
    Register exception handlers on a FastAPI application.

    Args:
        app: FastAPI application instance
        debug: Include exception text and traceback in 500 responses
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(f"API error on {request.url.path}: {exc.code} - {exc.message}")
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = _simplify_errors(exc.errors())
        logger.warning(f"Validation error on {request.url.path}: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Invalid request",
                "code": ErrorCode.VALIDATION_ERROR,
                "details": {"errors": errors},
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        log_id = _new_log_id()
        logger.error(
            f"Unexpected error [{log_id}]: {type(exc).__name__}: {exc}\n"
            f"Context: {_request_context(request, log_id)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )

        details: Dict[str, Any] = {"log_id": log_id}
        if debug:
            details["type"] = type(exc).__name__
            details["traceback"] = traceback.format_exc()

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": str(exc) if debug else "An unexpected error occurred. Please try again later.",
                "code": ErrorCode.INTERNAL_ERROR,
                "details": details,
            },
        )

    logger.info("Error handlers configured")
