"""
peer_recognition/errors.py
Centralized error taxonomy for the peer recognition API

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 400: Malformed, missing or out-of-range input
- 404: Unknown chapter / participant / contribution
- 409: Duplicate participant name, concurrent document write
- 500: Never caused by user input (internal only)
- 503: Persistence backend failure
"""

import logging
from typing import Optional, Dict, Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx reply; documented on each route in OpenAPI"""
    success: bool = False
    error: str
    code: str
    details: Optional[Dict[str, Any]] = None


ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid input"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Unknown chapter, participant or contribution"},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "Duplicate name or concurrent write"},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse, "description": "Storage backend failure"},
}


class APIError(Exception):
    """Base API exception with consistent structure"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class ValidationError(APIError):
    """400 - Malformed, missing or out-of-range input"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.VALIDATION_ERROR


class NotFoundError(APIError):
    """404 - Resource does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(message, {"resource": resource, "id": identifier})
        self.resource = resource
        self.identifier = identifier


class ConflictError(APIError):
    """409 - Duplicate resource or concurrent modification"""
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.CONFLICT


class StorageError(APIError):
    """503 - Underlying persistence read/write failure"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = ErrorCode.STORAGE_ERROR


def require_text(value: Optional[str], field_name: str) -> str:
    """Return the stripped value or raise ValidationError if it is blank"""
    if value is None or value.strip() == "":
        raise ValidationError(f"{field_name} cannot be empty", {"field": field_name})
    return value.strip()
