import uuid
import traceback
from typing import Any, Dict, Optional
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class DocumentGatewayError(Exception):
    """Base exception for the DocuWare gateway."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class CabinetConnectionError(DocumentGatewayError):
    """Endpoint missing, malformed or unreachable, or credentials rejected."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CABINET_CONNECTION_ERROR", details)


class RetrievalError(DocumentGatewayError):
    """Listing, pagination or search failure."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "RETRIEVAL_ERROR", details)


class UploadError(DocumentGatewayError):
    """Staging or submission of an upload failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPLOAD_ERROR", details)


class DocumentNotFoundError(DocumentGatewayError):
    """No document matches the requested identifier."""

    def __init__(
        self, message: str = "Document not found", document_id: Optional[str] = None
    ):
        details = {"document_id": document_id} if document_id else None
        super().__init__(message, "DOCUMENT_NOT_FOUND", details)


class DeletionError(DocumentGatewayError):
    """The cabinet rejected the delete of a document that was found."""

    def __init__(
        self, message: str, document_id: Optional[str] = None
    ):
        details = {"document_id": document_id} if document_id else None
        super().__init__(message, "DELETION_ERROR", details)


class ValidationError(DocumentGatewayError):
    """Request data rejected before reaching the cabinet."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


STATUS_CODE_MAP = {
    "DOCUMENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
}

SAFE_MESSAGES = {
    "CABINET_CONNECTION_ERROR": "Document cabinet is unavailable",
    "RETRIEVAL_ERROR": "Error retrieving documents",
    "UPLOAD_ERROR": "Error uploading document",
    "DELETION_ERROR": "Error deleting document",
}


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "INTERNAL_ERROR",
    details: Optional[Dict[str, Any]] = None,
    error_id: Optional[str] = None,
    request_path: Optional[str] = None,
) -> JSONResponse:
    """Create standardized error response."""

    error_id = error_id or str(uuid.uuid4())[:8]

    error_response = {
        "error": {
            "code": error_code,
            "message": message,
            "error_id": error_id,
        }
    }

    if details:
        error_response["error"]["details"] = details

    if request_path:
        error_response["error"]["path"] = request_path

    return JSONResponse(status_code=status_code, content=error_response)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by routers and by Starlette."""
    error_id = str(uuid.uuid4())[:8]

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.detail,
        error_code="HTTP_ERROR",
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    error_id = str(uuid.uuid4())[:8]

    logger.warning(
        "Validation exception occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    formatted_errors = [
        {
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Request validation failed",
        error_code="VALIDATION_ERROR",
        details={"validation_errors": formatted_errors},
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def document_gateway_exception_handler(
    request: Request, exc: DocumentGatewayError
) -> JSONResponse:
    """Handle gateway exceptions that escaped the routers."""
    error_id = str(uuid.uuid4())[:8]

    status_code = STATUS_CODE_MAP.get(
        exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    logger.error(
        "Application exception occurred",
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    # Internal detail stays in the logs for server-side failures
    if status_code >= 500 and not settings.DEBUG:
        message = SAFE_MESSAGES.get(exc.error_code, "An unexpected error occurred")
        details = None
    else:
        message = exc.message
        details = exc.details

    return create_error_response(
        status_code=status_code,
        message=message,
        error_code=exc.error_code,
        details=details,
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
        exc_info=True,
    )

    if settings.DEBUG:
        details = {
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc().split("\n"),
        }
        message = str(exc)
    else:
        details = None
        message = "An unexpected error occurred"

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message=message,
        error_code="INTERNAL_ERROR",
        details=details,
        error_id=error_id,
        request_path=str(request.url.path),
    )


def setup_exception_handlers(app):
    """Setup all exception handlers for the FastAPI app."""

    app.add_exception_handler(DocumentGatewayError, document_gateway_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_exception_handler(Exception, general_exception_handler)
