"""
Shared utilities and dependencies for document API endpoints.

This module provides common functionality used across the document router
modules: dependency injection, error translation and operation logging.
"""

from typing import Dict, Any
from fastapi import HTTPException, status

from app.core.logging import get_api_logger
from app.services.document_service import (
    document_service,
    DocumentGatewayError,
    DocumentNotFoundError,
)

# Shared logger instance
logger = get_api_logger()


def get_document_dependencies() -> Dict[str, Any]:
    """Get common dependencies for document endpoints."""
    return {"document_service": document_service, "logger": logger}


def handle_document_not_found_error(
    e: DocumentNotFoundError, operation: str, **context
) -> DocumentNotFoundError:
    """Log a missing document; the exception handler renders the 404."""
    logger.warning(f"Document not found for {operation}", error=str(e), **context)
    return e


def handle_gateway_error(
    e: DocumentGatewayError, operation: str, **context
) -> DocumentGatewayError:
    """Log a gateway failure; the exception handler renders the response."""
    logger.error(
        f"Document {operation} failed",
        error=str(e),
        error_code=e.error_code,
        cause=repr(e.__cause__) if e.__cause__ else None,
        **context,
    )
    return e


def handle_generic_error(e: Exception, operation: str, **context) -> HTTPException:
    """Handle unexpected exceptions consistently across endpoints."""
    logger.error(
        f"Unexpected error during {operation}",
        error=str(e),
        error_type=type(e).__name__,
        **context,
    )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"An unexpected error occurred while {operation}",
    )


def log_operation_start(operation: str, **context) -> None:
    """Log the start of an operation consistently."""
    logger.info(f"{operation} started", **context)


def log_operation_success(operation: str, **context) -> None:
    """Log successful operation completion consistently."""
    logger.info(f"{operation} completed successfully", **context)
