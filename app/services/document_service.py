"""
Document Service - import shortcut for the routers.

Re-exports the facade and the exceptions the document endpoints translate
into HTTP responses.
"""

from .document.document_service import document_service, DocumentService
from app.core.exceptions import (
    CabinetConnectionError,
    DeletionError,
    DocumentGatewayError,
    DocumentNotFoundError,
    RetrievalError,
    UploadError,
)

__all__ = [
    "document_service",
    "DocumentService",
    "CabinetConnectionError",
    "DeletionError",
    "DocumentGatewayError",
    "DocumentNotFoundError",
    "RetrievalError",
    "UploadError",
]
