"""Pydantic schemas for API requests and responses.

- document.py: Document schemas
- errors.py: Error response schemas

Import from this module: `from app.models.schemas import DocumentList`
"""

from app.models.schemas.document import (
    IndexFieldResponse,
    DocumentResponse,
    DocumentList,
    DocumentUploadResponse,
    DocumentDeleteResponse,
)
from app.models.schemas.errors import ErrorResponse, APIErrorResponse

__all__ = [
    "IndexFieldResponse",
    "DocumentResponse",
    "DocumentList",
    "DocumentUploadResponse",
    "DocumentDeleteResponse",
    "ErrorResponse",
    "APIErrorResponse",
]
