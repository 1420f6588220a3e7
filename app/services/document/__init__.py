"""
Document services package.

Services:
- document_base_service: Shared cabinet client and logger
- session_provider: Per-operation DocuWare sessions
- document_query_service: Listing with pagination
- document_upload_service: Staged uploads
- document_delete_service: Find-then-delete by id
- document_service: Orchestration facade (main interface)
"""

from .document_service import DocumentService, document_service

__all__ = [
    "DocumentService",
    "document_service",
]
