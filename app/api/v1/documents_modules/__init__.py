"""
Document API modules.

Modules:
- document_upload: Document upload
- document_management: Listing and deletion
- common: Shared utilities and dependencies
"""

__all__ = []
