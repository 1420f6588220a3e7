"""
Document API Router

Aggregates the document endpoints:

- document_upload.py: Document upload
- document_management.py: Listing and deletion
- common.py: Shared utilities and dependencies
"""

from fastapi import APIRouter

from app.api.v1.documents_modules.document_upload import router as upload_router
from app.api.v1.documents_modules.document_management import router as management_router

router = APIRouter()

# Order matters: fixed paths must come before /{document_id}
router.include_router(
    upload_router,
    tags=["Document Upload"],
)

router.include_router(
    management_router,
    tags=["Document Management"],
)
