"""
Document upload endpoints.

This module handles document upload operations, focusing on:
- Multipart form parsing (index metadata plus the file)
- Rejecting empty or oversized files before any cabinet call
- Error handling and logging
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models.cabinet import UploadMetadata
from app.models.schemas import (
    APIErrorResponse,
    DocumentResponse,
    DocumentUploadResponse,
)
from app.services.document_service import DocumentGatewayError
from .common import (
    get_document_dependencies,
    handle_gateway_error,
    handle_generic_error,
    log_operation_start,
    log_operation_success,
)

router = APIRouter()

EMPTY_FILE_MESSAGE = "No file was uploaded or the file is empty."


async def _ensure_file_content(file: Optional[UploadFile]) -> UploadFile:
    """Reject missing, empty or oversized uploads."""
    if file is None or not file.filename:
        raise ValidationError(EMPTY_FILE_MESSAGE)

    size = file.size
    if size is None:
        # Size unknown (chunked body); peek one byte then rewind
        size = len(await file.read(1))
        await file.seek(0)

    if size == 0:
        raise ValidationError(EMPTY_FILE_MESSAGE, details={"filename": file.filename})
    if size > settings.MAX_FILE_SIZE:
        raise ValidationError(
            f"File exceeds the maximum size of {settings.MAX_FILE_SIZE} bytes",
            details={"filename": file.filename, "file_size": size},
        )
    return file


@router.post(
    "/upload",
    response_model=DocumentUploadResponse,
    summary="Upload Document",
    operation_id="uploadDocument",
    description="""Upload a file to the configured file cabinet with its index data.

**Form Fields:**
- **company_name**: stored in the `COMPANY` index field
- **contact_name**: stored in the `CONTACT` index field
- **birthday**: ISO date, stored in `BIRTHDAY` as `yyyy-MM-dd`
- **file**: the document to store; its MIME type goes to `DWEXTENSION`

**Example Request:**
```bash
curl -X POST "http://localhost:8000/api/v1/documents/upload" \\
  -F "company_name=Acme" \\
  -F "contact_name=Jane Doe" \\
  -F "birthday=1990-05-12" \\
  -F "file=@contract.pdf"
```

**Error Responses:**
- **400 Bad Request**: File missing, empty or too large
- **422 Unprocessable Entity**: Form fields missing or malformed
- **500 Internal Server Error**: Cabinet unavailable or upload rejected""",
    responses={
        400: {"model": APIErrorResponse, "description": "Invalid upload"},
        500: {"model": APIErrorResponse, "description": "Upload failed"},
    },
)
async def upload_document(
    company_name: str = Form(..., min_length=1, description="Company name"),
    contact_name: str = Form(..., min_length=1, description="Contact name"),
    birthday: date = Form(..., description="Contact birthday (YYYY-MM-DD)"),
    file: Optional[UploadFile] = File(None, description="Document file to upload"),
    deps=Depends(get_document_dependencies),
):
    """Stage the uploaded file and submit it with its index fields."""
    document_service = deps["document_service"]

    log_operation_start(
        "Document upload",
        filename=file.filename if file else "NO_FILE",
        file_size=file.size if file else "UNKNOWN",
        content_type=file.content_type if file else "UNKNOWN",
    )

    upload = await _ensure_file_content(file)
    metadata = UploadMetadata(
        company_name=company_name, contact_name=contact_name, birthday=birthday
    )

    try:
        document = await document_service.upload_document(
            metadata,
            upload.file,
            upload.filename,
            upload.content_type or "application/octet-stream",
        )
    except DocumentGatewayError as e:
        raise handle_gateway_error(e, "upload", filename=upload.filename)
    except Exception as e:
        raise handle_generic_error(e, "uploading the document", filename=upload.filename)

    log_operation_success(
        "Document upload", document_id=document.id, filename=upload.filename
    )

    return DocumentUploadResponse(
        message="Document uploaded successfully",
        document_id=document.id,
        document=DocumentResponse.from_cabinet(document),
    )
