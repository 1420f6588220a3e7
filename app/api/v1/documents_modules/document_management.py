"""
Document management endpoints.

This module handles the read and delete side of the gateway:
- Listing every document in the file cabinet
- Deleting a document by its cabinet identifier
"""

from fastapi import APIRouter, Depends, Path

from app.models.schemas import (
    APIErrorResponse,
    DocumentDeleteResponse,
    DocumentList,
    DocumentResponse,
)
from app.services.document_service import DocumentGatewayError, DocumentNotFoundError
from .common import (
    get_document_dependencies,
    handle_document_not_found_error,
    handle_gateway_error,
    handle_generic_error,
    log_operation_start,
    log_operation_success,
)

router = APIRouter()


@router.get(
    "/list",
    response_model=DocumentList,
    summary="List Documents",
    operation_id="listDocuments",
    description="""List every document in the configured file cabinet.

The gateway follows the cabinet's continuation links until the last page,
so the response always holds the complete listing in cabinet order. An
empty cabinet yields an empty list.

**Response Example:**
```json
{
  "documents": [
    {
      "id": "1042",
      "content_type": "application/pdf",
      "title": "contract",
      "file_size": 48213,
      "fields": [
        {"name": "COMPANY", "value": "Acme", "type": "String"}
      ]
    }
  ],
  "total": 1
}
```""",
    responses={
        500: {"model": APIErrorResponse, "description": "Cabinet unavailable"},
    },
)
async def list_documents(deps=Depends(get_document_dependencies)):
    """List all documents in the file cabinet."""
    document_service = deps["document_service"]

    try:
        log_operation_start("Document listing")

        documents = await document_service.list_documents()

        log_operation_success("Document listing", count=len(documents))

        return DocumentList(
            documents=[DocumentResponse.from_cabinet(d) for d in documents],
            total=len(documents),
        )

    except DocumentGatewayError as e:
        raise handle_gateway_error(e, "listing")
    except Exception as e:
        raise handle_generic_error(e, "listing documents")


@router.delete(
    "/{document_id}",
    response_model=DocumentDeleteResponse,
    summary="Delete Document",
    operation_id="deleteDocument",
    description="""Delete the document whose `DWDOCID` equals `document_id`.

**Error Responses:**
- **404 Not Found**: No document with that identifier
- **500 Internal Server Error**: Search or delete failed in the cabinet""",
    responses={
        404: {"model": APIErrorResponse, "description": "Document not found"},
        500: {"model": APIErrorResponse, "description": "Deletion failed"},
    },
)
async def delete_document(
    document_id: str = Path(..., min_length=1, description="Cabinet document ID"),
    deps=Depends(get_document_dependencies),
):
    """Find a document by identifier and delete it."""
    document_service = deps["document_service"]

    try:
        log_operation_start("Document deletion", document_id=document_id)

        receipt = await document_service.delete_document(document_id)

        log_operation_success("Document deletion", document_id=document_id)

        return DocumentDeleteResponse(
            message="Document deleted successfully",
            document_id=receipt.document_id,
            result=receipt.result,
        )

    except DocumentNotFoundError as e:
        raise handle_document_not_found_error(e, "deletion", document_id=document_id)
    except DocumentGatewayError as e:
        raise handle_gateway_error(e, "deletion", document_id=document_id)
    except Exception as e:
        raise handle_generic_error(e, "deleting the document", document_id=document_id)
