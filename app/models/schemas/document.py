"""Document schemas for API requests and responses."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from app.models.cabinet import CabinetDocument


class IndexFieldResponse(BaseModel):
    """A single index field of a cabinet document."""

    name: str = Field(..., description="Index field name", examples=["COMPANY"])
    value: Optional[Any] = Field(None, description="Index field value", examples=["Acme"])
    type: str = Field("String", description="DocuWare item type", examples=["String"])


class DocumentResponse(BaseModel):
    """Document response schema for API responses."""

    id: str = Field(..., description="Cabinet document identifier", examples=["1042"])
    content_type: Optional[str] = Field(
        None, description="MIME type of the stored file", examples=["application/pdf"]
    )
    title: Optional[str] = Field(None, description="Document title")
    file_size: Optional[int] = Field(None, ge=0, description="File size in bytes")
    fields: List[IndexFieldResponse] = Field(
        default_factory=list, description="Index fields attached to the document"
    )

    @classmethod
    def from_cabinet(cls, document: CabinetDocument) -> "DocumentResponse":
        return cls(
            id=document.id,
            content_type=document.content_type,
            title=document.title,
            file_size=document.file_size,
            fields=[
                IndexFieldResponse(
                    name=f.field_name, value=f.item, type=str(f.item_element_name)
                )
                for f in document.fields
            ],
        )


class DocumentList(BaseModel):
    """Every document in the file cabinet, in cabinet order."""

    documents: List[DocumentResponse] = Field(
        default_factory=list, description="Documents in the file cabinet"
    )
    total: int = Field(..., ge=0, description="Number of documents", examples=[2])


class DocumentUploadResponse(BaseModel):
    """Response model for document upload."""

    message: str = Field(
        ...,
        description="Upload status message",
        examples=["Document uploaded successfully"],
    )
    document_id: str = Field(
        ..., description="Identifier assigned by the cabinet", examples=["1042"]
    )
    document: Optional[DocumentResponse] = Field(
        None, description="Uploaded document details"
    )


class DocumentDeleteResponse(BaseModel):
    """Response model for document deletion."""

    message: str = Field(
        ...,
        description="Deletion status message",
        examples=["Document deleted successfully"],
    )
    document_id: str = Field(..., description="Deleted document identifier")
    result: str = Field(
        ..., description="Receipt returned by the cabinet for the delete"
    )
