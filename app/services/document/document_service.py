"""
Document Service - Main orchestration facade.

Each public operation opens its own cabinet session through the session
provider, delegates to a specialized service and closes the session:

- DocumentQueryService: listing with pagination
- DocumentUploadService: staging and submitting uploads
- DocumentDeleteService: find-then-delete by id
"""

from typing import BinaryIO, List, Optional

from app.core.config import settings
from app.core.docuware_client import CabinetClient
from app.models.cabinet import (
    CabinetConfig,
    CabinetDocument,
    DeleteReceipt,
    UploadMetadata,
)

from .document_base_service import DocumentBaseService
from .document_delete_service import DocumentDeleteService
from .document_query_service import DocumentQueryService
from .document_upload_service import DocumentUploadService
from .session_provider import CabinetSessionProvider


class DocumentService(DocumentBaseService):
    """
    Main document service implementing facade pattern.

    Holds no per-request state; sessions live only for one call.
    """

    def __init__(
        self,
        client: Optional[CabinetClient] = None,
        config: Optional[CabinetConfig] = None,
        staging_dir: Optional[str] = None,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
    ):
        """Initialize the orchestration service with all specialized services."""
        super().__init__(client)

        self.page_size = page_size or settings.LIST_PAGE_SIZE
        self.session_provider = CabinetSessionProvider(
            config or settings.cabinet_config, self.client
        )
        self.query_service = DocumentQueryService(self.client, max_pages=max_pages)
        self.upload_service = DocumentUploadService(self.client, staging_dir=staging_dir)
        self.delete_service = DocumentDeleteService(self.client)

    async def list_documents(
        self, page_size: Optional[int] = None
    ) -> List[CabinetDocument]:
        """List every document in the configured cabinet."""
        async with self.session_provider.session() as session:
            return await self.query_service.list_all(
                session, session.file_cabinet_id, page_size or self.page_size
            )

    async def upload_document(
        self,
        metadata: UploadMetadata,
        file_stream: BinaryIO,
        file_name: str,
        content_type: str,
    ) -> CabinetDocument:
        """Upload a file with its index metadata to the configured cabinet."""
        async with self.session_provider.session() as session:
            return await self.upload_service.upload(
                session,
                session.file_cabinet_id,
                metadata,
                file_stream,
                file_name,
                content_type,
            )

    async def delete_document(self, document_id: str) -> DeleteReceipt:
        """Delete a document by its cabinet identifier."""
        async with self.session_provider.session() as session:
            return await self.delete_service.delete_by_id(
                session, session.file_cabinet_id, document_id
            )

    async def check_connection(self) -> None:
        """Open and close a session; raises CabinetConnectionError on failure."""
        async with self.session_provider.session():
            pass


# Global service instance
document_service = DocumentService()
