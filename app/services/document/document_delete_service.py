"""
Document Delete Service - find-then-delete by document id.

The cabinet has no delete-by-id call, so the document is located with a
dialog expression on DWDOCID (limited to one hit) and then deleted through
its own link.
"""

from app.core.docuware_client import CabinetClientError
from app.core.exceptions import DeletionError, DocumentNotFoundError, RetrievalError
from app.models.cabinet import (
    FIELD_DOCUMENT_ID,
    CabinetSession,
    DeleteReceipt,
    DialogExpression,
)
from .document_base_service import DocumentBaseService


class DocumentDeleteService(DocumentBaseService):
    """Service for deleting documents by their cabinet identifier."""

    async def delete_by_id(
        self, session: CabinetSession, cabinet_id: str, document_id: str
    ) -> DeleteReceipt:
        """
        Delete the document whose DWDOCID equals ``document_id``.

        Raises:
            DocumentNotFoundError: If no document matches
            RetrievalError: If the search itself fails
            DeletionError: If the cabinet rejects the delete
        """
        self.logger.info(
            "Attempting to delete document",
            document_id=document_id,
            cabinet_id=cabinet_id,
        )

        expression = DialogExpression.equals(FIELD_DOCUMENT_ID, document_id, count=1)

        try:
            result = await self.client.search(session, cabinet_id, expression)
        except CabinetClientError as e:
            self.logger.error(
                "Search for document failed", document_id=document_id, error=str(e)
            )
            raise RetrievalError(
                f"Error searching for document with ID {document_id}: {e}",
                details={"document_id": document_id},
            ) from e

        if not result.items:
            self.logger.warning("Document not found", document_id=document_id)
            raise DocumentNotFoundError(
                f"Document with ID {document_id} not found", document_id=document_id
            )

        # Identifiers are unique; should several match, the first one wins
        document = result.items[0]

        try:
            receipt = await self.client.delete_document(session, document)
        except CabinetClientError as e:
            self.logger.error(
                "Error deleting document", document_id=document_id, error=str(e)
            )
            raise DeletionError(
                f"Error deleting document with ID {document_id}: {e}",
                document_id=document_id,
            ) from e

        self.logger.info("Document deleted successfully", document_id=document_id)
        return DeleteReceipt(document_id=document.id, result=receipt)
