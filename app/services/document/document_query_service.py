"""
Document Query Service - listing the whole file cabinet.

The cabinet returns documents in pages linked by a "next" relation. The
walker follows those links in a plain loop so a cabinet with many pages
(or one that never stops paginating) cannot grow the call stack.
"""

from typing import List, Optional

from app.core.config import settings
from app.core.docuware_client import CabinetClient, CabinetClientError
from app.core.exceptions import RetrievalError
from app.models.cabinet import CabinetDocument, CabinetSession
from .document_base_service import DocumentBaseService


class DocumentQueryService(DocumentBaseService):
    """Service for paginated document retrieval."""

    def __init__(
        self,
        client: Optional[CabinetClient] = None,
        max_pages: Optional[int] = None,
    ):
        super().__init__(client)
        self.max_pages = max_pages or settings.LIST_MAX_PAGES

    async def list_all(
        self,
        session: CabinetSession,
        cabinet_id: str,
        page_size: Optional[int] = None,
    ) -> List[CabinetDocument]:
        """
        Retrieve every document in the cabinet, in backend page order.

        Args:
            session: Open cabinet session
            cabinet_id: File cabinet to list
            page_size: Maximum documents per page (defaults to LIST_PAGE_SIZE)

        Returns:
            All documents, concatenated page by page

        Raises:
            RetrievalError: If any page fetch fails; nothing partial is returned
        """
        page_size = page_size or settings.LIST_PAGE_SIZE

        self.logger.info(
            "Attempting to list documents from the file cabinet",
            cabinet_id=cabinet_id,
            page_size=page_size,
        )

        documents: List[CabinetDocument] = []
        pages_fetched = 0

        try:
            page = await self.client.get_documents_page(session, cabinet_id, page_size)
            pages_fetched += 1
            documents.extend(page.items)

            while page.has_next:
                if pages_fetched >= self.max_pages:
                    self.logger.error(
                        "Pagination exceeded page limit",
                        cabinet_id=cabinet_id,
                        max_pages=self.max_pages,
                    )
                    raise RetrievalError(
                        f"File cabinet {cabinet_id} returned more than "
                        f"{self.max_pages} pages",
                        details={"cabinet_id": cabinet_id, "max_pages": self.max_pages},
                    )

                page = await self.client.get_next_page(session, page)
                pages_fetched += 1
                documents.extend(page.items)

        except CabinetClientError as e:
            self.logger.error(
                "Error occurred while listing documents from the file cabinet",
                cabinet_id=cabinet_id,
                pages_fetched=pages_fetched,
                error=str(e),
            )
            raise RetrievalError(
                f"Failed to list documents from file cabinet {cabinet_id}: {e}",
                details={"cabinet_id": cabinet_id, "pages_fetched": pages_fetched},
            ) from e

        self.logger.info(
            "Documents retrieved successfully from the file cabinet",
            cabinet_id=cabinet_id,
            count=len(documents),
            pages=pages_fetched,
        )
        return documents
