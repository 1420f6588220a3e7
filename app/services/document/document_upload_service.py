"""
Document Upload Service - staging and submitting new documents.

The cabinet's upload primitive needs a seekable, file-backed source, so an
incoming stream is first copied to a uniquely named file in the staging
directory. The staged file is removed on every exit path, including
failures and cancellation.
"""

import re
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, List, Optional

from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.docuware_client import CabinetClient
from app.core.exceptions import UploadError
from app.models.cabinet import (
    FIELD_BIRTHDAY,
    FIELD_COMPANY,
    FIELD_CONTACT,
    FIELD_EXTENSION,
    CabinetDocument,
    CabinetSession,
    FileUploadInfo,
    IndexField,
    InputDocument,
    InputSection,
    UploadMetadata,
)
from .document_base_service import DocumentBaseService

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,16}$")
_COPY_CHUNK_SIZE = 1024 * 1024


class DocumentUploadService(DocumentBaseService):
    """Service for uploading documents into the file cabinet."""

    def __init__(
        self,
        client: Optional[CabinetClient] = None,
        staging_dir: Optional[str] = None,
    ):
        super().__init__(client)
        self.staging_dir = Path(staging_dir or settings.STAGING_DIR)

    @staticmethod
    def build_index_fields(
        metadata: UploadMetadata, content_type: str
    ) -> List[IndexField]:
        """Index fields attached to a new document, in submission order."""
        return [
            IndexField.create(FIELD_EXTENSION, content_type),
            IndexField.create(FIELD_COMPANY, metadata.company_name),
            IndexField.create(FIELD_CONTACT, metadata.contact_name),
            IndexField.create_date(FIELD_BIRTHDAY, metadata.birthday),
        ]

    def staging_path(self, file_name: str) -> Path:
        """Unique scratch path keeping the original extension when it is sane."""
        extension = Path(file_name or "").suffix
        if not _SAFE_EXTENSION.match(extension):
            extension = ""
        return self.staging_dir / f"{uuid.uuid4()}{extension}"

    def _copy_to_staging(self, file_stream: BinaryIO, staged_path: Path) -> None:
        staged_path.parent.mkdir(parents=True, exist_ok=True)
        with staged_path.open("wb") as staged_file:
            shutil.copyfileobj(file_stream, staged_file, _COPY_CHUNK_SIZE)

    def _release(self, staged_path: Path) -> None:
        try:
            staged_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(
                "Failed to delete staged upload file",
                staged_path=str(staged_path),
                error=str(e),
            )

    async def upload(
        self,
        session: CabinetSession,
        cabinet_id: str,
        metadata: UploadMetadata,
        file_stream: BinaryIO,
        file_name: str,
        content_type: str,
    ) -> CabinetDocument:
        """
        Upload a document with company, contact and birthday index fields.

        Args:
            session: Open cabinet session
            cabinet_id: Target file cabinet
            metadata: Index metadata for the document
            file_stream: Readable binary stream with the file content
            file_name: Original file name (its extension is preserved)
            content_type: MIME type of the file

        Returns:
            The created document, with the id assigned by the cabinet

        Raises:
            UploadError: If staging or submission fails
        """
        self.logger.info(
            "Attempting to upload a document",
            company_name=metadata.company_name,
            contact_name=metadata.contact_name,
            file_name=file_name,
            content_type=content_type,
        )

        staged_path = self.staging_path(file_name)
        try:
            input_document = InputDocument(
                fields=self.build_index_fields(metadata, content_type)
            )

            await run_in_threadpool(self._copy_to_staging, file_stream, staged_path)

            upload_info = FileUploadInfo(path=staged_path, content_type=content_type)
            input_document.sections.append(InputSection(file=upload_info))
            self.logger.debug(
                "Upload staged",
                staged_path=str(staged_path),
                file_size=upload_info.length,
                modified_utc=upload_info.last_write_time_utc.isoformat(),
            )

            document = await self.client.create_document(
                session, cabinet_id, input_document
            )
        except Exception as e:
            self.logger.error(
                "An error occurred while uploading the document",
                file_name=file_name,
                cabinet_id=cabinet_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UploadError(
                f"Failed to upload document '{file_name}': {e}",
                details={"file_name": file_name},
            ) from e
        finally:
            self._release(staged_path)

        self.logger.info(
            "Document uploaded successfully",
            document_id=document.id,
            file_name=file_name,
        )
        return document
