"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures for unit and integration tests,
including an in-memory file cabinet standing in for DocuWare.
"""

import os
import uuid
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from faker import Faker
from httpx import AsyncClient, ASGITransport

# Set test environment before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")

from app.core.docuware_client import (  # noqa: E402
    CabinetAuthenticationError,
    CabinetClient,
    CabinetClientError,
)
from app.models.cabinet import (  # noqa: E402
    FIELD_DOCUMENT_ID,
    CabinetConfig,
    CabinetDocument,
    CabinetSession,
    DialogExpression,
    IndexField,
    InputDocument,
    PagedResult,
)

fake = Faker()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API)")
    config.addinivalue_line("markers", "api: API endpoint tests")


# =============================================================================
# In-memory Cabinet
# =============================================================================

class FakeCabinetClient(CabinetClient):
    """In-memory cabinet that records every call made against it."""

    def __init__(self, documents: Optional[List[CabinetDocument]] = None):
        self.documents: List[CabinetDocument] = list(documents or [])
        self.fail_on: Dict[str, Exception] = {}
        self.fail_on_page: Optional[int] = None
        self.endless_pages = False

        self.sessions_opened = 0
        self.sessions_closed = 0
        self.page_requests: List[str] = []
        self.search_calls: List[DialogExpression] = []
        self.delete_calls: List[str] = []
        self.created: List[InputDocument] = []
        self.staged_paths: List[Path] = []
        self.staged_existed: List[bool] = []
        self.staged_contents: List[bytes] = []
        self._next_id = 1000

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    def _page(self, start: int, count: int) -> PagedResult:
        if self.fail_on_page is not None and len(self.page_requests) == self.fail_on_page:
            raise CabinetClientError("page fetch failed", status_code=500)

        items = self.documents[start:start + count]
        end = start + count
        has_more = self.endless_pages or end < len(self.documents)
        return PagedResult(
            items=items,
            next_link=f"next:{end}:{count}" if has_more else None,
        )

    async def connect(self, config: CabinetConfig) -> CabinetSession:
        self._maybe_fail("connect")
        self.sessions_opened += 1
        return CabinetSession(
            platform_uri=config.platform_uri,
            file_cabinet_id=config.file_cabinet_id,
            http=None,
        )

    async def close(self, session: CabinetSession) -> None:
        self.sessions_closed += 1

    async def get_documents_page(
        self, session: CabinetSession, cabinet_id: str, count: int
    ) -> PagedResult:
        self._maybe_fail("get_documents_page")
        page = self._page(0, count)
        self.page_requests.append("first")
        return page

    async def get_next_page(
        self, session: CabinetSession, paged_result: PagedResult
    ) -> PagedResult:
        self._maybe_fail("get_next_page")
        _, start, count = paged_result.next_link.split(":")
        page = self._page(int(start), int(count))
        self.page_requests.append(paged_result.next_link)
        return page

    async def create_document(
        self, session: CabinetSession, cabinet_id: str, document: InputDocument
    ) -> CabinetDocument:
        self.created.append(document)
        for section in document.sections:
            path = section.file.path
            self.staged_paths.append(path)
            self.staged_existed.append(path.exists())
            with section.file.open() as staged:
                self.staged_contents.append(staged.read())

        self._maybe_fail("create_document")

        self._next_id += 1
        doc_id = str(self._next_id)
        created = CabinetDocument(
            id=doc_id,
            content_type=document.sections[0].file.content_type if document.sections else None,
            fields=list(document.fields) + [IndexField.create(FIELD_DOCUMENT_ID, doc_id)],
        )
        self.documents.append(created)
        return created

    async def search(
        self, session: CabinetSession, cabinet_id: str, expression: DialogExpression
    ) -> PagedResult:
        self.search_calls.append(expression)
        self._maybe_fail("search")

        condition = expression.condition[0]
        matches = [
            d for d in self.documents
            if str(d.field_value(condition.db_name)) in condition.value
        ]
        return PagedResult(items=matches[:expression.count])

    async def delete_document(
        self, session: CabinetSession, document: CabinetDocument
    ) -> str:
        self.delete_calls.append(document.id)
        self._maybe_fail("delete_document")

        self.documents = [d for d in self.documents if d.id != document.id]
        return f"Document {document.id} deleted"


def make_document(doc_id: Any, **fields: str) -> CabinetDocument:
    """Build a cabinet document carrying its DWDOCID and extra index fields."""
    index = [IndexField.create(FIELD_DOCUMENT_ID, str(doc_id))]
    index.extend(IndexField.create(name, value) for name, value in fields.items())
    return CabinetDocument(
        id=str(doc_id),
        content_type="application/pdf",
        title=fake.word(),
        file_size=fake.random_int(min=1024, max=1048576),
        fields=index,
    )


# =============================================================================
# Test Data Generators
# =============================================================================

@pytest.fixture
def cabinet_config() -> CabinetConfig:
    """A complete cabinet configuration."""
    return CabinetConfig(
        platform_uri="https://example.docuware.cloud/DocuWare/Platform",
        username=fake.user_name(),
        password=fake.password(),
        organization=fake.company(),
        file_cabinet_id=str(uuid.uuid4()),
    )


@pytest.fixture
def document_factory():
    """Factory for cabinet documents."""
    return make_document


@pytest.fixture
def upload_metadata_data() -> Dict[str, Any]:
    """Generate random upload form data."""
    return {
        "company_name": fake.company(),
        "contact_name": fake.name(),
        "birthday": fake.date_of_birth().isoformat(),
    }


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def fake_client() -> FakeCabinetClient:
    """Create an empty in-memory cabinet."""
    return FakeCabinetClient()


@pytest.fixture
def cabinet_session(cabinet_config: CabinetConfig) -> CabinetSession:
    """A session handle for services that take one directly."""
    return CabinetSession(
        platform_uri=cabinet_config.platform_uri,
        file_cabinet_id=cabinet_config.file_cabinet_id,
        http=None,
    )


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    """Isolated staging directory for uploads."""
    return tmp_path / "staging"


@pytest.fixture
def document_service(fake_client, cabinet_config, staging_dir):
    """DocumentService wired to the in-memory cabinet."""
    from app.services.document.document_service import DocumentService

    return DocumentService(
        client=fake_client,
        config=cabinet_config,
        staging_dir=str(staging_dir),
        page_size=2,
    )


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(document_service):
    """Create a test FastAPI application bound to the in-memory cabinet."""
    # Import here to ensure test environment is set
    from app.main import app as fastapi_app
    from app.api.v1.documents_modules.common import get_document_dependencies, logger

    fastapi_app.dependency_overrides[get_document_dependencies] = lambda: {
        "document_service": document_service,
        "logger": logger,
    }
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def rejected_logon() -> CabinetAuthenticationError:
    """The error a platform raises when credentials are refused."""
    return CabinetAuthenticationError("credentials rejected", status_code=401)
