"""
Unit tests for the DocuWare REST client.

Requests are served by an httpx MockTransport standing in for the platform.
"""

import json
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from app.core.docuware_client import (
    CabinetAuthenticationError,
    CabinetClientError,
    DocuWareClient,
)
from app.models.cabinet import (
    CabinetConfig,
    DialogExpression,
    FileUploadInfo,
    IndexField,
    InputDocument,
    InputSection,
)

PLATFORM = "https://example.docuware.cloud/DocuWare/Platform"
CABINET = "fc-1"


def document_json(doc_id: int) -> dict:
    return {
        "Id": doc_id,
        "ContentType": "application/pdf",
        "Title": f"doc-{doc_id}",
        "FileSize": 100,
        "Fields": [
            {"FieldName": "DWDOCID", "Item": str(doc_id), "ItemElementName": "String"},
            {"FieldName": "COMPANY", "Item": "Acme", "ItemElementName": "String"},
        ],
        "Links": [
            {
                "rel": "self",
                "href": f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents/{doc_id}",
            }
        ],
    }


class Platform:
    """Routes requests to handlers and records what was sent."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes = {}

    def route(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]):
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="no route")
        return handler(request)


@pytest.fixture
def platform() -> Platform:
    platform = Platform()
    platform.route(
        "POST", "/DocuWare/Platform/Account/Logon", lambda r: httpx.Response(200, json={})
    )
    platform.route(
        "POST", "/DocuWare/Platform/Account/Logoff", lambda r: httpx.Response(200)
    )
    return platform


@pytest.fixture
def client(platform) -> DocuWareClient:
    return DocuWareClient(transport=httpx.MockTransport(platform))


@pytest.fixture
def config() -> CabinetConfig:
    return CabinetConfig(
        platform_uri=PLATFORM,
        username="svc-user",
        password="secret",
        organization="Acme Org",
        file_cabinet_id=CABINET,
    )


class TestConnect:
    """Tests for logon and logoff."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_logon_form(self, client, platform, config):
        session = await client.connect(config)

        logon = platform.requests[0]
        form = dict(
            pair.split("=", 1) for pair in logon.content.decode().split("&")
        )
        assert form["UserName"] == "svc-user"
        assert form["Password"] == "secret"
        assert form["Organization"] == "Acme+Org"
        assert session.file_cabinet_id == CABINET

        await client.close(session)

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_logon_rejected(self, client, platform, config, status_code):
        platform.route(
            "POST",
            "/DocuWare/Platform/Account/Logon",
            lambda r: httpx.Response(status_code, text="denied"),
        )

        with pytest.raises(CabinetAuthenticationError) as exc_info:
            await client.connect(config)

        assert exc_info.value.status_code == status_code

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_platform_unreachable(self, config):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = DocuWareClient(transport=httpx.MockTransport(refuse))

        with pytest.raises(CabinetClientError) as exc_info:
            await client.connect(config)

        assert not isinstance(exc_info.value, CabinetAuthenticationError)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_close_logs_off(self, client, platform, config):
        session = await client.connect(config)

        await client.close(session)

        assert platform.requests[-1].url.path == "/DocuWare/Platform/Account/Logoff"
        assert session.http.is_closed


class TestPaging:
    """Tests for document pages and continuation links."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_first_and_next_page(self, client, platform, config):
        next_href = f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents?start=2&count=2"

        def documents(request):
            if request.url.params.get("start") == "2":
                return httpx.Response(200, json={"Items": [document_json(3)]})
            return httpx.Response(
                200,
                json={
                    "Items": [document_json(1), document_json(2)],
                    "Links": [{"rel": "next", "href": next_href}],
                },
            )

        platform.route("GET", f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents", documents)
        session = await client.connect(config)

        first = await client.get_documents_page(session, CABINET, 2)
        second = await client.get_next_page(session, first)

        assert [d.id for d in first.items] == ["1", "2"]
        assert first.has_next
        assert [d.id for d in second.items] == ["3"]
        assert not second.has_next
        assert platform.requests[1].url.params["count"] == "2"
        assert str(platform.requests[2].url) == f"https://example.docuware.cloud{next_href}"

        await client.close(session)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_server_error(self, client, platform, config):
        platform.route(
            "GET",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents",
            lambda r: httpx.Response(500, text="boom"),
        )
        session = await client.connect(config)

        with pytest.raises(CabinetClientError) as exc_info:
            await client.get_documents_page(session, CABINET, 2)

        assert exc_info.value.status_code == 500
        await client.close(session)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_json(self, client, platform, config):
        platform.route(
            "GET",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents",
            lambda r: httpx.Response(200, text="<html>"),
        )
        session = await client.connect(config)

        with pytest.raises(CabinetClientError):
            await client.get_documents_page(session, CABINET, 2)

        await client.close(session)


class TestSearchAndDelete:
    """Tests for dialog expression search and deletion."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_body(self, client, platform, config):
        platform.route(
            "GET",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Dialogs",
            lambda r: httpx.Response(
                200,
                json={
                    "Dialog": [
                        {"Id": "store-1", "Type": "Store"},
                        {"Id": "search-1", "Type": "Search"},
                    ]
                },
            ),
        )
        platform.route(
            "POST",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Query/DialogExpression",
            lambda r: httpx.Response(200, json={"Items": [document_json(42)]}),
        )
        session = await client.connect(config)

        result = await client.search(
            session, CABINET, DialogExpression.equals("DWDOCID", "42")
        )

        request = platform.requests[-1]
        body = json.loads(request.content)
        assert body["Condition"] == [{"DBName": "DWDOCID", "Value": ["42"]}]
        assert body["Operation"] == "And"
        assert request.url.params["count"] == "1"
        assert request.url.params["dialogId"] == "search-1"
        assert platform.requests[-2].url.params["DialogType"] == "Search"
        assert result.items[0].id == "42"

        await client.close(session)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_without_dialog(self, client, platform, config):
        """A cabinet with no search dialog cannot be queried."""
        platform.route(
            "GET",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Dialogs",
            lambda r: httpx.Response(200, json={"Dialog": []}),
        )
        session = await client.connect(config)

        with pytest.raises(CabinetClientError):
            await client.search(
                session, CABINET, DialogExpression.equals("DWDOCID", "42")
            )

        assert not any(
            r.url.path.endswith("/Query/DialogExpression") for r in platform.requests
        )
        await client.close(session)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_follows_self_link(self, client, platform, config):
        platform.route(
            "DELETE",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents/42",
            lambda r: httpx.Response(200, text="Document 42 deleted"),
        )
        session = await client.connect(config)
        document = DocuWareClient._parse_document(document_json(42))

        receipt = await client.delete_document(session, document)

        assert receipt == "Document 42 deleted"
        await client.close(session)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_rejected(self, client, platform, config):
        platform.route(
            "DELETE",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents/42",
            lambda r: httpx.Response(409, text="locked"),
        )
        session = await client.connect(config)
        document = DocuWareClient._parse_document(document_json(42))

        with pytest.raises(CabinetClientError):
            await client.delete_document(session, document)

        await client.close(session)


class TestCreateDocument:
    """Tests for multipart uploads."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_multipart_body(self, client, platform, config, tmp_path: Path):
        platform.route(
            "POST",
            f"/DocuWare/Platform/FileCabinets/{CABINET}/Documents",
            lambda r: httpx.Response(200, json=document_json(7)),
        )
        staged = tmp_path / "staged.pdf"
        staged.write_bytes(b"%PDF-1.4 body")
        input_document = InputDocument(
            fields=[IndexField.create("COMPANY", "Acme")],
            sections=[InputSection(file=FileUploadInfo(staged, "application/pdf"))],
        )
        session = await client.connect(config)

        created = await client.create_document(session, CABINET, input_document)

        body = platform.requests[-1].content
        assert b'name="document"' in body
        assert b'"FieldName": "COMPANY"' in body
        assert b'name="file[]"; filename="staged.pdf"' in body
        assert b"%PDF-1.4 body" in body
        assert created.id == "7"

        await client.close(session)
