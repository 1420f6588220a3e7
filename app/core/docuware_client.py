"""DocuWare Platform REST client.

``CabinetClient`` is the capability set the document services rely on
(connect, page fetch, search, create, delete). ``DocuWareClient`` implements
it over httpx against the DocuWare Platform REST API; tests substitute an
in-memory implementation.
"""

import json
from abc import ABC, abstractmethod
from contextlib import ExitStack
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.logging import get_service_logger
from app.models.cabinet import (
    CabinetConfig,
    CabinetDocument,
    CabinetSession,
    DialogExpression,
    InputDocument,
    PagedResult,
)

logger = get_service_logger("docuware_client")


class CabinetClientError(Exception):
    """Base exception for cabinet client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CabinetAuthenticationError(CabinetClientError):
    """Credentials rejected by the platform."""

    pass


class CabinetClient(ABC):
    """Operations the gateway needs from an external document cabinet."""

    @abstractmethod
    async def connect(self, config: CabinetConfig) -> CabinetSession:
        """Authenticate and return a session bound to the configured cabinet."""

    @abstractmethod
    async def close(self, session: CabinetSession) -> None:
        """Release the session. Must not raise."""

    @abstractmethod
    async def get_documents_page(
        self, session: CabinetSession, cabinet_id: str, count: int
    ) -> PagedResult:
        """Fetch the first page of documents, at most ``count`` items."""

    @abstractmethod
    async def get_next_page(
        self, session: CabinetSession, paged_result: PagedResult
    ) -> PagedResult:
        """Follow the continuation link of ``paged_result``."""

    @abstractmethod
    async def create_document(
        self, session: CabinetSession, cabinet_id: str, document: InputDocument
    ) -> CabinetDocument:
        """Store a new document and return it with its assigned id."""

    @abstractmethod
    async def search(
        self, session: CabinetSession, cabinet_id: str, expression: DialogExpression
    ) -> PagedResult:
        """Run a dialog expression query against the cabinet."""

    @abstractmethod
    async def delete_document(
        self, session: CabinetSession, document: CabinetDocument
    ) -> str:
        """Delete ``document`` and return the platform's receipt."""


class DocuWareClient(CabinetClient):
    """httpx implementation of the DocuWare Platform REST API."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.logger = logger
        # Injected in tests; None means a real network transport
        self._transport = transport

    async def connect(self, config: CabinetConfig) -> CabinetSession:
        base_uri = config.platform_uri.rstrip("/")
        http = httpx.AsyncClient(
            base_url=f"{base_uri}/",
            timeout=config.request_timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )

        form = {
            "UserName": config.username,
            "Password": config.password,
            "RememberMe": "false",
            "RedirectToMyselfInCaseOfError": "false",
        }
        if config.organization:
            form["Organization"] = config.organization

        try:
            response = await http.post("Account/Logon", data=form)
        except httpx.HTTPError as e:
            await http.aclose()
            self.logger.error(
                "DocuWare platform unreachable", platform_uri=base_uri, error=str(e)
            )
            raise CabinetClientError(f"DocuWare platform unreachable: {e}") from e

        if response.status_code in (401, 403):
            await http.aclose()
            self.logger.error(
                "DocuWare logon rejected",
                platform_uri=base_uri,
                username=config.username,
                status_code=response.status_code,
            )
            raise CabinetAuthenticationError(
                "DocuWare rejected the configured credentials",
                status_code=response.status_code,
            )
        if response.is_error:
            await http.aclose()
            raise CabinetClientError(
                f"DocuWare logon failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        self.logger.debug("DocuWare logon succeeded", platform_uri=base_uri)
        return CabinetSession(
            platform_uri=base_uri,
            file_cabinet_id=config.file_cabinet_id,
            http=http,
        )

    async def close(self, session: CabinetSession) -> None:
        try:
            # Logoff releases the platform license held by the session
            await session.http.post("Account/Logoff")
        except httpx.HTTPError as e:
            self.logger.warning("DocuWare logoff failed", error=str(e))
        finally:
            await session.http.aclose()

    async def get_documents_page(
        self, session: CabinetSession, cabinet_id: str, count: int
    ) -> PagedResult:
        response = await self._request(
            session,
            "GET",
            f"FileCabinets/{cabinet_id}/Documents",
            "fetch documents page",
            params={"count": count},
        )
        return self._parse_paged_result(response)

    async def get_next_page(
        self, session: CabinetSession, paged_result: PagedResult
    ) -> PagedResult:
        if not paged_result.next_link:
            raise CabinetClientError("Paged result has no next link")

        response = await self._request(
            session,
            "GET",
            self._resolve(session, paged_result.next_link),
            "fetch next documents page",
        )
        return self._parse_paged_result(response)

    async def create_document(
        self, session: CabinetSession, cabinet_id: str, document: InputDocument
    ) -> CabinetDocument:
        with ExitStack() as stack:
            files = [
                (
                    "document",
                    (
                        None,
                        json.dumps(document.index_payload()).encode("utf-8"),
                        "application/json",
                    ),
                )
            ]
            for section in document.sections:
                files.append(
                    (
                        "file[]",
                        (
                            section.file.name,
                            stack.enter_context(section.file.open()),
                            section.file.content_type,
                        ),
                    )
                )

            response = await self._request(
                session,
                "POST",
                f"FileCabinets/{cabinet_id}/Documents",
                "upload document",
                files=files,
            )

        return self._parse_document(self._json(response))

    async def search(
        self, session: CabinetSession, cabinet_id: str, expression: DialogExpression
    ) -> PagedResult:
        dialog_id = await self._search_dialog_id(session, cabinet_id)
        response = await self._request(
            session,
            "POST",
            f"FileCabinets/{cabinet_id}/Query/DialogExpression",
            "search documents",
            params={
                "dialogId": dialog_id,
                "start": expression.start,
                "count": expression.count,
            },
            json=expression.model_dump(by_alias=True, mode="json"),
        )
        return self._parse_paged_result(response)

    async def _search_dialog_id(self, session: CabinetSession, cabinet_id: str) -> str:
        """Id of the cabinet's search dialog; queries run through it."""
        response = await self._request(
            session,
            "GET",
            f"FileCabinets/{cabinet_id}/Dialogs",
            "fetch search dialogs",
            params={"DialogType": "Search"},
        )
        for dialog in self._json(response).get("Dialog") or []:
            if dialog.get("Type", "Search") == "Search" and dialog.get("Id"):
                return str(dialog["Id"])

        self.logger.error("File cabinet has no search dialog", cabinet_id=cabinet_id)
        raise CabinetClientError(f"File cabinet {cabinet_id} has no search dialog")

    async def delete_document(
        self, session: CabinetSession, document: CabinetDocument
    ) -> str:
        url = document.link("self") or (
            f"FileCabinets/{session.file_cabinet_id}/Documents/{document.id}"
        )
        response = await self._request(
            session, "DELETE", self._resolve(session, url), "delete document"
        )
        return response.text

    async def _request(
        self,
        session: CabinetSession,
        method: str,
        url: str,
        operation: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await session.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self.logger.error(
                f"DocuWare request failed: {operation}", url=str(url), error=str(e)
            )
            raise CabinetClientError(f"Failed to {operation}: {e}") from e

        if response.is_error:
            self.logger.error(
                f"DocuWare returned an error: {operation}",
                url=str(url),
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise CabinetClientError(
                f"Failed to {operation}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _resolve(session: CabinetSession, href: str) -> str:
        """Resolve a platform link (usually server-absolute) to a full URL."""
        return str(session.http.base_url.join(href))

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise CabinetClientError(f"Invalid JSON from DocuWare: {e}") from e

    def _parse_paged_result(self, response: httpx.Response) -> PagedResult:
        data = self._json(response)
        next_link = None
        for link in data.get("Links") or []:
            if link.get("rel") == "next":
                next_link = link.get("href")
                break

        return PagedResult(
            items=[self._parse_document(item) for item in data.get("Items") or []],
            next_link=next_link,
        )

    @staticmethod
    def _parse_document(data: Dict[str, Any]) -> CabinetDocument:
        try:
            return CabinetDocument.model_validate(data)
        except PydanticValidationError as e:
            raise CabinetClientError(f"Unexpected document payload: {e}") from e


# Global client instance
docuware_client = DocuWareClient()
