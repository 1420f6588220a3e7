"""
Cabinet Session Provider - opens one DocuWare session per operation.

Sessions are never cached or pooled: each request pays for its own logon
and gets an isolated handle that is closed when the operation ends.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from app.core.docuware_client import (
    CabinetAuthenticationError,
    CabinetClient,
    CabinetClientError,
)
from app.core.exceptions import CabinetConnectionError
from app.models.cabinet import CabinetConfig, CabinetSession
from .document_base_service import DocumentBaseService


class CabinetSessionProvider(DocumentBaseService):
    """Builds session handles from an explicit cabinet configuration."""

    def __init__(self, config: CabinetConfig, client: Optional[CabinetClient] = None):
        super().__init__(client)
        self.config = config

    def _validate_config(self) -> None:
        missing = self.config.missing_values()
        if missing:
            self.logger.error("DocuWare configuration incomplete", missing=missing)
            raise CabinetConnectionError(
                "DocuWare configuration is incomplete",
                details={"missing": missing},
            )

        try:
            url = httpx.URL(self.config.platform_uri.strip())
        except httpx.InvalidURL as e:
            raise CabinetConnectionError(
                f"Malformed DocuWare platform URI: {e}"
            ) from e

        if url.scheme not in ("http", "https") or not url.host:
            self.logger.error(
                "Malformed DocuWare platform URI", platform_uri=self.config.platform_uri
            )
            raise CabinetConnectionError(
                "Malformed DocuWare platform URI",
                details={"platform_uri": self.config.platform_uri},
            )

    async def open_session(self) -> CabinetSession:
        """
        Establish a session with the DocuWare platform.

        Returns:
            A session bound to the configured file cabinet

        Raises:
            CabinetConnectionError: If configuration is missing or malformed,
                the platform is unreachable, or credentials are rejected
        """
        self._validate_config()

        platform_uri = self.config.platform_uri.strip()
        self.logger.info(
            "Establishing connection to the DocuWare platform",
            platform_uri=platform_uri,
        )

        config = self.config.model_copy(update={"platform_uri": platform_uri})
        try:
            session = await self.client.connect(config)
        except CabinetAuthenticationError as e:
            raise CabinetConnectionError(
                "DocuWare rejected the configured credentials",
                details={"platform_uri": platform_uri},
            ) from e
        except CabinetClientError as e:
            raise CabinetConnectionError(
                f"Could not connect to the DocuWare platform: {e}",
                details={"platform_uri": platform_uri},
            ) from e

        self.logger.info(
            "Connected to the DocuWare platform", platform_uri=platform_uri
        )
        return session

    async def close_session(self, session: CabinetSession) -> None:
        await self.client.close(session)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[CabinetSession]:
        """Open a session for the duration of one operation."""
        session = await self.open_session()
        try:
            yield session
        finally:
            await self.close_session(session)
