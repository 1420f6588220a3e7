"""
Document Base Service - Common utilities and shared functionality.

Every document service talks to the cabinet through the same
``CabinetClient`` and logs through the shared "document" service logger.
"""

from typing import Optional

from app.core.docuware_client import CabinetClient, docuware_client
from app.core.logging import get_service_logger


class DocumentBaseService:
    """Base service with common functionality shared across all document services."""

    def __init__(self, client: Optional[CabinetClient] = None):
        """Initialize base service with the cabinet client to use."""
        self.logger = get_service_logger("document")
        self.client = client or docuware_client
