"""Domain models for the DocuWare file cabinet.

Field aliases follow the DocuWare Platform REST wire format so the same
models parse backend JSON (``model_validate``) and produce request bodies
(``model_dump(by_alias=True)``).
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Well-known index field names
FIELD_EXTENSION = "DWEXTENSION"
FIELD_COMPANY = "COMPANY"
FIELD_CONTACT = "CONTACT"
FIELD_BIRTHDAY = "BIRTHDAY"
FIELD_DOCUMENT_ID = "DWDOCID"

INDEX_DATE_FORMAT = "%Y-%m-%d"


class CabinetConfig(BaseModel):
    """Connection settings for one file cabinet.

    Values are optional here so that a missing setting surfaces as a
    connection failure when a session is opened rather than at import time.
    """

    platform_uri: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    organization: Optional[str] = None
    file_cabinet_id: Optional[str] = None
    request_timeout: float = 60.0

    model_config = ConfigDict(frozen=True)

    def missing_values(self) -> List[str]:
        """Names of required settings that are absent or blank."""
        required = {
            "platform_uri": self.platform_uri,
            "username": self.username,
            "password": self.password,
            "file_cabinet_id": self.file_cabinet_id,
        }
        return [name for name, value in required.items() if not value or not value.strip()]


@dataclass
class CabinetSession:
    """Authenticated handle bound to one cabinet for one logical operation."""

    platform_uri: str
    file_cabinet_id: str
    http: Any  # httpx.AsyncClient for the REST client, anything for fakes
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ItemElementName(str, Enum):
    """Value types DocuWare accepts for an index field item."""

    STRING = "String"
    INT = "Int"
    DECIMAL = "Decimal"
    DATE = "Date"
    DATETIME = "DateTime"
    KEYWORDS = "Keywords"


class IndexField(BaseModel):
    """A named index value attached to a document."""

    field_name: str = Field(..., alias="FieldName")
    item: Optional[Any] = Field(None, alias="Item")
    item_element_name: ItemElementName = Field(
        ItemElementName.STRING, alias="ItemElementName"
    )

    model_config = ConfigDict(
        populate_by_name=True, use_enum_values=True, extra="ignore", frozen=True
    )

    @classmethod
    def create(cls, name: str, value: str) -> "IndexField":
        """Create a string-typed index field."""
        return cls(field_name=name, item=value)

    @classmethod
    def create_date(cls, name: str, value: date) -> "IndexField":
        """Create a string index field holding a ``yyyy-MM-dd`` date."""
        return cls(field_name=name, item=value.strftime(INDEX_DATE_FORMAT))


class Link(BaseModel):
    rel: str
    href: str

    model_config = ConfigDict(extra="ignore", frozen=True)


class CabinetDocument(BaseModel):
    """A document as returned by the cabinet. Never edited in place."""

    id: str = Field(..., alias="Id")
    content_type: Optional[str] = Field(None, alias="ContentType")
    title: Optional[str] = Field(None, alias="Title")
    file_size: Optional[int] = Field(None, alias="FileSize")
    fields: List[IndexField] = Field(default_factory=list, alias="Fields")
    links: List[Link] = Field(default_factory=list, alias="Links")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """DocuWare returns numeric ids; the gateway treats them as strings."""
        return str(v)

    def field_value(self, name: str) -> Optional[Any]:
        """Return the item of the named index field, if present."""
        for index_field in self.fields:
            if index_field.field_name == name:
                return index_field.item
        return None

    def link(self, rel: str) -> Optional[str]:
        for item in self.links:
            if item.rel == rel:
                return item.href
        return None


class PagedResult(BaseModel):
    """One batch of documents plus the continuation link, if any."""

    items: List[CabinetDocument] = Field(default_factory=list)
    next_link: Optional[str] = None

    @property
    def has_next(self) -> bool:
        return bool(self.next_link)


class UploadMetadata(BaseModel):
    """Index metadata supplied alongside an uploaded file."""

    company_name: str = Field(..., min_length=1, description="Company name")
    contact_name: str = Field(..., min_length=1, description="Contact name")
    birthday: date = Field(..., description="Contact birthday")


@dataclass(frozen=True)
class FileUploadInfo:
    """Reference to a staged file handed to the cabinet upload primitive."""

    path: Path
    content_type: str

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def length(self) -> int:
        return self.path.stat().st_size

    @property
    def last_write_time_utc(self) -> datetime:
        return datetime.fromtimestamp(self.path.stat().st_mtime, tz=timezone.utc)

    def open(self) -> BinaryIO:
        """Open a read-only stream over the staged file."""
        return self.path.open("rb")


@dataclass(frozen=True)
class InputSection:
    file: FileUploadInfo


@dataclass
class InputDocument:
    """Upload unit: index fields plus the file sections to store."""

    fields: List[IndexField]
    sections: List[InputSection] = field(default_factory=list)

    def index_payload(self) -> Dict[str, Any]:
        """JSON body describing the index data of the new document."""
        return {"Fields": [f.model_dump(by_alias=True, mode="json") for f in self.fields]}


class DialogExpressionOperation(str, Enum):
    AND = "And"
    OR = "Or"


class DialogExpressionCondition(BaseModel):
    db_name: str = Field(..., alias="DBName")
    value: List[str] = Field(..., alias="Value")

    model_config = ConfigDict(populate_by_name=True)


class DialogExpression(BaseModel):
    """Structured search predicate sent to the cabinet."""

    condition: List[DialogExpressionCondition] = Field(..., alias="Condition")
    operation: DialogExpressionOperation = Field(
        DialogExpressionOperation.AND, alias="Operation"
    )
    start: int = Field(0, ge=0, alias="Start")
    count: int = Field(1, ge=1, alias="Count")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    @classmethod
    def equals(cls, db_name: str, value: str, count: int = 1) -> "DialogExpression":
        """Expression matching documents whose field equals ``value``."""
        return cls(
            condition=[DialogExpressionCondition(db_name=db_name, value=[value])],
            operation=DialogExpressionOperation.AND,
            start=0,
            count=count,
        )


class DeleteReceipt(BaseModel):
    """Confirmation of a delete; ``result`` is the backend's raw receipt."""

    document_id: str
    result: str
