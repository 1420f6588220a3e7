import tempfile
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.cabinet import CabinetConfig


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # FastAPI Configuration
    PROJECT_NAME: str = "DocuWare Gateway API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # DocuWare Configuration - validated when a session is opened, not at startup
    DOCUWARE_PLATFORM_URI: Optional[str] = Field(
        default=None,
        description="DocuWare Platform base URL, e.g. https://host/DocuWare/Platform",
    )
    DOCUWARE_USERNAME: Optional[str] = None
    DOCUWARE_PASSWORD: Optional[str] = None
    DOCUWARE_ORGANIZATION: Optional[str] = None
    DOCUWARE_FILE_CABINET_ID: Optional[str] = None

    CABINET_REQUEST_TIMEOUT: float = Field(
        default=60.0, description="Timeout in seconds for calls to the cabinet"
    )

    # Listing Configuration
    LIST_PAGE_SIZE: int = Field(
        default=1000, ge=1, description="Documents requested per cabinet page"
    )
    LIST_MAX_PAGES: int = Field(
        default=10000,
        ge=1,
        description="Upper bound on pages followed for a single listing",
    )

    # Upload Configuration
    STAGING_DIR: str = Field(
        default_factory=tempfile.gettempdir,
        description="Scratch directory for staged upload files",
    )
    MAX_FILE_SIZE: int = 50 * 1024 * 1024  # 50MB in bytes

    # CORS Settings
    CORS_ORIGINS: List[str] = ["http://localhost:4200"]
    ADDITIONAL_CORS_ORIGINS: Optional[str] = None
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["GET", "POST", "DELETE", "OPTIONS"]
    CORS_HEADERS: List[str] = ["*"]

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level so dictConfig accepts it."""
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only the console and JSON renderers are supported."""
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def resolved_cors_origins(self) -> List[str]:
        """Get CORS origins including any additional comma-separated origins."""
        origins = list(self.CORS_ORIGINS)

        if self.ADDITIONAL_CORS_ORIGINS:
            origins.extend(
                origin.strip()
                for origin in self.ADDITIONAL_CORS_ORIGINS.split(",")
                if origin.strip()
            )

        # Remove duplicates while preserving order
        seen = set()
        unique_origins = []
        for origin in origins:
            if origin not in seen:
                seen.add(origin)
                unique_origins.append(origin)

        return unique_origins

    @property
    def cabinet_config(self) -> CabinetConfig:
        """Explicit cabinet configuration handed to the session provider."""
        return CabinetConfig(
            platform_uri=self.DOCUWARE_PLATFORM_URI,
            username=self.DOCUWARE_USERNAME,
            password=self.DOCUWARE_PASSWORD,
            organization=self.DOCUWARE_ORGANIZATION,
            file_cabinet_id=self.DOCUWARE_FILE_CABINET_ID,
            request_timeout=self.CABINET_REQUEST_TIMEOUT,
        )


# Global settings instance
settings = Settings()
