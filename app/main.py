"""FastAPI Application Entry Point.

HTTP gateway in front of a DocuWare file cabinet, featuring:
- Listing every document in the cabinet (all pages)
- Uploading a file with its index data
- Deleting a document by identifier
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.logging import configure_logging, setup_request_logging, get_logger
from app.core.exceptions import setup_exception_handlers
from app.core.middleware import setup_all_middleware

# Configure logging first
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    logger.info(
        "Starting application",
        project_name=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
    )

    # Sessions are opened per request; only report what is missing
    missing = settings.cabinet_config.missing_values()
    if missing:
        logger.warning("DocuWare settings incomplete", missing=missing)
    else:
        logger.info(
            "DocuWare cabinet configured",
            platform_uri=settings.DOCUWARE_PLATFORM_URI,
            file_cabinet_id=settings.DOCUWARE_FILE_CABINET_ID,
        )

    logger.info("Application startup completed")

    yield

    # Shutdown
    logger.info("Application shutdown completed")


# API Description
API_DESCRIPTION = """# DocuWare Gateway API

## Overview
Thin HTTP gateway over a single DocuWare file cabinet. Every request opens
its own cabinet session, performs one operation and closes the session.

## Documents
- `GET /api/v1/documents/list` - List every document in the cabinet
- `POST /api/v1/documents/upload` - Upload a file with company, contact and birthday index data
- `DELETE /api/v1/documents/{document_id}` - Delete a document by identifier

## Health checks
- `GET /health`, `GET /live` - Process health
- `GET /ready` - Verifies a cabinet session can be opened
"""

# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=API_DESCRIPTION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.DEBUG else None,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Setup middleware (request context, CORS outermost)
setup_all_middleware(app)

# Setup exception handlers AFTER CORS middleware
setup_exception_handlers(app)

# Setup request logging
setup_request_logging(app)


# Include health router (root level endpoints)
from app.api.health import router as health_router

app.include_router(health_router, tags=["Health"])

from app.api.v1.documents_main import router as documents_router

app.include_router(
    documents_router, prefix=f"{settings.API_V1_STR}/documents", tags=["Documents"]
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
