"""
Signature Injection Engine - Main FastAPI Application
Places signature, image, text and date fields onto uploaded PDFs and keeps a
hash-based audit trail of every signing.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from signengine import __version__
from signengine.audit_store import get_audit_store
from signengine.config import get_cors_origins, get_settings
from signengine.errors import EngineError
from signengine.exceptions import (
    AppException,
    app_exception_handler,
    engine_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from signengine.storage import get_originals_store, get_signed_store
from signengine.utils.logging import RequestIdMiddleware, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    setup_logging(
        environment=settings.environment,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )
    logger.info(f"Starting Signature Injection Engine v{__version__} ({settings.environment})")

    get_originals_store().initialize()
    get_signed_store().initialize()
    get_audit_store().initialize()

    yield
    logger.info("Shutting down Signature Injection Engine")


app = FastAPI(
    title="Signature Injection Engine",
    description="""Places fields drawn in a browser viewer onto the matching spot of a PDF.

## Workflow

1. `POST /api/pdf/upload` stores an original and returns its id and SHA-256 hash.
2. `POST /api/sign-pdf` renders one field onto a fresh copy of that original.
3. `GET /api/pdf/download/{id}` returns the signed result.
4. `GET /api/audit/{id}` lists every signing of the original with both hashes.
""",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "documents", "description": "Upload and download documents"},
        {"name": "signing", "description": "Field placement"},
        {"name": "audit", "description": "Audit trail and hash verification"},
        {"name": "health", "description": "Health check endpoints"},
    ],
)


from signengine.routers import audit, health, pdf, sign

# Middleware
app.add_middleware(RequestIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(EngineError, engine_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Routers
app.include_router(health.router)
app.include_router(pdf.router)
app.include_router(sign.router)
app.include_router(audit.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "signengine.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=True,
    )
