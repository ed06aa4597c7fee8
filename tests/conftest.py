"""
Pytest configuration and fixtures.
"""
import base64
import io
import os
import sys
import tempfile
from unittest.mock import MagicMock

import fitz  # PyMuPDF
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from signengine.audit_store import InMemoryAuditStore
from signengine.pdf.compositor import FieldCompositor
from signengine.services.audit_trail import AuditTrailRecorder
from signengine.services.signing_pipeline import DocumentSigningPipeline
from signengine.storage.local import LocalByteStore


# US Letter and A4 page sizes in points
LETTER = (612.0, 792.0)
A4 = (595.0, 842.0)


def make_pdf(page_sizes=(LETTER,)) -> bytes:
    """Build a PDF with one labelled page per (width, height) entry."""
    doc = fitz.open()
    try:
        for i, (width, height) in enumerate(page_sizes):
            page = doc.new_page(width=width, height=height)
            page.insert_text((72, 72), f"Page {i + 1}", fontname="helv", fontsize=14)
        return doc.tobytes()
    finally:
        doc.close()


def make_image(width: int, height: int, image_format: str = "PNG") -> bytes:
    mode = "RGBA" if image_format == "PNG" else "RGB"
    img = Image.new(mode, (width, height), (20, 40, 160) if mode == "RGB" else (20, 40, 160, 255))
    buffer = io.BytesIO()
    img.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def png_bytes():
    """200x100 opaque PNG (2:1 aspect)."""
    return make_image(200, 100, "PNG")


@pytest.fixture
def jpeg_bytes():
    """100x200 JPEG (1:2 aspect)."""
    return make_image(100, 200, "JPEG")


@pytest.fixture
def sample_png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode()


@pytest.fixture
def letter_pdf():
    """Single US Letter page."""
    return make_pdf([LETTER])


@pytest.fixture
def three_page_pdf():
    """Three pages: Letter, A4, Letter."""
    return make_pdf([LETTER, A4, LETTER])


@pytest.fixture
def originals_store(temp_dir):
    store = LocalByteStore(os.path.join(temp_dir, "uploads"), label="PDF")
    store.initialize()
    return store


@pytest.fixture
def signed_store(temp_dir):
    store = LocalByteStore(os.path.join(temp_dir, "outputs"), label="Signed PDF")
    store.initialize()
    return store


@pytest.fixture
def audit_store():
    return InMemoryAuditStore()


@pytest.fixture
def pipeline(originals_store, signed_store):
    return DocumentSigningPipeline(originals_store, signed_store, FieldCompositor())


@pytest.fixture
def recorder(originals_store, signed_store, audit_store):
    return AuditTrailRecorder(originals_store, signed_store, audit_store)


@pytest.fixture
def mock_supabase():
    """Create mock Supabase client."""
    client = MagicMock()

    # Mock table operations
    table_mock = MagicMock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.execute.return_value = MagicMock(data=[], count=0)

    client.table.return_value = table_mock
    return client


@pytest.fixture
def mock_gcs_bucket():
    """Mock GCS bucket whose blobs keep uploaded bytes in a dict."""
    objects = {}
    bucket = MagicMock()

    def make_blob(name):
        blob = MagicMock()
        blob.name = name
        blob.upload_from_string.side_effect = lambda data, content_type=None: objects.__setitem__(name, data)
        blob.exists.side_effect = lambda: name in objects
        blob.download_as_bytes.side_effect = lambda: objects[name]
        return blob

    bucket.blob.side_effect = make_blob
    bucket.objects = objects
    return bucket


@pytest.fixture
def client(originals_store, signed_store, pipeline, recorder):
    """TestClient wired to temp-dir stores and an in-memory audit store."""
    from signengine.main import app
    from signengine.services.audit_trail import get_audit_recorder
    from signengine.services.signing_pipeline import get_signing_pipeline
    from signengine.storage import get_originals_store, get_signed_store

    app.dependency_overrides[get_originals_store] = lambda: originals_store
    app.dependency_overrides[get_signed_store] = lambda: signed_store
    app.dependency_overrides[get_signing_pipeline] = lambda: pipeline
    app.dependency_overrides[get_audit_recorder] = lambda: recorder

    # No context manager: lifespan would initialize the configured stores
    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
