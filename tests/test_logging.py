"""
Tests for logging helpers.
"""
import json
import logging

import pytest

from signengine.utils.logging import (
    CloudLoggingFormatter,
    DevelopmentFormatter,
    clear_context,
    extract_document_id,
    fingerprint,
    set_context,
    set_request_id,
)

DOC_ID = "0123456789abcdef0123456789abcdef"


@pytest.fixture(autouse=True)
def reset_context():
    clear_context()
    yield
    clear_context()


def make_record(message="hello"):
    return logging.LogRecord("signengine.test", logging.INFO, __file__, 10, message, None, None)


class TestExtractDocumentId:
    @pytest.mark.parametrize("path,expected", [
        (f"/api/pdf/{DOC_ID}", DOC_ID),
        (f"/api/pdf/download/{DOC_ID}", DOC_ID),
        (f"/api/audit/{DOC_ID}", DOC_ID),
        (f"/api/audit/{DOC_ID}/report", DOC_ID),
        ("/api/pdf/upload", None),
        ("/api/pdf/sample", None),
        ("/api/sign-pdf", None),
        ("/health", None),
    ])
    def test_paths(self, path, expected):
        assert extract_document_id(path) == expected


class TestFingerprint:
    def test_short_and_stable(self):
        assert fingerprint("payload") == fingerprint("payload")
        assert len(fingerprint("payload")) == 8

    def test_prefix_and_empty(self):
        assert fingerprint("payload", "img_").startswith("img_")
        assert fingerprint(None, "img_") == "img_none"


class TestFormatters:
    def test_cloud_formatter_includes_context(self):
        set_request_id("req-123")
        set_context(document_id=DOC_ID, field_type="signature")

        entry = json.loads(CloudLoggingFormatter().format(make_record()))

        assert entry["severity"] == "INFO"
        assert entry["message"] == "hello"
        assert entry["request_id"] == "req-123"
        assert entry["document_id"] == DOC_ID
        assert entry["field_type"] == "signature"

    def test_cloud_formatter_without_context(self):
        entry = json.loads(CloudLoggingFormatter().format(make_record()))
        assert "request_id" not in entry
        assert "document_id" not in entry

    def test_development_formatter(self):
        set_request_id("abcdef123456")
        set_context(document_id=DOC_ID)

        line = DevelopmentFormatter().format(make_record("signed"))

        assert line == "[INFO] [abcdef12] [doc:01234567] signed"
