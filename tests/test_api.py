"""
HTTP API tests using FastAPI's TestClient.
"""
import base64

import fitz  # PyMuPDF
import pytest

from signengine.utils.security import compute_bytes_hash


def upload(client, pdf_bytes, file_name="contract.pdf"):
    response = client.post("/api/pdf/upload", json={
        "pdfBase64": base64.b64encode(pdf_bytes).decode(),
        "fileName": file_name,
    })
    assert response.status_code == 200, response.text
    return response.json()


def sign_body(pdf_id, **overrides):
    body = {
        "pdfId": pdf_id,
        "coordinates": {
            "x": 100,
            "y": 200,
            "width": 200,
            "height": 100,
            "viewportWidth": 800,
            "viewportHeight": 1000,
            "pageNumber": 1,
        },
    }
    body.update(overrides)
    return body


class TestHealth:
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_healthy(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"


class TestUpload:
    """POST /api/pdf/upload"""

    def test_upload_returns_id_and_hash(self, client, three_page_pdf, originals_store):
        data = upload(client, three_page_pdf)

        assert data["fileName"] == "contract.pdf"
        assert data["pageCount"] == 3
        assert data["originalHash"] == compute_bytes_hash(three_page_pdf)
        assert originals_store.get(data["pdfId"]) == three_page_pdf

    def test_data_url_prefix_accepted(self, client, letter_pdf):
        response = client.post("/api/pdf/upload", json={
            "pdfBase64": "data:application/pdf;base64," + base64.b64encode(letter_pdf).decode(),
        })
        assert response.status_code == 200
        assert response.json()["fileName"] == "document.pdf"

    def test_invalid_base64(self, client):
        response = client.post("/api/pdf/upload", json={"pdfBase64": "%%%not-base64%%%"})
        assert response.status_code == 422
        assert response.json()["code"] == "DECODE_ERROR"

    def test_not_a_pdf(self, client):
        response = client.post("/api/pdf/upload", json={
            "pdfBase64": base64.b64encode(b"hello world").decode(),
        })
        assert response.status_code == 422
        assert response.json()["code"] == "DECODE_ERROR"

    def test_missing_body_field(self, client):
        response = client.post("/api/pdf/upload", json={})
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_too_large(self, client, letter_pdf):
        from signengine.config import Settings, get_settings
        from signengine.main import app

        app.dependency_overrides[get_settings] = lambda: Settings(MAX_UPLOAD_MB=0)
        response = client.post("/api/pdf/upload", json={
            "pdfBase64": base64.b64encode(letter_pdf).decode(),
        })
        assert response.status_code == 413
        assert response.json()["code"] == "PAYLOAD_TOO_LARGE"


class TestFetch:
    """GET /api/pdf/..."""

    def test_get_original_as_base64(self, client, letter_pdf):
        pdf_id = upload(client, letter_pdf)["pdfId"]

        response = client.get(f"/api/pdf/{pdf_id}")

        assert response.status_code == 200
        assert base64.b64decode(response.json()["pdfBase64"]) == letter_pdf
        assert response.json()["contentType"] == "application/pdf"

    def test_unknown_original(self, client):
        response = client.get(f"/api/pdf/{'0' * 32}")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_sample_pdf(self, client):
        response = client.get("/api/pdf/sample")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_unknown_download(self, client):
        response = client.get(f"/api/pdf/download/{'0' * 32}")
        assert response.status_code == 404


class TestSignPdf:
    """POST /api/sign-pdf"""

    def test_signature_round_trip(self, client, letter_pdf, sample_png_base64):
        pdf_id = upload(client, letter_pdf)["pdfId"]

        response = client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64))

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["success"] is True
        assert data["signedPdfUrl"] == f"/api/pdf/download/{data['signedPdfId']}"

        download = client.get(data["signedPdfUrl"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert compute_bytes_hash(download.content) == data["auditRecord"]["resultHash"]
        assert data["auditRecord"]["originalHash"] == compute_bytes_hash(letter_pdf)

        doc = fitz.open(stream=download.content, filetype="pdf")
        try:
            assert len(doc[0].get_images()) == 1
        finally:
            doc.close()

    def test_field_type_defaults_to_signature(self, client, letter_pdf, sample_png_base64):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        response = client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64))
        assert response.json()["auditRecord"]["fieldType"] == "signature"

    def test_text_field_without_image(self, client, letter_pdf):
        pdf_id = upload(client, letter_pdf)["pdfId"]

        response = client.post("/api/sign-pdf", json=sign_body(
            pdf_id, fieldType="text", fieldData={"text": "Jane Roe", "fontSize": 14},
        ))

        assert response.status_code == 200, response.text
        signed = client.get(response.json()["signedPdfUrl"]).content
        doc = fitz.open(stream=signed, filetype="pdf")
        try:
            assert "Jane Roe" in doc[0].get_text()
        finally:
            doc.close()

    def test_radio_accepted(self, client, letter_pdf):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        response = client.post("/api/sign-pdf", json=sign_body(pdf_id, fieldType="radio"))
        assert response.status_code == 200
        assert response.json()["auditRecord"]["fieldType"] == "radio"

    def test_page_out_of_range_signs_first_page(self, client, three_page_pdf, sample_png_base64):
        pdf_id = upload(client, three_page_pdf)["pdfId"]
        body = sign_body(pdf_id, signatureImage=sample_png_base64)
        body["coordinates"]["pageNumber"] = 99

        response = client.post("/api/sign-pdf", json=body)

        assert response.status_code == 200
        signed = client.get(response.json()["signedPdfUrl"]).content
        doc = fitz.open(stream=signed, filetype="pdf")
        try:
            assert [len(p.get_images()) for p in doc] == [1, 0, 0]
        finally:
            doc.close()

    def test_unknown_pdf(self, client, sample_png_base64):
        response = client.post("/api/sign-pdf", json=sign_body("0" * 32, signatureImage=sample_png_base64))
        assert response.status_code == 404

    def test_signature_without_image(self, client, letter_pdf):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        response = client.post("/api/sign-pdf", json=sign_body(pdf_id))
        assert response.status_code == 422
        assert response.json()["code"] == "DECODE_ERROR"

    def test_zero_viewport(self, client, letter_pdf, sample_png_base64):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        body = sign_body(pdf_id, signatureImage=sample_png_base64)
        body["coordinates"]["viewportWidth"] = 0

        response = client.post("/api/sign-pdf", json=body)

        assert response.status_code == 400
        assert response.json()["code"] == "CONFIGURATION_ERROR"

    def test_unknown_field_type(self, client, letter_pdf):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        response = client.post("/api/sign-pdf", json=sign_body(pdf_id, fieldType="checkbox"))
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_audit_failure_reports_signed_url(self, client, letter_pdf, sample_png_base64, signed_store, monkeypatch):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        real_get = signed_store.get

        def failing_get(document_id):
            raise OSError("disk unavailable")

        monkeypatch.setattr(signed_store, "get", failing_get)
        response = client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64))

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTEGRITY_ERROR"
        signed_id = body["details"]["signedPdfId"]
        assert body["details"]["signedPdfUrl"] == f"/api/pdf/download/{signed_id}"
        assert real_get(signed_id).startswith(b"%PDF")

    def test_audit_append_failure_reports_signed_url(self, client, letter_pdf, sample_png_base64,
                                                     signed_store, audit_store, monkeypatch):
        pdf_id = upload(client, letter_pdf)["pdfId"]

        def failing_append(record):
            raise OSError("audit disk full")

        monkeypatch.setattr(audit_store, "append", failing_append)
        response = client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64))

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTEGRITY_ERROR"
        assert "audit disk full" in body["message"]
        signed_id = body["details"]["signedPdfId"]
        assert body["details"]["signedPdfUrl"] == f"/api/pdf/download/{signed_id}"
        assert signed_store.get(signed_id).startswith(b"%PDF")

    def test_null_page_number_signs_first_page(self, client, three_page_pdf, sample_png_base64):
        pdf_id = upload(client, three_page_pdf)["pdfId"]
        body = sign_body(pdf_id, signatureImage=sample_png_base64)
        body["coordinates"]["pageNumber"] = None

        response = client.post("/api/sign-pdf", json=body)

        assert response.status_code == 200, response.text
        assert response.json()["auditRecord"]["placement"]["page_number"] == 1
        signed = client.get(response.json()["signedPdfUrl"]).content
        doc = fitz.open(stream=signed, filetype="pdf")
        try:
            assert [len(p.get_images()) for p in doc] == [1, 0, 0]
        finally:
            doc.close()


class TestAudit:
    """GET/POST /api/audit/..."""

    def test_trail_most_recent_first(self, client, letter_pdf, sample_png_base64):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        first = client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64)).json()
        second = client.post("/api/sign-pdf", json=sign_body(pdf_id, fieldType="date")).json()

        response = client.get(f"/api/audit/{pdf_id}")

        assert response.status_code == 200
        records = response.json()["records"]
        assert [r["resultDocumentId"] for r in records] == [second["signedPdfId"], first["signedPdfId"]]

    def test_empty_trail(self, client):
        response = client.get(f"/api/audit/{'0' * 32}")
        assert response.status_code == 200
        assert response.json()["records"] == []

    def test_report(self, client, letter_pdf, sample_png_base64):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64))

        response = client.get(f"/api/audit/{pdf_id}/report")

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_verify_signed_hash(self, client, letter_pdf, sample_png_base64):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        signed = client.post("/api/sign-pdf", json=sign_body(pdf_id, signatureImage=sample_png_base64)).json()
        signed_bytes = client.get(signed["signedPdfUrl"]).content

        response = client.post(f"/api/audit/{pdf_id}/verify", json={"fileHash": compute_bytes_hash(signed_bytes)})

        assert response.status_code == 200
        assert response.json()["matches"] is True
        assert response.json()["matchedDocumentId"] == signed["signedPdfId"]

    def test_verify_unknown_hash(self, client, letter_pdf):
        pdf_id = upload(client, letter_pdf)["pdfId"]
        response = client.post(f"/api/audit/{pdf_id}/verify", json={"fileHash": "f" * 64})
        assert response.json()["matches"] is False

    def test_verify_rejects_malformed_hash(self, client):
        response = client.post(f"/api/audit/{'0' * 32}/verify", json={"fileHash": "xyz"})
        assert response.status_code == 422

    def test_unexpected_error_keeps_request_id(self, client, recorder, monkeypatch):
        def failing_list(pdf_id):
            raise RuntimeError("audit store offline")

        monkeypatch.setattr(recorder, "list", failing_list)
        response = client.get(f"/api/audit/{'a' * 32}", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTERNAL_ERROR"
        assert body["request_id"] == "req-500"

    def test_engine_error_keeps_request_id(self, client):
        response = client.get(f"/api/pdf/{'0' * 32}", headers={"X-Request-ID": "req-404"})
        assert response.status_code == 404
        assert response.json()["request_id"] == "req-404"
