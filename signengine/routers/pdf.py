"""
Document endpoints: upload originals, fetch them back, download signed results.
Paths: /api/pdf/...
"""
import base64
import binascii
import logging

from fastapi import APIRouter, Depends, Path
from fastapi.responses import Response

from signengine.config import Settings, get_settings
from signengine.errors import DecodeError
from signengine.exceptions import PayloadTooLargeException
from signengine.models import PdfContentResponse, UploadPdfRequest, UploadPdfResponse
from signengine.pdf.document import read_page_count
from signengine.pdf.sample import create_sample_pdf
from signengine.storage import ByteStore, get_originals_store, get_signed_store
from signengine.utils.logging import set_context
from signengine.utils.security import compute_bytes_hash

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/pdf",
    tags=["documents"],
)


def decode_pdf_payload(value: str) -> bytes:
    """
    Decode base64 PDF bytes, stripping any data URL prefix.

    Raises:
        DecodeError: If the string is not valid base64
    """
    if value.startswith("data:") and "," in value:
        value = value.split(",", 1)[1]
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"PDF payload is not valid base64: {e}") from e


def pdf_response(data: bytes, filename: str, inline: bool = False) -> Response:
    disposition = "inline" if inline else "attachment"
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )


@router.post(
    "/upload",
    response_model=UploadPdfResponse,
    summary="Upload PDF",
    description="Stores a base64-encoded PDF as a new original and returns its id and SHA-256 hash.",
)
def upload_pdf(
    request: UploadPdfRequest,
    settings: Settings = Depends(get_settings),
    originals: ByteStore = Depends(get_originals_store),
):
    data = decode_pdf_payload(request.pdf_base64)
    if len(data) > settings.max_upload_bytes:
        raise PayloadTooLargeException(len(data), settings.max_upload_bytes)

    page_count = read_page_count(data)
    pdf_id = originals.put(data)
    set_context(document_id=pdf_id)
    original_hash = compute_bytes_hash(data)

    logger.info(f"Uploaded {request.file_name}: {len(data)} bytes, {page_count} pages, hash {original_hash[:8]}")

    return UploadPdfResponse(
        pdf_id=pdf_id,
        file_name=request.file_name,
        original_hash=original_hash,
        page_count=page_count,
    )


# Declared before /{pdf_id} so "sample" is not taken as an id
@router.get(
    "/sample",
    summary="Sample PDF",
    description="A generated one-page A4 document with labelled signature and date areas.",
)
def get_sample_pdf():
    return pdf_response(create_sample_pdf(), "sample.pdf", inline=True)


@router.get(
    "/download/{signed_pdf_id}",
    summary="Download signed PDF",
)
def download_signed_pdf(
    signed_pdf_id: str = Path(..., description="Signed document id"),
    signed: ByteStore = Depends(get_signed_store),
):
    data = signed.get(signed_pdf_id)
    return pdf_response(data, f"signed_{signed_pdf_id}.pdf")


@router.get(
    "/{pdf_id}",
    response_model=PdfContentResponse,
    summary="Get original PDF",
    description="Returns the stored original as base64 for rendering in the browser.",
)
def get_pdf(
    pdf_id: str = Path(..., description="Original document id"),
    originals: ByteStore = Depends(get_originals_store),
):
    data = originals.get(pdf_id)
    return PdfContentResponse(
        pdf_id=pdf_id,
        pdf_base64=base64.b64encode(data).decode("ascii"),
    )
