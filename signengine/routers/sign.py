"""
Signing endpoint: place one field on an uploaded original.
"""
import logging

from fastapi import APIRouter, Depends

from signengine.errors import IntegrityError
from signengine.exceptions import AppException
from signengine.models import SignPdfRequest, SignPdfResponse
from signengine.services.audit_trail import AuditTrailRecorder, get_audit_recorder
from signengine.services.signing_pipeline import DocumentSigningPipeline, get_signing_pipeline
from signengine.utils.logging import fingerprint, set_context

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["signing"],
)


@router.post(
    "/sign-pdf",
    response_model=SignPdfResponse,
    summary="Sign PDF",
    description=(
        "Renders one signature, image, text, date or radio field onto a fresh copy "
        "of the original and records an audit entry linking both hashes."
    ),
)
def sign_pdf(
    request: SignPdfRequest,
    pipeline: DocumentSigningPipeline = Depends(get_signing_pipeline),
    recorder: AuditTrailRecorder = Depends(get_audit_recorder),
):
    set_context(document_id=request.pdf_id, field_type=request.field_type.value)
    if request.signature_image:
        logger.info(f"Sign request with image {fingerprint(request.signature_image, 'img_')}")

    placement = request.to_placement()
    locator = pipeline.sign_field(request.pdf_id, placement)

    try:
        record = recorder.record(request.pdf_id, locator, placement)
    except IntegrityError as e:
        # The signed document is already stored; report it so it is not lost
        logger.error(f"Audit recording failed for {locator.document_id}: {e.message}")
        raise AppException(
            status_code=500,
            code=e.code,
            message=e.message,
            details={
                "signedPdfUrl": locator.url,
                "signedPdfId": locator.document_id,
            },
        ) from e

    return SignPdfResponse(
        success=True,
        signed_pdf_url=locator.url,
        signed_pdf_id=locator.document_id,
        audit_record=record,
        message=f"{request.field_type.value.capitalize()} field placed successfully",
    )
