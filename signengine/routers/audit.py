"""
Audit trail endpoints.
Paths: /api/audit/{pdf_id}
"""
import logging

from fastapi import APIRouter, Depends, Path
from fastapi.responses import Response

from signengine.models import AuditTrailResponse, VerifyHashRequest, VerifyHashResponse
from signengine.pdf.evidence import EvidenceReportGenerator, get_evidence_generator
from signengine.services.audit_trail import AuditTrailRecorder, get_audit_recorder
from signengine.utils.security import normalize_hash

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/audit",
    tags=["audit"],
)


@router.get(
    "/{pdf_id}",
    response_model=AuditTrailResponse,
    summary="Audit trail",
    description="All signing records for an original, most recent first.",
)
def get_audit_trail(
    pdf_id: str = Path(..., description="Original document id"),
    recorder: AuditTrailRecorder = Depends(get_audit_recorder),
):
    return AuditTrailResponse(pdf_id=pdf_id, records=recorder.list(pdf_id))


@router.get(
    "/{pdf_id}/report",
    summary="Evidence report",
    description="PDF report listing the original hash and every signing record.",
)
def get_evidence_report(
    pdf_id: str = Path(..., description="Original document id"),
    recorder: AuditTrailRecorder = Depends(get_audit_recorder),
    generator: EvidenceReportGenerator = Depends(get_evidence_generator),
):
    records = recorder.list(pdf_id)
    original_hash = recorder.current_original_hash(pdf_id)
    report = generator.generate(pdf_id, original_hash, records)
    return Response(
        content=report,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="audit_{pdf_id}.pdf"'},
    )


@router.post(
    "/{pdf_id}/verify",
    response_model=VerifyHashResponse,
    summary="Verify document hash",
    description="Checks a SHA-256 hash against the original and every signed version.",
)
def verify_hash(
    request: VerifyHashRequest,
    pdf_id: str = Path(..., description="Original document id"),
    recorder: AuditTrailRecorder = Depends(get_audit_recorder),
):
    result = recorder.verify(pdf_id, request.file_hash)
    if result.matches:
        if result.matched_document_id == pdf_id:
            message = "Hash matches the original document"
        else:
            message = "Hash matches a signed version of this document"
    else:
        message = "Hash does not match any recorded version of this document"

    return VerifyHashResponse(
        matches=result.matches,
        pdf_id=pdf_id,
        matched_document_id=result.matched_document_id,
        provided_hash=normalize_hash(request.file_hash),
        message=message,
    )
