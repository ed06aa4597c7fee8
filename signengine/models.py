from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from signengine.pdf.compositor import (
    FieldPayload,
    FieldPlacement,
    FieldType,
    decode_base64_image,
)
from signengine.pdf.coordinates import ViewportRect, ViewportSize


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseRequest(CamelModel):
    """Base class for all request models - ignores extra fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# Request Models
class UploadPdfRequest(BaseRequest):
    pdf_base64: str = Field(..., min_length=1)
    file_name: str = Field(default="document.pdf", min_length=1, max_length=255)


class Coordinates(BaseRequest):
    """Field rectangle in viewport pixels plus the viewport it was measured in."""
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    viewport_width: Optional[float] = None
    viewport_height: Optional[float] = None
    page_number: int = Field(default=1, description="1-indexed page number")

    @field_validator("page_number", mode="before")
    @classmethod
    def default_page_number(cls, v: Any) -> Any:
        # Clients send null when no page was chosen
        if v is None:
            return 1
        return v


class FieldData(BaseRequest):
    text: Optional[str] = Field(None, max_length=2000)
    date: Optional[str] = Field(None, max_length=100)
    font_size: Optional[float] = Field(None, gt=0, le=200)


class SignPdfRequest(BaseRequest):
    pdf_id: str = Field(..., min_length=1)
    signature_image: Optional[str] = Field(
        None,
        description="Base64 PNG or JPEG, optionally as a data URL. Required for signature/image fields.",
    )
    coordinates: Coordinates
    field_type: FieldType = FieldType.SIGNATURE
    field_data: FieldData = Field(default_factory=FieldData)

    @field_validator("field_type", mode="before")
    @classmethod
    def normalize_field_type(cls, v: Any) -> Any:
        if v is None or v == "":
            return FieldType.SIGNATURE
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_placement(self) -> FieldPlacement:
        """
        Build the core placement. Image payloads are base64-decoded here.

        Raises:
            DecodeError: If an image field has a missing or invalid base64 payload
        """
        image_bytes = None
        if self.field_type.is_image:
            image_bytes = decode_base64_image(self.signature_image or "")

        coords = self.coordinates
        return FieldPlacement(
            field_type=self.field_type,
            page_number=coords.page_number,
            rect=ViewportRect(x=coords.x, y=coords.y, width=coords.width, height=coords.height),
            viewport=ViewportSize(width=coords.viewport_width, height=coords.viewport_height),
            payload=FieldPayload(
                image_bytes=image_bytes,
                text=self.field_data.text,
                date=self.field_data.date,
                font_size=self.field_data.font_size,
            ),
        )


class VerifyHashRequest(BaseRequest):
    file_hash: str = Field(..., min_length=64, max_length=64, pattern=r"^[0-9a-fA-F]{64}$")


# Audit
class AuditRecord(CamelModel):
    """
    Immutable statement of the content hashes before and after one signing.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    original_document_id: str
    result_document_id: str
    original_hash: str
    result_hash: str
    timestamp: datetime
    field_type: Optional[str] = None
    placement: Optional[Dict[str, Any]] = None


# Response Models
class UploadPdfResponse(CamelModel):
    pdf_id: str
    file_name: str
    original_hash: str
    page_count: int
    message: str = "PDF uploaded successfully"


class PdfContentResponse(CamelModel):
    pdf_id: str
    pdf_base64: str
    content_type: str = "application/pdf"


class SignPdfResponse(CamelModel):
    success: bool
    signed_pdf_url: str
    signed_pdf_id: str
    audit_record: Optional[AuditRecord] = None
    message: str


class AuditTrailResponse(CamelModel):
    pdf_id: str
    records: List[AuditRecord]


class VerifyHashResponse(CamelModel):
    matches: bool
    pdf_id: str
    matched_document_id: Optional[str] = None
    provided_hash: str
    message: str
