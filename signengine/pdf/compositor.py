"""
Field compositing: draws one placed field onto one page of a PdfDocument.

Each FieldType has exactly one branch. Radio buttons are accepted but have
no rendering yet and are skipped.
"""
import base64
import binascii
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from signengine.errors import ConfigurationError, DecodeError
from signengine.pdf.coordinates import MappedBox, ViewportRect, ViewportSize
from signengine.pdf.document import PdfDocument, TextStyle

logger = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 12.0
TEXT_BASELINE_OFFSET = 5.0
DEFAULT_DATE_FORMAT = "%m/%d/%Y"


class FieldType(str, Enum):
    SIGNATURE = "signature"
    IMAGE = "image"
    TEXT = "text"
    DATE = "date"
    RADIO = "radio"

    @property
    def is_image(self) -> bool:
        return self in (FieldType.SIGNATURE, FieldType.IMAGE)


@dataclass(frozen=True)
class FieldPayload:
    image_bytes: Optional[bytes] = None
    text: Optional[str] = None
    date: Optional[str] = None
    font_size: Optional[float] = None


@dataclass(frozen=True)
class FieldPlacement:
    """
    Request to render one field at a viewport location on a 1-indexed page.
    """
    field_type: FieldType
    page_number: int
    rect: ViewportRect
    viewport: ViewportSize
    payload: FieldPayload = field(default_factory=FieldPayload)

    def to_dict(self) -> dict:
        """Export placement metadata for the audit trail (no payload bytes)."""
        return {
            "field_type": self.field_type.value,
            "page_number": self.page_number,
            "viewport_rect": {
                "x": self.rect.x,
                "y": self.rect.y,
                "width": self.rect.width,
                "height": self.rect.height,
            },
            "viewport_size": {
                "width": self.viewport.width,
                "height": self.viewport.height,
            },
        }


def decode_base64_image(value: str) -> bytes:
    """
    Decode a base64 image string, stripping any data URL prefix.

    Raises:
        DecodeError: If the string is not valid base64
    """
    if not value:
        raise DecodeError("Image payload is empty")
    if value.startswith("data:") and "," in value:
        value = value.split(",", 1)[1]
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Image payload is not valid base64: {e}") from e


def fit_image_in_box(image_width: float, image_height: float, box: MappedBox) -> MappedBox:
    """
    Largest box with the image's aspect ratio that fits inside box, centred.

    A wider image is clamped to the box width and centred vertically; otherwise
    it is clamped to the box height and centred horizontally.
    """
    image_aspect = image_width / image_height
    box_aspect = box.width / box.height

    if image_aspect > box_aspect:
        width = box.width
        height = box.width / image_aspect
        offset_x = 0.0
        offset_y = (box.height - height) / 2
    else:
        height = box.height
        width = box.height * image_aspect
        offset_x = (box.width - width) / 2
        offset_y = 0.0

    bottom = box.bottom + offset_y
    return MappedBox(x=box.x + offset_x, top=bottom + height, width=width, height=height)


class FieldCompositor:
    """Renders placed fields onto pages. Holds configuration only."""

    def __init__(
        self,
        default_font_size: float = DEFAULT_FONT_SIZE,
        baseline_offset: float = TEXT_BASELINE_OFFSET,
        date_format: str = DEFAULT_DATE_FORMAT,
    ):
        self.default_font_size = default_font_size
        self.baseline_offset = baseline_offset
        self.date_format = date_format

    def render(
        self,
        document: PdfDocument,
        page_index: int,
        placement: FieldPlacement,
        box: MappedBox,
    ) -> Optional[MappedBox]:
        """
        Draw placement onto document at the already-mapped box.

        Returns the box actually drawn into (the fitted box for images),
        or None when nothing was drawn.

        Raises:
            DecodeError: If an image field has a missing or malformed payload
        """
        if page_index < 0 or page_index >= document.page_count:
            page_index = 0

        field_type = placement.field_type
        if field_type.is_image:
            return self._render_image(document, page_index, placement.payload, box)
        if field_type == FieldType.TEXT:
            return self._render_text(document, page_index, placement.payload.text or "", placement.payload, box)
        if field_type == FieldType.DATE:
            date_text = placement.payload.date or date.today().strftime(self.date_format)
            return self._render_text(document, page_index, date_text, placement.payload, box)
        if field_type == FieldType.RADIO:
            logger.info("Radio fields have no rendering; skipping")
            return None

        raise DecodeError(f"Unsupported field type: {field_type}")

    def _render_image(
        self,
        document: PdfDocument,
        page_index: int,
        payload: FieldPayload,
        box: MappedBox,
    ) -> MappedBox:
        if not payload.image_bytes:
            raise DecodeError("Image field requires an image payload")
        if box.width <= 0 or box.height <= 0:
            raise ConfigurationError(f"Image field box must have positive size, got {box.width}x{box.height}")

        image = document.embed_image(payload.image_bytes)
        fitted = fit_image_in_box(image.width, image.height, box)
        document.page(page_index).draw_image(image, fitted)

        logger.info(
            f"Drew {image.format} image {image.width}x{image.height}px on page {page_index + 1} "
            f"at ({fitted.x:.1f}, {fitted.bottom:.1f}) size ({fitted.width:.1f}x{fitted.height:.1f})"
        )
        return fitted

    def _render_text(
        self,
        document: PdfDocument,
        page_index: int,
        text: str,
        payload: FieldPayload,
        box: MappedBox,
    ) -> MappedBox:
        font_size = payload.font_size or self.default_font_size
        baseline = box.bottom + self.baseline_offset
        document.page(page_index).draw_text(text, (box.x, baseline), TextStyle(font_size=font_size))

        logger.info(
            f"Drew {len(text)} chars of text on page {page_index + 1} "
            f"at ({box.x:.1f}, {baseline:.1f}) size {font_size}"
        )
        return box
