"""
Signing pipeline: places one field on a copy of an uploaded original.

Every call loads the original again, so signing the same original twice
yields two independent documents that each carry a single field. Results of
earlier signings are never used as input.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from signengine.config import Settings, get_settings
from signengine.pdf.compositor import FieldCompositor, FieldPlacement
from signengine.pdf.coordinates import map_rect
from signengine.pdf.document import PdfDocument
from signengine.storage import ByteStore, get_originals_store, get_signed_store

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/api/pdf/download/{document_id}"


@dataclass(frozen=True)
class ResultLocator:
    """Reference to a signed document."""
    document_id: str
    url: str

    @classmethod
    def for_document(cls, document_id: str) -> "ResultLocator":
        return cls(document_id=document_id, url=DOWNLOAD_PATH.format(document_id=document_id))


def resolve_page_index(page_number: int, page_count: int) -> int:
    """
    Convert a 1-indexed page number to a page index.

    Numbers outside the document fall back to the first page.
    """
    index = page_number - 1
    if index < 0 or index >= page_count:
        return 0
    return index


class DocumentSigningPipeline:
    """Load, map, composite, persist. Holds no per-document state."""

    def __init__(
        self,
        originals: ByteStore,
        signed: ByteStore,
        compositor: Optional[FieldCompositor] = None,
    ):
        self.originals = originals
        self.signed = signed
        self.compositor = compositor or FieldCompositor()

    def sign_field(self, document_id: str, placement: FieldPlacement) -> ResultLocator:
        """
        Render one field onto a fresh copy of the original and store the result.

        Raises:
            NotFoundError: If document_id is not a stored original
            DecodeError: If the document or image payload cannot be decoded
            ConfigurationError: If the viewport size is zero or missing
        """
        original_bytes = self.originals.get(document_id)

        with PdfDocument.load(original_bytes) as document:
            page_count = document.page_count
            page_index = resolve_page_index(placement.page_number, page_count)
            if page_index != placement.page_number - 1:
                logger.info(
                    f"Page {placement.page_number} not in document ({page_count} pages), using page 1"
                )

            page_size = document.page(page_index).size
            box = map_rect(placement.rect, placement.viewport, page_size)

            logger.info(
                f"Placing {placement.field_type.value} on page {page_index + 1} "
                f"({page_size.width:.1f}x{page_size.height:.1f}pt) at "
                f"({box.x:.1f}, {box.bottom:.1f}) size ({box.width:.1f}x{box.height:.1f})"
            )

            self.compositor.render(document, page_index, placement, box)
            signed_bytes = document.save()

        signed_id = self.signed.put(signed_bytes)
        logger.info(f"Signed {document_id[:8]} -> {signed_id[:8]} ({len(signed_bytes)} bytes)")
        return ResultLocator.for_document(signed_id)


# Singleton instance
_pipeline: Optional[DocumentSigningPipeline] = None


def build_compositor(settings: Settings) -> FieldCompositor:
    return FieldCompositor(
        default_font_size=settings.default_font_size,
        baseline_offset=settings.text_baseline_offset,
        date_format=settings.date_format,
    )


def get_signing_pipeline() -> DocumentSigningPipeline:
    """Get the signing pipeline singleton."""
    global _pipeline
    if _pipeline is None:
        _pipeline = DocumentSigningPipeline(
            originals=get_originals_store(),
            signed=get_signed_store(),
            compositor=build_compositor(get_settings()),
        )
    return _pipeline
