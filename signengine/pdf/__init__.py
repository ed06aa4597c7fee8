# PDF module
from signengine.pdf.compositor import (
    FieldCompositor,
    FieldPayload,
    FieldPlacement,
    FieldType,
    decode_base64_image,
    fit_image_in_box,
)
from signengine.pdf.coordinates import MappedBox, PageSize, ViewportRect, ViewportSize, map_rect
from signengine.pdf.document import PdfDocument, decode_image, read_page_count
from signengine.pdf.sample import create_sample_pdf

__all__ = [
    "FieldCompositor",
    "FieldPayload",
    "FieldPlacement",
    "FieldType",
    "decode_base64_image",
    "fit_image_in_box",
    "MappedBox",
    "PageSize",
    "ViewportRect",
    "ViewportSize",
    "map_rect",
    "PdfDocument",
    "decode_image",
    "read_page_count",
    "create_sample_pdf",
]
