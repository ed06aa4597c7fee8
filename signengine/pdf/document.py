"""
PDF document model built on PyMuPDF (fitz).

Callers work in PDF points with the origin at the bottom-left corner of the
page. PyMuPDF draws with the origin at the top-left, so every drawing call
flips Y here and nowhere else.

Page rotation is not applied: sizes and drawing use the unrotated crop box.
"""
import io
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image

from signengine.errors import DecodeError
from signengine.pdf.coordinates import MappedBox, PageSize

logger = logging.getLogger(__name__)

JPEG_MAGIC = b"\xff\xd8"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

# Used only when the text cannot be encoded for the built-in Helvetica
FALLBACK_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
]


def _find_fallback_font() -> Optional[str]:
    for path in FALLBACK_FONT_PATHS:
        if os.path.exists(path):
            return path
    return None


def sniff_image_format(data: bytes) -> str:
    """
    Detect the raster format from leading bytes.

    0xFF 0xD8 means JPEG; anything else is treated as PNG. Declared mime
    types are never consulted.
    """
    if data[:2] == JPEG_MAGIC:
        return "jpeg"
    return "png"


@dataclass
class EmbeddedImage:
    """Image registered with a document, with its natural pixel size."""
    data: bytes
    format: str
    width: int
    height: int


@dataclass(frozen=True)
class TextStyle:
    font_size: float = 12.0
    font_name: str = "helv"  # PyMuPDF built-in Helvetica
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)


def decode_image(data: bytes) -> EmbeddedImage:
    """
    Validate raster bytes and read their natural size.

    Raises:
        DecodeError: If the bytes are empty or not a decodable JPEG/PNG
    """
    if not data:
        raise DecodeError("Image payload is empty")

    image_format = sniff_image_format(data)
    if image_format == "png" and data[:8] != PNG_MAGIC:
        raise DecodeError("Image payload is neither JPEG nor PNG")

    try:
        with Image.open(io.BytesIO(data)) as img:
            detected = (img.format or "").lower()
            img.load()
            width, height = img.size
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to decode {image_format.upper()} image: {e}") from e

    if detected != image_format:
        raise DecodeError(f"Expected {image_format.upper()} image, got {detected.upper() or 'unknown'}")

    if width <= 0 or height <= 0:
        raise DecodeError(f"Image has invalid dimensions: {width}x{height}")

    return EmbeddedImage(data=data, format=image_format, width=width, height=height)


class PdfPage:
    """One page of a loaded PdfDocument."""

    def __init__(self, page: fitz.Page):
        self._page = page

    @property
    def size(self) -> PageSize:
        box = self._page.cropbox
        return PageSize(width=box.width, height=box.height)

    def _to_fitz_rect(self, box: MappedBox) -> fitz.Rect:
        page_height = self.size.height
        return fitz.Rect(
            box.x,
            page_height - box.top,
            box.right,
            page_height - box.bottom,
        )

    def draw_image(self, image: EmbeddedImage, box: MappedBox) -> None:
        """Draw an embedded image stretched exactly into box."""
        rect = self._to_fitz_rect(box)
        self._page.insert_image(rect, stream=image.data, keep_proportion=False)

    def draw_text(self, text: str, position: Tuple[float, float], style: TextStyle) -> None:
        """
        Draw a single line of text.

        position is (x, baseline_y) in points from the bottom-left corner.
        """
        line = " ".join(text.splitlines())
        x, baseline = position
        point = fitz.Point(x, self.size.height - baseline)

        try:
            line.encode("latin-1")
            needs_fallback = False
        except UnicodeEncodeError:
            needs_fallback = True

        font_path = _find_fallback_font() if needs_fallback else None
        if font_path:
            self._page.insert_text(
                point,
                line,
                fontname="fallback",
                fontfile=font_path,
                fontsize=style.font_size,
                color=style.color,
            )
        else:
            self._page.insert_text(
                point,
                line,
                fontname=style.font_name,
                fontsize=style.font_size,
                color=style.color,
            )


class PdfDocument:
    """
    Mutable in-memory PDF model.

    One instance per signing call; never shared between calls.
    """

    def __init__(self, doc: fitz.Document):
        self._doc = doc

    @classmethod
    def load(cls, data: bytes) -> "PdfDocument":
        """
        Open PDF bytes.

        Raises:
            DecodeError: If the bytes are not a readable PDF with at least one page
        """
        if not data:
            raise DecodeError("Document is empty")
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (fitz.FileDataError, RuntimeError, ValueError) as e:
            raise DecodeError(f"Invalid PDF file: {e}") from e

        if doc.page_count < 1:
            doc.close()
            raise DecodeError("PDF has no pages")

        return cls(doc)

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def page(self, index: int) -> PdfPage:
        return PdfPage(self._doc[index])

    def embed_image(self, data: bytes) -> EmbeddedImage:
        return decode_image(data)

    def save(self) -> bytes:
        return self._doc.tobytes(garbage=3, deflate=True)

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_page_count(data: bytes) -> int:
    """Open PDF bytes just long enough to count pages."""
    with PdfDocument.load(data) as doc:
        return doc.page_count
