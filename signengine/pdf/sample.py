"""
Sample document for trying out field placement.
"""
import fitz  # PyMuPDF

A4_WIDTH = 595
A4_HEIGHT = 842

BLACK = (0, 0, 0)
GREY = (0.5, 0.5, 0.5)


def create_sample_pdf() -> bytes:
    """Build a one-page A4 PDF with labelled signature and date areas."""
    doc = fitz.open()
    try:
        page = doc.new_page(width=A4_WIDTH, height=A4_HEIGHT)

        # (text, y from top, size, font)
        lines = [
            ("Sample Document for Signature Testing", 50, 20, "hebo"),
            ("This is a sample PDF document created for testing the signature injection engine.", 100, 12, "helv"),
            ("You can drag and drop signature fields, text boxes, images, date selectors, "
             "and radio buttons onto this document.", 130, 12, "helv"),
            ("The coordinate system conversion ensures that fields placed on the PDF will appear "
             "in the correct location", 180, 12, "helv"),
            ("regardless of screen size or viewport dimensions.", 200, 12, "helv"),
            ("Signature Area:", 250, 14, "hebo"),
            ("Date:", 350, 14, "hebo"),
        ]
        for text, y, size, font in lines:
            page.insert_text((50, y), text, fontname=font, fontsize=size, color=BLACK)

        page.insert_text(
            (50, A4_HEIGHT - 50),
            "Signature Injection Engine - sample document",
            fontname="helv",
            fontsize=10,
            color=GREY,
        )

        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()
