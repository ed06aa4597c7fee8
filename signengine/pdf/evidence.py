"""
Evidence report generator.
Creates a PDF audit trail document listing every signing of one original.
"""
import io
import logging
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from signengine.models import AuditRecord
from signengine.utils.datetime_utils import format_utc, utc_now

logger = logging.getLogger(__name__)

FONT_NORMAL = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_MONO = "Courier"


class EvidenceReportGenerator:
    """Generates the audit trail report PDF for one original document."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='Title2',
            parent=self.styles['Title'],
            fontName=FONT_BOLD,
            fontSize=18,
            spaceAfter=12,
        ))
        self.styles.add(ParagraphStyle(
            name='SectionHeader',
            parent=self.styles['Heading2'],
            fontName=FONT_BOLD,
            fontSize=12,
            spaceBefore=12,
            spaceAfter=6,
            textColor=colors.HexColor('#1a1a1a'),
        ))
        self.styles.add(ParagraphStyle(
            name='Footer',
            parent=self.styles['Normal'],
            fontName=FONT_NORMAL,
            fontSize=8,
            textColor=colors.grey,
            alignment=TA_CENTER,
        ))

    def generate(
        self,
        document_id: str,
        original_hash: Optional[str],
        records: List[AuditRecord],
    ) -> bytes:
        """
        Generate evidence report PDF.

        Args:
            document_id: Original document id
            original_hash: SHA-256 of the original as currently stored, if readable
            records: Audit records, most-recent-first

        Returns:
            PDF bytes
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20*mm,
            leftMargin=20*mm,
            topMargin=20*mm,
            bottomMargin=20*mm,
            title=f"Audit trail {document_id}",
        )

        elements = [
            Paragraph("Audit Trail", self.styles['Title2']),
            Paragraph("Signing evidence report", self.styles['Normal']),
            Spacer(1, 10*mm),
            Paragraph("Document", self.styles['SectionHeader']),
        ]
        elements.extend(self._build_document_section(document_id, original_hash, records))
        elements.append(Spacer(1, 6*mm))

        elements.append(Paragraph("Signing events", self.styles['SectionHeader']))
        elements.extend(self._build_records_section(records))

        elements.append(Spacer(1, 10*mm))
        elements.append(Paragraph(
            f"Generated: {format_utc(utc_now())}",
            self.styles['Footer']
        ))
        elements.append(Paragraph(
            "Hashes are SHA-256 over the exact stored bytes. Compare them with the hash "
            "of your copy to detect any modification.",
            self.styles['Footer']
        ))

        doc.build(elements)

        logger.info(f"Generated evidence report for {document_id} with {len(records)} records")
        return buffer.getvalue()

    def _build_document_section(
        self,
        document_id: str,
        original_hash: Optional[str],
        records: List[AuditRecord],
    ) -> list:
        recorded_hashes = sorted({r.original_hash for r in records})
        data = [
            ["Document ID:", document_id],
            ["Current SHA-256:", original_hash or "unavailable"],
            ["Signings recorded:", str(len(records))],
        ]
        if original_hash and recorded_hashes and recorded_hashes != [original_hash]:
            data.append(["Warning:", "stored original differs from recorded hash"])

        table = Table(data, colWidths=[40*mm, 130*mm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), FONT_BOLD),
            ('FONTNAME', (1, 0), (1, -1), FONT_MONO),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ]))
        return [table]

    def _build_records_section(self, records: List[AuditRecord]) -> list:
        if not records:
            return [Paragraph("No signing events recorded.", self.styles['Normal'])]

        header = ["Time", "Field", "Page", "Signed document / SHA-256"]
        data = [header]
        for record in records:
            page = record.placement.get("page_number", "-") if record.placement else "-"
            data.append([
                format_utc(record.timestamp),
                record.field_type or "-",
                str(page),
                Paragraph(
                    f"{record.result_document_id}<br/><font face='{FONT_MONO}' size='6'>"
                    f"{record.result_hash}</font>",
                    self.styles['Normal'],
                ),
            ])

        table = Table(data, colWidths=[38*mm, 20*mm, 12*mm, 100*mm], repeatRows=1)
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, 0), FONT_BOLD),
            ('FONTNAME', (0, 1), (-1, -1), FONT_NORMAL),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f0f0f0')),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
            ('TOPPADDING', (0, 0), (-1, -1), 4),
        ]))
        return [table]


# Singleton instance
_evidence_generator: Optional[EvidenceReportGenerator] = None


def get_evidence_generator() -> EvidenceReportGenerator:
    """Get the evidence report generator singleton."""
    global _evidence_generator
    if _evidence_generator is None:
        _evidence_generator = EvidenceReportGenerator()
    return _evidence_generator
