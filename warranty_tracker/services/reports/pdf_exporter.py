"""
PDF rendering of a ReportTable (reportlab)
"""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from warranty_tracker.services.reports.report_service import ReportTable
from warranty_tracker.services.reports.excel_exporter import NO_DATA_MESSAGE


class PdfExporter:

    @staticmethod
    def render(report: ReportTable) -> bytes:
        out = BytesIO()
        doc = SimpleDocTemplate(
            out,
            pagesize=landscape(A4),
            leftMargin=14 * mm,
            rightMargin=14 * mm,
            topMargin=16 * mm,
            bottomMargin=12 * mm,
            title=report.title,
        )
        styles = getSampleStyleSheet()
        cell_style = styles['BodyText']
        cell_style.fontSize = 8
        cell_style.leading = 10

        story = [
            Paragraph(escape(report.title), styles['Title']),
            Paragraph(f"Generated on: {report.generated_on.isoformat()}", styles['Normal']),
            Spacer(1, 8),
        ]

        if report.is_empty:
            story.append(Paragraph(NO_DATA_MESSAGE, styles['Normal']))
        else:
            data = [report.headers] + [
                [Paragraph(escape(str(value)), cell_style) for value in row] for row in report.rows
            ]
            table = Table(data, repeatRows=1)
            table.setStyle(TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3B82F6')),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, -1), 8),
                ('GRID', (0, 0), (-1, -1), 0.35, colors.HexColor('#C8D8E4')),
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F9FF')]),
            ]))
            story.append(table)

        doc.build(story)
        return out.getvalue()
