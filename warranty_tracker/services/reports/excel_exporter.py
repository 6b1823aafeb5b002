"""
Excel rendering of a ReportTable (openpyxl)
"""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from warranty_tracker.services.reports.report_service import ReportTable

NO_DATA_MESSAGE = 'No data available for this report.'
XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class ExcelExporter:

    HEADER_FILL = PatternFill(start_color='3B82F6', end_color='3B82F6', fill_type='solid')
    HEADER_FONT = Font(bold=True, color='FFFFFF')
    MAX_COLUMN_WIDTH = 60

    @staticmethod
    def render(report: ReportTable) -> bytes:
        wb = Workbook()
        ws = wb.active
        # Sheet titles are capped at 31 characters
        ws.title = report.title[:31]

        ws.append(report.headers)
        for cell in ws[1]:
            cell.font = ExcelExporter.HEADER_FONT
            cell.fill = ExcelExporter.HEADER_FILL
            cell.alignment = Alignment(horizontal='center', vertical='center')

        if report.is_empty:
            ws.append([NO_DATA_MESSAGE])
        for row in report.rows:
            ws.append(row)

        for index, header in enumerate(report.headers, start=1):
            values = [str(header)] + [str(row[index - 1]) for row in report.rows if len(row) >= index]
            width = min(max(len(v) for v in values) + 2, ExcelExporter.MAX_COLUMN_WIDTH)
            ws.column_dimensions[get_column_letter(index)].width = width
        ws.freeze_panes = 'A2'

        out = BytesIO()
        wb.save(out)
        return out.getvalue()
