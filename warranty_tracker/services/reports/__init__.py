"""
Report definitions and their Excel/PDF renderings.
"""

from warranty_tracker.services.reports.report_service import REPORT_TYPES, ReportService, ReportTable
from warranty_tracker.services.reports.excel_exporter import ExcelExporter
from warranty_tracker.services.reports.pdf_exporter import PdfExporter

__all__ = [
    'REPORT_TYPES',
    'ReportService',
    'ReportTable',
    'ExcelExporter',
    'PdfExporter',
]
