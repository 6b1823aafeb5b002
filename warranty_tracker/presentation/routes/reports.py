from io import BytesIO

from flask import Blueprint, jsonify, send_file
from flask_login import current_user, login_required

from warranty_tracker.logger import get_logger
from warranty_tracker.services.reports import ExcelExporter, PdfExporter, ReportService
from warranty_tracker.services.reports.excel_exporter import XLSX_MIMETYPE

logger = get_logger("warranty_tracker.routes.reports")
bp = Blueprint('reports', __name__)

EXPORTERS = {
    'xlsx': (ExcelExporter, XLSX_MIMETYPE),
    'pdf': (PdfExporter, 'application/pdf'),
}


@bp.get('/summary')
@login_required
def summary():
    return jsonify(ReportService.get_summary(current_user.id))


@bp.get('/<any(equipments, maintenances, customers, warranties):report_type>')
@login_required
def preview(report_type):
    return jsonify(ReportService.build(current_user.id, report_type).to_dict())


@bp.get('/<report_type>.<any(xlsx, pdf):extension>')
@login_required
def export(report_type, extension):
    report = ReportService.build(current_user.id, report_type)
    exporter, mimetype = EXPORTERS[extension]
    content = exporter.render(report)
    logger.info(f"Exported {report_type} report as {extension} ({len(report.rows)} rows)")
    return send_file(
        BytesIO(content),
        mimetype=mimetype,
        as_attachment=True,
        download_name=report.filename(extension),
    )
