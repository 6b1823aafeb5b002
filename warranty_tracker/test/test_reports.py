"""
Tests for report building and export
"""
from datetime import date, datetime
from io import BytesIO

import pytest
from openpyxl import load_workbook

from warranty_tracker.business.errors import ValidationError
from warranty_tracker.business.maintenance.maintenance_manager import MaintenanceManager
from warranty_tracker.services.reports import ExcelExporter, PdfExporter, ReportService, ReportTable
from warranty_tracker.services.reports.excel_exporter import NO_DATA_MESSAGE

NOW = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def stocked(user, make_equipment, customer):
    pump = make_equipment(name='Infusion Pump', sku='PUMP-1', quantity=5,
                          warranty_expires_on=date(2024, 6, 25), customer_id=customer.id)
    scanner = make_equipment(name='Barcode Scanner', sku='SCAN-1', warranty_expires_on=date(2025, 1, 1))
    printer = make_equipment(name='Label Printer', sku='PRN-1', warranty_expires_on=date(2024, 1, 1))
    make_equipment(name='Standing Desk', sku='DSK-1')

    manager = MaintenanceManager(user.id)
    manager.create({'equipment_id': pump.id, 'opened_on': '2024-06-01', 'technician': 'R. Costa'})
    manager.create({'equipment_id': scanner.id, 'opened_on': '2024-06-01', 'finished_on': '2024-06-10',
                    'status': 'completed'})
    manager.create({'equipment_id': printer.id, 'opened_on': '2024-03-01', 'finished_on': '2024-03-05',
                    'status': 'completed'})
    manager.create({'equipment_id': printer.id, 'opened_on': '2023-10-01', 'finished_on': '2023-10-02',
                    'status': 'completed'})


def test_equipment_report(user, stocked):
    report = ReportService.build(user.id, 'equipments', now=NOW)

    assert report.title == 'Equipment Report'
    assert report.headers == ['Name', 'SKU', 'Model', 'Customer', 'Location', 'Warranty', 'Quantity']
    assert report.rows[0] == ['Barcode Scanner', 'SCAN-1', '-', '-', '-', '2025-01-01', 1]
    assert report.rows[1][3] == 'Acme Hospital'
    assert report.rows[3][5] == 'No warranty'
    assert report.filename('xlsx') == 'Equipment_Report-2024-06-15.xlsx'


def test_maintenance_report(user, stocked):
    report = ReportService.build(user.id, 'maintenances', now=NOW)
    assert [row[0] for row in report.rows] == [1, 2, 3, 4]
    assert report.rows[0] == [1, 'Infusion Pump', 'Acme Hospital', '2024-06-01', 'Pending', 'R. Costa']
    assert report.rows[1][4] == 'Completed'


def test_warranty_report_skips_equipment_without_date(user, stocked):
    report = ReportService.build(user.id, 'warranties', now=NOW)
    assert [(row[1], row[4]) for row in report.rows] == [
        ('SCAN-1', 'Warranty valid'),
        ('PUMP-1', 'Expires in 10 days'),
        ('PRN-1', 'Warranty expired'),
    ]


def test_customer_report(user, stocked):
    report = ReportService.build(user.id, 'customers', now=NOW)
    assert report.rows == [['Acme Hospital', '12.345.678/0001-90', 'Dana Smith', 'dana@acme.example', '-', '-']]


def test_unknown_report_type(user):
    with pytest.raises(ValidationError):
        ReportService.build(user.id, 'invoices')


def test_warranty_distribution(user, stocked):
    assert ReportService.warranty_distribution(user.id, now=NOW) == {'expired': 1, 'expiring': 1, 'valid': 1}


def test_completed_maintenance_by_month(user, stocked):
    months = ReportService.completed_maintenance_by_month(user.id, now=NOW)
    assert [m['month'] for m in months] == ['2024-01', '2024-02', '2024-03', '2024-04', '2024-05', '2024-06']
    assert [m['count'] for m in months] == [0, 0, 1, 0, 0, 1]
    assert months[-1]['label'] == 'Jun 2024'


def test_month_buckets_cross_year_boundary(user):
    months = ReportService.completed_maintenance_by_month(user.id, now=datetime(2024, 2, 3))
    assert [m['month'] for m in months] == ['2023-09', '2023-10', '2023-11', '2023-12', '2024-01', '2024-02']


def test_excel_export(user, stocked):
    report = ReportService.build(user.id, 'equipments', now=NOW)
    content = ExcelExporter.render(report)
    assert content.startswith(b'PK')

    sheet = load_workbook(BytesIO(content)).active
    assert sheet.title == 'Equipment Report'
    assert [c.value for c in sheet[1]] == report.headers
    assert sheet['A2'].value == 'Barcode Scanner'
    assert sheet.max_row == 5


def test_pdf_export(user, stocked):
    content = PdfExporter.render(ReportService.build(user.id, 'maintenances', now=NOW))
    assert content.startswith(b'%PDF')


def test_empty_report_still_renders(other_user):
    report = ReportService.build(other_user.id, 'customers', now=NOW)
    assert report.is_empty

    sheet = load_workbook(BytesIO(ExcelExporter.render(report))).active
    assert sheet['A2'].value == NO_DATA_MESSAGE
    assert PdfExporter.render(report).startswith(b'%PDF')


def test_special_characters_in_pdf():
    report = ReportTable(title='Equipment Report', headers=['Name'], rows=[['Pump <A&B>']])
    assert PdfExporter.render(report).startswith(b'%PDF')
