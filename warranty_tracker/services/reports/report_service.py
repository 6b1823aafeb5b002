"""
Report Service
Builds tabular reports (title, header row, data rows) and the chart
aggregates shown next to them.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from warranty_tracker import db
from warranty_tracker.business.equipment.warranty import EXPIRED, EXPIRING, NONE, VALID
from warranty_tracker.business.errors import ValidationError
from warranty_tracker.data.core.customer import Customer
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.maintenance.maintenance_order import MaintenanceOrder
from warranty_tracker.services.equipment_service import warranty_window_days
from warranty_tracker.utils.dates import utc_now

EQUIPMENTS = 'equipments'
MAINTENANCES = 'maintenances'
CUSTOMERS = 'customers'
WARRANTIES = 'warranties'

REPORT_TYPES = (EQUIPMENTS, MAINTENANCES, CUSTOMERS, WARRANTIES)

REPORT_TITLES = {
    EQUIPMENTS: 'Equipment Report',
    MAINTENANCES: 'Maintenance Report',
    CUSTOMERS: 'Customer Report',
    WARRANTIES: 'Warranty Report',
}

EMPTY_CELL = '-'
HISTORY_MONTHS = 6


@dataclass
class ReportTable:
    """One exportable report"""
    title: str
    headers: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    generated_on: date = field(default_factory=lambda: utc_now().date())

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def filename(self, extension: str) -> str:
        """``Equipment_Report-2024-05-01.xlsx`` style download name"""
        return f"{'_'.join(self.title.split())}-{self.generated_on.isoformat()}.{extension}"

    def to_dict(self):
        return {
            'title': self.title,
            'headers': self.headers,
            'rows': self.rows,
            'generated_on': self.generated_on.isoformat(),
        }


def _cell(value) -> Any:
    if value is None or value == '':
        return EMPTY_CELL
    if isinstance(value, date):
        return value.isoformat()
    return value


def _month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


class ReportService:

    @staticmethod
    def build(owner_id: int, report_type: str, now=None) -> ReportTable:
        """
        Build one of the report types in REPORT_TYPES.

        Raises:
            ValidationError: unknown report type
        """
        builders = {
            EQUIPMENTS: ReportService._equipment_report,
            MAINTENANCES: ReportService._maintenance_report,
            CUSTOMERS: ReportService._customer_report,
            WARRANTIES: ReportService._warranty_report,
        }
        if report_type not in builders:
            raise ValidationError(f"Report type must be one of {', '.join(REPORT_TYPES)}", field='report_type')

        now = now or utc_now()
        table = builders[report_type](owner_id, now)
        table.generated_on = now.date() if hasattr(now, 'date') else now
        return table

    @staticmethod
    def _equipment(owner_id: int) -> List[Equipment]:
        return list(db.session.execute(
            select(Equipment)
            .where(Equipment.user_id == owner_id)
            .options(selectinload(Equipment.customer))
            .order_by(Equipment.name, Equipment.id)
        ).scalars())

    @staticmethod
    def _equipment_report(owner_id, now) -> ReportTable:
        rows = [
            [
                _cell(eq.name),
                _cell(eq.sku),
                _cell(eq.model),
                _cell(eq.customer.company_name if eq.customer else None),
                _cell(eq.location),
                _cell(eq.warranty_expires_on) if eq.warranty_expires_on else 'No warranty',
                eq.quantity,
            ]
            for eq in ReportService._equipment(owner_id)
        ]
        return ReportTable(
            title=REPORT_TITLES[EQUIPMENTS],
            headers=['Name', 'SKU', 'Model', 'Customer', 'Location', 'Warranty', 'Quantity'],
            rows=rows,
        )

    @staticmethod
    def _maintenance_report(owner_id, now) -> ReportTable:
        orders = db.session.execute(
            select(MaintenanceOrder)
            .where(MaintenanceOrder.user_id == owner_id)
            .order_by(MaintenanceOrder.order_number)
        ).scalars()
        rows = []
        for order in orders:
            customer = order.equipment.customer
            rows.append([
                order.order_number,
                _cell(order.equipment.name),
                _cell(customer.company_name if customer else None),
                _cell(order.opened_on),
                order.status_label,
                _cell(order.technician),
            ])
        return ReportTable(
            title=REPORT_TITLES[MAINTENANCES],
            headers=['Order', 'Equipment', 'Customer', 'Opened', 'Status', 'Technician'],
            rows=rows,
        )

    @staticmethod
    def _customer_report(owner_id, now) -> ReportTable:
        customers = db.session.execute(
            select(Customer).where(Customer.user_id == owner_id).order_by(Customer.company_name, Customer.id)
        ).scalars()
        rows = [
            [
                _cell(c.company_name),
                _cell(c.tax_id),
                _cell(c.contact_name),
                _cell(c.email),
                _cell(c.phone),
                _cell(c.address),
            ]
            for c in customers
        ]
        return ReportTable(
            title=REPORT_TITLES[CUSTOMERS],
            headers=['Company', 'Tax ID', 'Contact', 'Email', 'Phone', 'Address'],
            rows=rows,
        )

    @staticmethod
    def _warranty_report(owner_id, now) -> ReportTable:
        window = warranty_window_days()
        rows = []
        for eq in ReportService._equipment(owner_id):
            if eq.warranty_expires_on is None:
                continue
            rows.append([
                _cell(eq.name),
                _cell(eq.sku),
                _cell(eq.customer.company_name if eq.customer else None),
                _cell(eq.warranty_expires_on),
                eq.warranty(now, window).label,
            ])
        return ReportTable(
            title=REPORT_TITLES[WARRANTIES],
            headers=['Equipment', 'SKU', 'Customer', 'Warranty Date', 'Status'],
            rows=rows,
        )

    @staticmethod
    def warranty_distribution(owner_id: int, now=None) -> Dict[str, int]:
        """Counts of expired / expiring / valid parent warranties"""
        now = now or utc_now()
        window = warranty_window_days()
        counts = {EXPIRED: 0, EXPIRING: 0, VALID: 0}
        for eq in ReportService._equipment(owner_id):
            status = eq.warranty(now, window).status
            if status != NONE:
                counts[status] += 1
        return counts

    @staticmethod
    def completed_maintenance_by_month(owner_id: int, now=None, months: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Completed orders per month for the last ``months`` months, oldest
        month first, current month included.
        """
        now = now or utc_now()
        months = months or HISTORY_MONTHS

        buckets = []
        year, month = now.year, now.month
        for _ in range(months):
            buckets.append(date(year, month, 1))
            year, month = (year - 1, 12) if month == 1 else (year, month - 1)
        buckets.reverse()

        counts = {_month_key(bucket): 0 for bucket in buckets}
        orders = db.session.execute(
            select(MaintenanceOrder).where(
                MaintenanceOrder.user_id == owner_id,
                MaintenanceOrder.status == MaintenanceOrder.COMPLETED,
            )
        ).scalars()
        for order in orders:
            completed = order.completion_date
            if completed is None:
                continue
            key = _month_key(completed)
            if key in counts:
                counts[key] += 1

        return [
            {'month': _month_key(bucket), 'label': bucket.strftime('%b %Y'), 'count': counts[_month_key(bucket)]}
            for bucket in buckets
        ]

    @staticmethod
    def get_summary(owner_id: int, now=None) -> Dict[str, Any]:
        now = now or utc_now()
        return {
            'report_types': [{'type': t, 'title': REPORT_TITLES[t]} for t in REPORT_TYPES],
            'warranty_distribution': ReportService.warranty_distribution(owner_id, now),
            'completed_maintenance_by_month': ReportService.completed_maintenance_by_month(owner_id, now),
        }
