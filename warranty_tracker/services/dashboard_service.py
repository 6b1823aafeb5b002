"""
Dashboard Service
Aggregated figures for the owner's home screen.
"""

from datetime import date
from typing import Any, Dict

from sqlalchemy import func, select

from warranty_tracker import db
from warranty_tracker.business.equipment.warranty import EXPIRING
from warranty_tracker.data.core.customer import Customer
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.maintenance.maintenance_order import MaintenanceOrder
from warranty_tracker.services.equipment_service import warranty_window_days
from warranty_tracker.utils.dates import utc_now


class DashboardService:

    RECENT_MAINTENANCE_LIMIT = 3
    EXPIRING_EQUIPMENT_LIMIT = 3

    @staticmethod
    def get_summary(owner_id: int, now=None) -> Dict[str, Any]:
        """
        Totals, recent maintenance orders and the warranties ending soonest.

        Equipment counts use the parent row's warranty date; per-unit tracked
        batches count under their units only in the equipment listing.
        """
        now = now or utc_now()
        window = warranty_window_days()
        month_start = date(now.year, now.month, 1)
        next_month = date(now.year + 1, 1, 1) if now.month == 12 else date(now.year, now.month + 1, 1)

        total_quantity = db.session.scalar(
            select(func.coalesce(func.sum(Equipment.quantity), 0)).where(Equipment.user_id == owner_id)
        )
        customer_count = db.session.scalar(
            select(func.count(Customer.id)).where(Customer.user_id == owner_id)
        )

        orders = list(db.session.execute(
            select(MaintenanceOrder)
            .where(MaintenanceOrder.user_id == owner_id)
            .order_by(MaintenanceOrder.created_at.desc(), MaintenanceOrder.id.desc())
        ).scalars())

        open_orders = sum(1 for order in orders if order.is_open)
        completed_this_month = sum(
            1 for order in orders
            if order.status == MaintenanceOrder.COMPLETED
            and order.completion_date is not None
            and month_start <= order.completion_date < next_month
        )

        covered = []
        for equipment in db.session.execute(
            select(Equipment).where(Equipment.user_id == owner_id, Equipment.warranty_expires_on.isnot(None))
        ).scalars():
            warranty = equipment.warranty(now, window)
            if warranty.is_covered:
                covered.append((equipment, warranty))
        covered.sort(key=lambda pair: (pair[0].warranty_expires_on, pair[0].id))

        return {
            'totals': {
                'equipment_quantity': int(total_quantity or 0),
                'open_maintenance_orders': open_orders,
                'completed_this_month': completed_this_month,
                'customers': customer_count or 0,
                'under_warranty': len(covered),
                'expiring_soon': sum(1 for _, warranty in covered if warranty.status == EXPIRING),
            },
            'recent_maintenance': [
                {
                    'id': order.id,
                    'order_number': order.order_number,
                    'equipment': order.equipment.name,
                    'customer': order.equipment.customer.company_name if order.equipment.customer else None,
                    'status': order.status,
                    'status_label': order.status_label,
                }
                for order in orders[:DashboardService.RECENT_MAINTENANCE_LIMIT]
            ],
            'expiring_equipment': [
                {
                    'id': equipment.id,
                    'name': equipment.name,
                    'sku': equipment.sku,
                    'warranty_expires_on': equipment.warranty_expires_on.isoformat(),
                    'days_until_expiry': warranty.days,
                    'label': warranty.label,
                }
                for equipment, warranty in covered[:DashboardService.EXPIRING_EQUIPMENT_LIMIT]
            ],
        }
