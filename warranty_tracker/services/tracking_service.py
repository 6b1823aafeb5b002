"""
Tracking Service
Looks an equipment up by the SKU read from its QR label.
"""

from typing import Any, Dict

from sqlalchemy import select

from warranty_tracker import db
from warranty_tracker.business.errors import NotFoundError, ValidationError
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.maintenance.maintenance_order import MaintenanceOrder
from warranty_tracker.logger import get_logger
from warranty_tracker.services.equipment_service import EquipmentService

logger = get_logger("warranty_tracker.services.tracking")


class TrackingService:

    @staticmethod
    def lookup_by_sku(owner_id: int, sku: str, now=None) -> Dict[str, Any]:
        """
        Equipment, its current customer and its maintenance history (newest first).

        Raises:
            ValidationError: blank SKU
            NotFoundError: no equipment of this owner carries the SKU
        """
        sku = (sku or '').strip()
        if not sku:
            raise ValidationError("SKU is required", field='sku')

        equipment = db.session.execute(
            select(Equipment).where(Equipment.user_id == owner_id, Equipment.sku == sku)
        ).scalar_one_or_none()
        if equipment is None:
            logger.info(f"Tracking lookup found no equipment for SKU {sku}")
            raise NotFoundError('equipment', sku)

        orders = db.session.execute(
            select(MaintenanceOrder)
            .where(MaintenanceOrder.equipment_id == equipment.id, MaintenanceOrder.user_id == owner_id)
            .order_by(MaintenanceOrder.opened_on.desc(), MaintenanceOrder.id.desc())
        ).scalars()

        return {
            'equipment': EquipmentService.serialize(equipment, now),
            'customer': equipment.customer.to_dict() if equipment.customer else None,
            'maintenance_orders': [
                dict(order.to_dict(), status_label=order.status_label) for order in orders
            ],
        }
