"""
Equipment Service
Presentation service for equipment listings.

Handles:
- Filtered, owner-scoped equipment queries
- Decorating rows with their warranty evaluation
- Unit listings of per-unit tracked batches
"""

from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context
from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from warranty_tracker import db
from warranty_tracker.business.equipment.warranty import EXPIRING_WINDOW_DAYS, STATUSES
from warranty_tracker.business.errors import NotFoundError, ValidationError
from warranty_tracker.data.core.customer import Customer
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.utils.dates import utc_now


def warranty_window_days() -> int:
    """Configured "expiring" window, falling back to the evaluator default"""
    if has_app_context():
        return int(current_app.config.get('WARRANTY_EXPIRING_DAYS', EXPIRING_WINDOW_DAYS))
    return EXPIRING_WINDOW_DAYS


class EquipmentService:
    """
    Service for equipment presentation data.

    Every method takes the owner id; rows of other owners are never visible.
    """

    @staticmethod
    def build_filtered_query(owner_id: int, search: Optional[str] = None, customer_id: Optional[int] = None):
        """
        Build an owner-scoped equipment query.

        Args:
            owner_id: Owning user
            search: Partial match on name, serial number, SKU or customer company
            customer_id: Only equipment currently held by this customer

        Returns:
            SQLAlchemy select statement
        """
        query = (
            select(Equipment)
            .outerjoin(Customer, Equipment.customer_id == Customer.id)
            .where(Equipment.user_id == owner_id)
            .options(selectinload(Equipment.customer), selectinload(Equipment.units))
        )

        if customer_id:
            query = query.where(Equipment.customer_id == customer_id)

        if search:
            like = f"%{search.strip()}%"
            query = query.where(or_(
                Equipment.name.ilike(like),
                Equipment.serial_number.ilike(like),
                Equipment.sku.ilike(like),
                Customer.company_name.ilike(like),
            ))

        # Newest first
        return query.order_by(Equipment.created_at.desc(), Equipment.id.desc())

    @staticmethod
    def serialize(equipment: Equipment, now=None, window_days: Optional[int] = None) -> Dict[str, Any]:
        """Equipment row as a JSON-ready dict with customer and warranty details"""
        now = now or utc_now()
        window = warranty_window_days() if window_days is None else window_days

        data = equipment.to_dict()
        data['customer_name'] = equipment.customer.company_name if equipment.customer else None
        data['held_by_company'] = equipment.held_by_company
        data['warranty'] = equipment.warranty(now, window).to_dict()
        if equipment.tracks_units:
            data['units'] = [EquipmentService.serialize_unit(unit, now, window) for unit in equipment.units]
        return data

    @staticmethod
    def serialize_unit(unit, now=None, window_days: Optional[int] = None) -> Dict[str, Any]:
        window = warranty_window_days() if window_days is None else window_days
        data = unit.to_dict()
        data['warranty'] = unit.warranty(now or utc_now(), window).to_dict()
        return data

    @staticmethod
    def get_list_data(
        owner_id: int,
        search: Optional[str] = None,
        customer_id: Optional[int] = None,
        warranty_status: Optional[str] = None,
        now=None,
    ) -> List[Dict[str, Any]]:
        """
        Serialized equipment list.

        ``warranty_status`` keeps only rows whose evaluated status matches
        (none, expired, expiring or valid).
        """
        if warranty_status and warranty_status not in STATUSES:
            raise ValidationError(f"Warranty status must be one of {', '.join(STATUSES)}", field='warranty_status')

        now = now or utc_now()
        window = warranty_window_days()
        query = EquipmentService.build_filtered_query(owner_id, search=search, customer_id=customer_id)

        rows = [EquipmentService.serialize(eq, now, window) for eq in db.session.execute(query).scalars()]
        if warranty_status:
            rows = [row for row in rows if row['warranty']['status'] == warranty_status]
        return rows

    @staticmethod
    def get_units(owner_id: int, equipment_id: int, now=None) -> List[Dict[str, Any]]:
        equipment = db.session.execute(
            select(Equipment).where(Equipment.id == equipment_id, Equipment.user_id == owner_id)
        ).scalar_one_or_none()
        if equipment is None:
            raise NotFoundError('equipment', equipment_id)
        return [EquipmentService.serialize_unit(unit, now) for unit in equipment.units]
