"""
MaintenanceManager - Domain service for maintenance (service) orders

Order numbers are sequential per owner. Completing an order stamps
``completed_on`` with the finish date, or today when none was given.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from warranty_tracker import db
from warranty_tracker.business.errors import NotFoundError, StorageError, ValidationError
from warranty_tracker.data.core.customer import Customer
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.maintenance.maintenance_order import MaintenanceOrder
from warranty_tracker.logger import get_logger
from warranty_tracker.utils.dates import parse_date, utc_today

logger = get_logger("warranty_tracker.business.maintenance")


class MaintenanceManager:

    TEXT_FIELDS = ('technician', 'problem', 'notes')

    def __init__(self, owner_id: int):
        self.owner_id = owner_id

    def get(self, order_id: int) -> MaintenanceOrder:
        order = db.session.execute(
            select(MaintenanceOrder).where(
                MaintenanceOrder.id == order_id,
                MaintenanceOrder.user_id == self.owner_id,
            )
        ).scalar_one_or_none()
        if order is None:
            raise NotFoundError('maintenance_order', order_id)
        return order

    def _equipment_id(self, value) -> int:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError("Equipment is required", field='equipment_id')
        try:
            equipment_id = int(value)
        except (TypeError, ValueError):
            raise ValidationError("Equipment id must be an integer", field='equipment_id')

        exists = db.session.scalar(
            select(Equipment.id).where(Equipment.id == equipment_id, Equipment.user_id == self.owner_id)
        )
        if exists is None:
            raise NotFoundError('equipment', equipment_id)
        return equipment_id

    def _clean(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        status = str(fields.get('status') or MaintenanceOrder.PENDING).strip().lower()
        if status not in MaintenanceOrder.STATUSES:
            raise ValidationError(
                f"Status must be one of {', '.join(MaintenanceOrder.STATUSES)}", field='status'
            )

        opened_on = parse_date(fields.get('opened_on'), field='opened_on') or utc_today()
        finished_on = parse_date(fields.get('finished_on'), field='finished_on')
        if finished_on and finished_on < opened_on:
            raise ValidationError("Finish date cannot precede the opening date", field='finished_on')

        cleaned = {
            'equipment_id': self._equipment_id(fields.get('equipment_id')),
            'status': status,
            'opened_on': opened_on,
            'finished_on': finished_on,
        }
        for key in self.TEXT_FIELDS:
            value = fields.get(key)
            cleaned[key] = (str(value).strip() or None) if value is not None else None
        return cleaned

    @staticmethod
    def _apply_completion(order: MaintenanceOrder) -> None:
        if order.status == MaintenanceOrder.COMPLETED:
            if order.completed_on is None:
                order.completed_on = order.finished_on or utc_today()
        else:
            order.completed_on = None

    def _next_order_number(self) -> int:
        current = db.session.scalar(
            select(func.max(MaintenanceOrder.order_number)).where(MaintenanceOrder.user_id == self.owner_id)
        )
        return (current or 0) + 1

    def _commit(self, action: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error {action} maintenance order for owner {self.owner_id}: {e}")
            raise StorageError(f"Could not {action} maintenance order", e) from e

    def create(self, fields: Dict[str, Any]) -> MaintenanceOrder:
        cleaned = self._clean(fields)

        # Two concurrent creates can pick the same number; the unique
        # constraint rejects the loser, which takes the next number.
        for attempt in range(2):
            order = MaintenanceOrder.from_dict(
                dict(cleaned, order_number=self._next_order_number()),
                owner_id=self.owner_id,
            )
            self._apply_completion(order)
            db.session.add(order)
            try:
                db.session.commit()
                break
            except IntegrityError as e:
                db.session.rollback()
                if attempt == 1:
                    raise StorageError("Could not allocate a maintenance order number", e) from e
                logger.warning(f"Order number {order.order_number} taken, retrying")
            except SQLAlchemyError as e:
                db.session.rollback()
                raise StorageError("Could not create maintenance order", e) from e

        logger.info(f"Created maintenance order #{order.order_number} for equipment {order.equipment_id}")
        return order

    def update(self, order_id: int, fields: Dict[str, Any]) -> MaintenanceOrder:
        order = self.get(order_id)
        cleaned = self._clean(fields)
        was_completed = order.status == MaintenanceOrder.COMPLETED

        for key, value in cleaned.items():
            setattr(order, key, value)
        if not was_completed:
            order.completed_on = None
        self._apply_completion(order)

        self._commit('update')
        logger.info(f"Updated maintenance order #{order.order_number} ({order.status})")
        return order

    def delete(self, order_id: int) -> None:
        order = self.get(order_id)
        db.session.delete(order)
        self._commit('delete')
        logger.info(f"Deleted maintenance order {order_id}")

    def list(self, search: Optional[str] = None, status: Optional[str] = None) -> List[MaintenanceOrder]:
        """Orders newest first, optionally filtered by status and free text"""
        query = (
            select(MaintenanceOrder)
            .join(Equipment, MaintenanceOrder.equipment_id == Equipment.id)
            .outerjoin(Customer, Equipment.customer_id == Customer.id)
            .where(MaintenanceOrder.user_id == self.owner_id)
            .order_by(MaintenanceOrder.opened_on.desc(), MaintenanceOrder.id.desc())
        )
        if status:
            if status not in MaintenanceOrder.STATUSES:
                raise ValidationError(
                    f"Status must be one of {', '.join(MaintenanceOrder.STATUSES)}", field='status'
                )
            query = query.where(MaintenanceOrder.status == status)
        if search:
            text = search.strip()
            like = f"%{text}%"
            conditions = [
                Equipment.name.ilike(like),
                Equipment.sku.ilike(like),
                MaintenanceOrder.technician.ilike(like),
                MaintenanceOrder.problem.ilike(like),
                Customer.company_name.ilike(like),
            ]
            if text.lstrip("#").isdigit():
                conditions.append(MaintenanceOrder.order_number == int(text.lstrip("#")))
            query = query.where(or_(*conditions))
        return list(db.session.execute(query).scalars())
