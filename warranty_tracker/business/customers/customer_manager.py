"""
CustomerManager - Domain service for customer records

Customers belong to one owner. A customer that still holds equipment or
appears in the movement ledger cannot be deleted.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from warranty_tracker import db
from warranty_tracker.business.errors import NotFoundError, StorageError, ValidationError
from warranty_tracker.data.core.customer import Customer
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.equipment.equipment_movement import EquipmentMovement
from warranty_tracker.logger import get_logger
from warranty_tracker.utils.logging_sanitizer import sanitize_dict

logger = get_logger("warranty_tracker.business.customers")


class CustomerManager:
    """Create, edit, delete and list the customers of one owner"""

    EDITABLE_FIELDS = ('company_name', 'tax_id', 'contact_name', 'email', 'phone', 'address')

    def __init__(self, owner_id: int):
        self.owner_id = owner_id

    def _clean(self, fields: Dict[str, Any]) -> Dict[str, Optional[str]]:
        cleaned = {}
        for key in self.EDITABLE_FIELDS:
            value = fields.get(key)
            value = str(value).strip() if value is not None else ''
            cleaned[key] = value or None

        if not cleaned['company_name']:
            raise ValidationError("Company name is required", field='company_name')
        if cleaned['email'] and '@' not in cleaned['email']:
            raise ValidationError("Email address is not valid", field='email')
        return cleaned

    def _commit(self, action: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Error {action} customer for owner {self.owner_id}: {e}")
            raise StorageError(f"Could not {action} customer", e) from e

    def get(self, customer_id: int) -> Customer:
        customer = db.session.execute(
            select(Customer).where(Customer.id == customer_id, Customer.user_id == self.owner_id)
        ).scalar_one_or_none()
        if customer is None:
            raise NotFoundError('customer', customer_id)
        return customer

    def create(self, fields: Dict[str, Any]) -> Customer:
        logger.debug(f"Creating customer for owner {self.owner_id}: {sanitize_dict(fields)}")
        customer = Customer.from_dict(self._clean(fields), owner_id=self.owner_id)
        db.session.add(customer)
        self._commit('create')
        logger.info(f"Created customer {customer.id}: {customer.company_name}")
        return customer

    def update(self, customer_id: int, fields: Dict[str, Any]) -> Customer:
        customer = self.get(customer_id)
        for key, value in self._clean(fields).items():
            setattr(customer, key, value)
        self._commit('update')
        logger.info(f"Updated customer {customer_id}")
        return customer

    def delete(self, customer_id: int) -> None:
        customer = self.get(customer_id)

        holding = db.session.scalar(
            select(func.count(Equipment.id)).where(Equipment.customer_id == customer_id)
        )
        movements = db.session.scalar(
            select(func.count(EquipmentMovement.id)).where(EquipmentMovement.customer_id == customer_id)
        )
        if holding or movements:
            raise ValidationError(
                "Customer is referenced by equipment or movement history and cannot be deleted",
                field='customer_id',
            )

        db.session.delete(customer)
        self._commit('delete')
        logger.info(f"Deleted customer {customer_id}")

    def list(self, search: Optional[str] = None) -> List[Tuple[Customer, int]]:
        """
        Customers newest first, each paired with the number of equipment
        rows it currently holds.
        """
        equipment_count = (
            select(func.count(Equipment.id))
            .where(Equipment.customer_id == Customer.id)
            .correlate(Customer)
            .scalar_subquery()
        )
        query = (
            select(Customer, equipment_count)
            .where(Customer.user_id == self.owner_id)
            .order_by(Customer.created_at.desc(), Customer.id.desc())
        )
        if search:
            like = f"%{search.strip()}%"
            query = query.where(or_(
                Customer.company_name.ilike(like),
                Customer.tax_id.ilike(like),
                Customer.contact_name.ilike(like),
            ))
        return [(customer, count or 0) for customer, count in db.session.execute(query).all()]
