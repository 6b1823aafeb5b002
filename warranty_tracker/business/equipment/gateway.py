"""
Persistence Gateway for the equipment domain

The ledger and the registration workflow only talk to ``EquipmentGateway``.
``SqlAlchemyEquipmentGateway`` is the production implementation over the
Flask-SQLAlchemy session; every query is scoped to one owner.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from warranty_tracker import db
from warranty_tracker.business.errors import NotFoundError, SkuConflict, StorageError
from warranty_tracker.data.core.customer import Customer
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.equipment.equipment_movement import EquipmentMovement
from warranty_tracker.data.equipment.equipment_unit import EquipmentUnit
from warranty_tracker.logger import get_logger
from warranty_tracker.utils.dates import utc_now

logger = get_logger("warranty_tracker.business.equipment.gateway")

# SQLite reports the columns of a failed unique index, other backends its name
SKU_CONFLICT_MARKERS = (
    Equipment.SKU_CONSTRAINT,
    'equipments.user_id, equipments.sku',
)


def is_sku_conflict(error: IntegrityError) -> bool:
    """True when ``error`` is a violation of the per-owner SKU uniqueness"""
    message = str(getattr(error, 'orig', error)).lower()
    return any(marker in message for marker in SKU_CONFLICT_MARKERS)


class EquipmentGateway(ABC):
    """Operations the equipment core requires from its store"""

    # True when every write inside transaction() commits or rolls back together
    transactional = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Unit-of-work boundary. The default store has none."""
        yield

    @abstractmethod
    def get_equipment(self, equipment_id: int) -> Equipment:
        """Fetch current state; raises NotFoundError"""

    @abstractmethod
    def get_customer(self, customer_id: int) -> Customer:
        """Raises NotFoundError"""

    @abstractmethod
    def insert_equipment(self, fields: Dict[str, Any]) -> Equipment:
        """Raises SkuConflict when the SKU is already taken"""

    @abstractmethod
    def put_equipment(self, equipment_id: int, fields: Dict[str, Any]) -> Equipment:
        """Overwrite fields; raises SkuConflict / NotFoundError"""

    @abstractmethod
    def insert_unit(self, equipment_id: int, fields: Dict[str, Any]) -> EquipmentUnit:
        pass

    @abstractmethod
    def append_movement(self, fields: Dict[str, Any]) -> EquipmentMovement:
        pass

    @abstractmethod
    def adjust_quantity(self, equipment_id: int, delta: int, customer_id: Optional[int]) -> Optional[int]:
        """
        Atomically add ``delta`` to the equipment quantity and set its holder.

        Returns the new quantity, or None when the write was refused because
        it would make the quantity negative.
        """

    @abstractmethod
    def list_movements(self, equipment_id: int) -> List[EquipmentMovement]:
        """Movements in the order they were applied"""


class SqlAlchemyEquipmentGateway(EquipmentGateway):
    """Gateway over the Flask-SQLAlchemy session, scoped to ``owner_id``"""

    transactional = True

    def __init__(self, owner_id: int, session=None):
        self.owner_id = owner_id
        self.session = session or db.session

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Transaction failed for owner {self.owner_id}: {e}")
            raise StorageError("The database rejected the operation", e) from e
        except Exception:
            self.session.rollback()
            raise

    def _flush(self, sku: Optional[str] = None) -> None:
        try:
            self.session.flush()
        except IntegrityError as e:
            if sku is not None and is_sku_conflict(e):
                raise SkuConflict(sku, e) from e
            raise StorageError("Integrity constraint violated", e) from e
        except SQLAlchemyError as e:
            raise StorageError("The database rejected the operation", e) from e

    def get_equipment(self, equipment_id):
        try:
            equipment = self.session.execute(
                select(Equipment)
                .where(Equipment.id == equipment_id, Equipment.user_id == self.owner_id)
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("Could not read equipment", e) from e
        if equipment is None:
            raise NotFoundError('equipment', equipment_id)
        return equipment

    def get_customer(self, customer_id):
        try:
            customer = self.session.execute(
                select(Customer).where(Customer.id == customer_id, Customer.user_id == self.owner_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("Could not read customer", e) from e
        if customer is None:
            raise NotFoundError('customer', customer_id)
        return customer

    def insert_equipment(self, fields):
        equipment = Equipment.from_dict(fields, owner_id=self.owner_id)
        self.session.add(equipment)
        self._flush(sku=equipment.sku)
        return equipment

    def put_equipment(self, equipment_id, fields):
        equipment = self.get_equipment(equipment_id)
        for key, value in fields.items():
            setattr(equipment, key, value)
        self._flush(sku=fields.get('sku'))
        return equipment

    def insert_unit(self, equipment_id, fields):
        unit = EquipmentUnit.from_dict(dict(fields, equipment_id=equipment_id))
        self.session.add(unit)
        self._flush()
        return unit

    def append_movement(self, fields):
        movement = EquipmentMovement.from_dict(fields, owner_id=self.owner_id)
        self.session.add(movement)
        self._flush()
        return movement

    def adjust_quantity(self, equipment_id, delta, customer_id):
        # Conditional increment: the guard and the write happen in one
        # statement, so two concurrent movements can never both spend the
        # same stock.
        stmt = (
            update(Equipment)
            .where(
                Equipment.id == equipment_id,
                Equipment.user_id == self.owner_id,
                Equipment.quantity + delta >= 0,
            )
            .values(
                quantity=Equipment.quantity + delta,
                customer_id=customer_id,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageError("Could not update equipment quantity", e) from e
        if result.rowcount == 0:
            return None
        return self.get_equipment(equipment_id).quantity

    def list_movements(self, equipment_id):
        try:
            return list(self.session.execute(
                select(EquipmentMovement)
                .where(
                    EquipmentMovement.equipment_id == equipment_id,
                    EquipmentMovement.user_id == self.owner_id,
                )
                .order_by(EquipmentMovement.id)
            ).scalars())
        except SQLAlchemyError as e:
            raise StorageError("Could not read movements", e) from e
