"""
Equipment Quantity Ledger

Applies incoming/outgoing movements to an equipment's on-hand quantity and
records each one as an immutable EquipmentMovement.

Rules:
- quantity is a positive integer and a movement date is required
- an outgoing movement always names the receiving customer
- incoming: quantity += n, current holder cleared (back with the company)
- outgoing: quantity -= n, current holder = customer; never below zero
- movements apply in call order; movement_date is informational only
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from warranty_tracker.business.equipment.gateway import EquipmentGateway
from warranty_tracker.business.errors import (
    InsufficientQuantityError,
    PartialMovementError,
    StorageError,
    ValidationError,
)
from warranty_tracker.data.equipment.equipment_movement import EquipmentMovement
from warranty_tracker.logger import get_logger
from warranty_tracker.utils.dates import parse_date

logger = get_logger("warranty_tracker.business.equipment.ledger")


def _clean_notes(value) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


@dataclass
class MovementResult:
    """Outcome of one registered movement"""
    movement: EquipmentMovement
    quantity: int
    customer_id: Optional[int]

    def to_dict(self):
        return {
            'movement': self.movement.to_dict(),
            'quantity': self.quantity,
            'customer_id': self.customer_id,
        }


class EquipmentQuantityLedger:
    """
    Domain service for equipment movements.

    Quantity changes go through ``EquipmentGateway.adjust_quantity``, an
    atomic conditional increment, so concurrent movements cannot lose an
    update or overdraw the stock.
    """

    def __init__(self, gateway: EquipmentGateway):
        self.gateway = gateway

    @staticmethod
    def _validate(kind, quantity, customer_id, movement_date) -> Tuple[str, date]:
        if isinstance(kind, str):
            kind = kind.strip().lower()
        if kind not in EquipmentMovement.KINDS:
            raise ValidationError(f"Movement kind must be one of {', '.join(EquipmentMovement.KINDS)}", field='kind')
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer", field='quantity')
        parsed_date = parse_date(movement_date, field='movement_date')
        if parsed_date is None:
            raise ValidationError("Movement date is required", field='movement_date')
        if kind == EquipmentMovement.OUTGOING and customer_id is None:
            raise ValidationError("An outgoing movement requires the receiving customer", field='customer_id')
        return kind, parsed_date

    def register_movement(
        self,
        equipment_id: int,
        kind: str,
        quantity: int,
        customer_id: Optional[int] = None,
        movement_date=None,
        notes: Optional[str] = None,
    ) -> MovementResult:
        """
        Register one movement.

        Raises:
            ValidationError: bad kind/quantity/date or outgoing without customer
            NotFoundError: unknown equipment or customer
            InsufficientQuantityError: outgoing more than on hand (no writes)
            PartialMovementError: movement recorded, quantity update failed
            StorageError: the store failed
        """
        kind, parsed_date = self._validate(kind, quantity, customer_id, movement_date)

        equipment = self.gateway.get_equipment(equipment_id)
        if customer_id is not None:
            self.gateway.get_customer(customer_id)

        available = equipment.quantity
        if kind == EquipmentMovement.INCOMING:
            delta = quantity
            holder_id = None
        else:
            delta = -quantity
            holder_id = customer_id
            if available + delta < 0:
                logger.info(
                    f"Refused outgoing movement for equipment {equipment_id}: "
                    f"requested {quantity}, available {available}"
                )
                raise InsufficientQuantityError(available, quantity)

        with self.gateway.transaction():
            movement = self.gateway.append_movement({
                'equipment_id': equipment_id,
                'kind': kind,
                'customer_id': customer_id,
                'quantity': quantity,
                'notes': _clean_notes(notes),
                'movement_date': parsed_date,
            })

            try:
                new_quantity = self.gateway.adjust_quantity(equipment_id, delta, holder_id)
            except StorageError as e:
                if self.gateway.transactional:
                    raise
                logger.error(f"Movement {movement.id} recorded but quantity update failed: {e}")
                raise PartialMovementError(movement.id, e) from e

            if new_quantity is None:
                # A concurrent movement consumed the stock between our read
                # and the conditional write.
                current = self.gateway.get_equipment(equipment_id).quantity
                refusal = InsufficientQuantityError(current, quantity)
                if not self.gateway.transactional:
                    raise PartialMovementError(movement.id, refusal)
                raise refusal

        logger.info(
            f"Registered {kind} movement {movement.id} for equipment {equipment_id}: "
            f"qty {quantity}, on hand {available} -> {new_quantity}",
            extra={'context': {'equipment_id': equipment_id, 'movement_id': movement.id}},
        )
        return MovementResult(movement=movement, quantity=new_quantity, customer_id=holder_id)

    def history(self, equipment_id: int) -> List[EquipmentMovement]:
        """Movements of an equipment in application order"""
        self.gateway.get_equipment(equipment_id)
        return self.gateway.list_movements(equipment_id)
