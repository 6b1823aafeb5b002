"""
Equipment Registration Workflow

Creates and edits equipment rows. A blank SKU on create is filled by the
SKU allocator; a collision on a generated SKU is retried exactly once with a
new candidate. A caller-supplied SKU is never retried.

Per-unit tracking: a batch whose units have different warranty dates is
stored as a parent row without a warranty date plus one EquipmentUnit per
unit. The parent's quantity equals the number of units.
"""

from typing import Any, Dict, List, Optional

from warranty_tracker.business.equipment.gateway import EquipmentGateway
from warranty_tracker.business.equipment.sku_allocator import SkuAllocator
from warranty_tracker.business.errors import DuplicateSkuError, SkuConflict, ValidationError
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.logger import get_logger
from warranty_tracker.utils.dates import parse_date

logger = get_logger("warranty_tracker.business.equipment.registration")


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_quantity(value, default: Optional[int] = 1) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError("Quantity is required", field='quantity')
        return default
    if isinstance(value, bool):
        raise ValidationError("Quantity must be an integer", field='quantity')
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Quantity must be an integer", field='quantity')
    if isinstance(value, float) and value != quantity:
        raise ValidationError("Quantity must be an integer", field='quantity')
    if quantity < 0:
        raise ValidationError("Quantity cannot be negative", field='quantity')
    return quantity


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def _parse_customer_id(value) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Customer id must be an integer", field='customer_id')


class EquipmentRegistrationWorkflow:
    """Create/update equipment through an EquipmentGateway"""

    # Fields overwritten by update_equipment
    MUTABLE_FIELDS = (
        'name',
        'serial_number',
        'sku',
        'customer_id',
        'model',
        'location',
        'warranty_expires_on',
        'quantity',
    )

    # One retry after the first generated SKU collides
    GENERATED_SKU_ATTEMPTS = 2

    def __init__(self, gateway: EquipmentGateway, allocator: Optional[SkuAllocator] = None):
        self.gateway = gateway
        self.allocator = allocator or SkuAllocator()

    def _common_fields(self, fields: Dict[str, Any], quantity_default: Optional[int]) -> Dict[str, Any]:
        name = _clean_text(fields.get('name'))
        if not name:
            raise ValidationError("Equipment name is required", field='name')

        customer_id = _parse_customer_id(fields.get('customer_id'))
        if customer_id is not None:
            self.gateway.get_customer(customer_id)

        return {
            'name': name,
            'serial_number': _clean_text(fields.get('serial_number')),
            'customer_id': customer_id,
            'model': _clean_text(fields.get('model')),
            'location': _clean_text(fields.get('location')),
            'warranty_expires_on': parse_date(fields.get('warranty_expires_on'), field='warranty_expires_on'),
            'quantity': _parse_quantity(fields.get('quantity'), quantity_default),
        }

    @staticmethod
    def _units(fields: Dict[str, Any], quantity: int) -> List[Dict[str, Any]]:
        units = fields.get('units') or []
        if not _flag(fields.get('track_units')):
            if units:
                raise ValidationError("Unit records require per-unit tracking", field='units')
            return []

        if quantity < 1:
            raise ValidationError("Per-unit tracking needs at least one unit", field='quantity')
        if len(units) != quantity:
            raise ValidationError(
                f"Per-unit tracking declares {quantity} unit(s) but {len(units)} were supplied",
                field='units',
            )
        if not all(isinstance(unit, dict) for unit in units):
            raise ValidationError("Each unit must be an object with serial_number and warranty_expires_on", field='units')
        return [
            {
                'serial_number': _clean_text(unit.get('serial_number')),
                'warranty_expires_on': parse_date(unit.get('warranty_expires_on'), field='warranty_expires_on'),
            }
            for unit in units
        ]

    def create_equipment(self, fields: Dict[str, Any]) -> Equipment:
        """
        Create an equipment row (and its unit rows for per-unit tracking).

        Raises:
            ValidationError: missing name, bad quantity, unit count mismatch
            DuplicateSkuError: SKU collision that cannot be retried
            NotFoundError: unknown customer
        """
        record = self._common_fields(fields, quantity_default=1)
        units = self._units(fields, record['quantity'])
        if _flag(fields.get('track_units')):
            record['warranty_expires_on'] = None
            record['tracks_units'] = True

        supplied_sku = _clean_text(fields.get('sku'))
        if supplied_sku:
            return self._insert(record, units, supplied_sku)

        sku = self.allocator.allocate()
        for attempt in range(1, self.GENERATED_SKU_ATTEMPTS + 1):
            try:
                return self._insert(record, units, sku)
            except DuplicateSkuError:
                if attempt == self.GENERATED_SKU_ATTEMPTS:
                    raise
                logger.warning(f"Generated SKU {sku} collided, retrying with a new candidate")
                sku = self.allocator.allocate()

    def _insert(self, record: Dict[str, Any], units: List[Dict[str, Any]], sku: str) -> Equipment:
        try:
            with self.gateway.transaction():
                equipment = self.gateway.insert_equipment(dict(record, sku=sku))
                for unit in units:
                    self.gateway.insert_unit(equipment.id, unit)
        except SkuConflict as e:
            raise DuplicateSkuError(sku) from e

        logger.info(f"Registered equipment {equipment.id} ({sku}) qty {record['quantity']}")
        return equipment

    def update_equipment(self, equipment_id: int, fields: Dict[str, Any]) -> Equipment:
        """
        Overwrite every mutable field of an equipment row.

        Movement history and unit records are left untouched and no SKU is
        generated; a unit-tracked batch keeps its warranty date unset.
        The quantity of a unit-tracked batch only changes through movements.
        """
        current = self.gateway.get_equipment(equipment_id)

        record = self._common_fields(fields, quantity_default=None)
        sku = _clean_text(fields.get('sku'))
        if not sku:
            raise ValidationError("SKU cannot be blank when editing equipment", field='sku')
        record['sku'] = sku

        if current.tracks_units and record['warranty_expires_on'] is not None:
            raise ValidationError(
                "Equipment tracked per unit keeps warranty dates on its units",
                field='warranty_expires_on',
            )
        if current.tracks_units and record['quantity'] != current.quantity:
            raise ValidationError(
                "Quantity of equipment tracked per unit changes only through movements",
                field='quantity',
            )

        try:
            with self.gateway.transaction():
                equipment = self.gateway.put_equipment(
                    equipment_id,
                    {key: record[key] for key in self.MUTABLE_FIELDS},
                )
        except SkuConflict as e:
            raise DuplicateSkuError(sku) from e

        logger.info(f"Updated equipment {equipment_id}")
        return equipment
