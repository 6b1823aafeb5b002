"""
Equipment models: inventory rows, per-unit records and the movement ledger
"""

from .equipment import Equipment
from .equipment_unit import EquipmentUnit
from .equipment_movement import EquipmentMovement

__all__ = [
    'Equipment',
    'EquipmentUnit',
    'EquipmentMovement',
]
