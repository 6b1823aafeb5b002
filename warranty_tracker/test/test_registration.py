"""
Tests for the equipment registration workflow
"""
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from warranty_tracker.business.equipment.gateway import is_sku_conflict
from warranty_tracker.business.equipment.quantity_ledger import EquipmentQuantityLedger
from warranty_tracker.business.equipment.registration import EquipmentRegistrationWorkflow
from warranty_tracker.business.errors import DuplicateSkuError, NotFoundError, ValidationError
from warranty_tracker.data.equipment.equipment import Equipment
from warranty_tracker.data.equipment.equipment_unit import EquipmentUnit


class ScriptedAllocator:
    """Hands out a fixed list of SKUs"""

    def __init__(self, *skus):
        self.skus = list(skus)
        self.calls = 0

    def allocate(self):
        self.calls += 1
        return self.skus.pop(0)


def equipment_count(db):
    return db.session.scalar(select(func.count(Equipment.id)))


def test_blank_sku_is_generated(gateway):
    workflow = EquipmentRegistrationWorkflow(gateway)
    equipment = workflow.create_equipment({'name': 'X', 'sku': ''})
    assert equipment.sku.startswith('EQ-')
    assert equipment.quantity == 1
    assert equipment.customer_id is None


def test_generated_sku_collision_is_retried_once(gateway, make_equipment, db):
    make_equipment(sku='EQ-TAKEN-0001')
    allocator = ScriptedAllocator('EQ-TAKEN-0001', 'EQ-FRESH-0002')
    workflow = EquipmentRegistrationWorkflow(gateway, allocator)

    equipment = workflow.create_equipment({'name': 'X', 'sku': ''})

    assert equipment.sku == 'EQ-FRESH-0002'
    assert allocator.calls == 2
    assert equipment_count(db) == 2


def test_second_generated_collision_fails(gateway, make_equipment, db):
    make_equipment(sku='EQ-TAKEN-0001')
    make_equipment(sku='EQ-TAKEN-0002')
    allocator = ScriptedAllocator('EQ-TAKEN-0001', 'EQ-TAKEN-0002', 'EQ-NEVER-0003')
    workflow = EquipmentRegistrationWorkflow(gateway, allocator)

    with pytest.raises(DuplicateSkuError) as excinfo:
        workflow.create_equipment({'name': 'X', 'sku': ''})

    assert excinfo.value.sku == 'EQ-TAKEN-0002'
    assert allocator.calls == 2
    assert equipment_count(db) == 2


def test_supplied_sku_collision_is_not_retried(gateway, make_equipment, db):
    make_equipment(sku='CUSTOM-1')
    allocator = ScriptedAllocator('EQ-UNUSED-0001')
    workflow = EquipmentRegistrationWorkflow(gateway, allocator)

    with pytest.raises(DuplicateSkuError) as excinfo:
        workflow.create_equipment({'name': 'Y', 'sku': 'CUSTOM-1'})

    assert excinfo.value.to_dict() == {
        'error': 'duplicate_sku',
        'message': "SKU 'CUSTOM-1' is already in use",
        'sku': 'CUSTOM-1',
    }
    assert allocator.calls == 0
    assert equipment_count(db) == 1


def test_same_sku_allowed_for_different_owners(make_equipment, other_user):
    from warranty_tracker.business.equipment.gateway import SqlAlchemyEquipmentGateway

    make_equipment(sku='SHARED-1')
    other = EquipmentRegistrationWorkflow(SqlAlchemyEquipmentGateway(other_user.id))
    assert other.create_equipment({'name': 'Z', 'sku': 'SHARED-1'}).sku == 'SHARED-1'


@pytest.mark.parametrize('name', [None, '', '   '])
def test_name_is_required(gateway, name):
    with pytest.raises(ValidationError) as excinfo:
        EquipmentRegistrationWorkflow(gateway).create_equipment({'name': name})
    assert excinfo.value.field == 'name'


def test_form_values_are_parsed(gateway, customer):
    equipment = EquipmentRegistrationWorkflow(gateway).create_equipment({
        'name': '  Ultrasound  ',
        'quantity': '3',
        'customer_id': str(customer.id),
        'warranty_expires_on': '2025-02-28',
        'model': '',
    })
    assert equipment.name == 'Ultrasound'
    assert equipment.quantity == 3
    assert equipment.customer_id == customer.id
    assert equipment.warranty_expires_on == date(2025, 2, 28)
    assert equipment.model is None


@pytest.mark.parametrize('fields, field', [
    ({'quantity': -1}, 'quantity'),
    ({'quantity': 'many'}, 'quantity'),
    ({'warranty_expires_on': '28/02/2025'}, 'warranty_expires_on'),
    ({'customer_id': 'acme'}, 'customer_id'),
])
def test_invalid_fields(gateway, fields, field):
    with pytest.raises(ValidationError) as excinfo:
        EquipmentRegistrationWorkflow(gateway).create_equipment(dict(fields, name='X'))
    assert excinfo.value.field == field


def test_unknown_customer(gateway):
    with pytest.raises(NotFoundError):
        EquipmentRegistrationWorkflow(gateway).create_equipment({'name': 'X', 'customer_id': 42})


def test_per_unit_tracking_creates_units(gateway, db):
    equipment = EquipmentRegistrationWorkflow(gateway).create_equipment({
        'name': 'Radio',
        'quantity': 2,
        'warranty_expires_on': '2030-01-01',
        'track_units': True,
        'units': [
            {'serial_number': 'R-1', 'warranty_expires_on': '2025-01-01'},
            {'serial_number': 'R-2', 'warranty_expires_on': None},
        ],
    })

    assert equipment.tracks_units
    assert equipment.quantity == 2
    assert equipment.warranty_expires_on is None

    units = db.session.execute(
        select(EquipmentUnit).where(EquipmentUnit.equipment_id == equipment.id).order_by(EquipmentUnit.id)
    ).scalars().all()
    assert [(u.serial_number, u.warranty_expires_on) for u in units] == [
        ('R-1', date(2025, 1, 1)),
        ('R-2', None),
    ]


def test_per_unit_count_mismatch(gateway, db):
    with pytest.raises(ValidationError) as excinfo:
        EquipmentRegistrationWorkflow(gateway).create_equipment({
            'name': 'Radio',
            'quantity': 3,
            'track_units': 'true',
            'units': [{'serial_number': 'R-1'}],
        })
    assert excinfo.value.field == 'units'
    assert equipment_count(db) == 0
    assert db.session.scalar(select(func.count(EquipmentUnit.id))) == 0


def test_units_without_tracking_flag(gateway):
    with pytest.raises(ValidationError):
        EquipmentRegistrationWorkflow(gateway).create_equipment({
            'name': 'Radio',
            'units': [{'serial_number': 'R-1'}],
        })


def test_update_keeps_unit_tracked_quantity(gateway):
    workflow = EquipmentRegistrationWorkflow(gateway)
    equipment = workflow.create_equipment({
        'name': 'Radio',
        'sku': 'RADIO-1',
        'quantity': 2,
        'track_units': True,
        'units': [{'serial_number': 'R-1'}, {'serial_number': 'R-2'}],
    })

    with pytest.raises(ValidationError) as excinfo:
        workflow.update_equipment(equipment.id, {'name': 'Radio', 'sku': 'RADIO-1', 'quantity': 5})
    assert excinfo.value.field == 'quantity'
    assert gateway.get_equipment(equipment.id).quantity == 2

    updated = workflow.update_equipment(equipment.id, {'name': 'Handheld radio', 'sku': 'RADIO-1', 'quantity': 2})
    assert updated.name == 'Handheld radio'
    assert updated.quantity == 2


def test_update_overwrites_mutable_fields(gateway, make_equipment, customer):
    equipment = make_equipment(sku='OLD-1', model='M1', location='Shelf A', quantity=4)
    ledger = EquipmentQuantityLedger(gateway)
    ledger.register_movement(equipment.id, 'incoming', 1, movement_date=date(2024, 1, 1))

    workflow = EquipmentRegistrationWorkflow(gateway, ScriptedAllocator())
    updated = workflow.update_equipment(equipment.id, {
        'name': 'Renamed',
        'sku': 'NEW-1',
        'customer_id': customer.id,
        'warranty_expires_on': '2026-06-30',
        'quantity': 7,
    })

    assert updated.name == 'Renamed'
    assert updated.sku == 'NEW-1'
    assert updated.customer_id == customer.id
    assert updated.model is None
    assert updated.location is None
    assert updated.warranty_expires_on == date(2026, 6, 30)
    assert updated.quantity == 7
    assert len(ledger.history(equipment.id)) == 1


def test_update_requires_sku_and_quantity(gateway, make_equipment):
    equipment = make_equipment(sku='KEEP-1')
    workflow = EquipmentRegistrationWorkflow(gateway)

    with pytest.raises(ValidationError) as excinfo:
        workflow.update_equipment(equipment.id, {'name': 'X', 'sku': '', 'quantity': 1})
    assert excinfo.value.field == 'sku'

    with pytest.raises(ValidationError) as excinfo:
        workflow.update_equipment(equipment.id, {'name': 'X', 'sku': 'KEEP-1'})
    assert excinfo.value.field == 'quantity'


def test_update_sku_collision(gateway, make_equipment):
    make_equipment(sku='A-1')
    second = make_equipment(sku='B-1')

    with pytest.raises(DuplicateSkuError):
        EquipmentRegistrationWorkflow(gateway).update_equipment(
            second.id, {'name': 'B', 'sku': 'A-1', 'quantity': 1}
        )
    assert gateway.get_equipment(second.id).sku == 'B-1'


def test_update_unknown_equipment(gateway):
    with pytest.raises(NotFoundError):
        EquipmentRegistrationWorkflow(gateway).update_equipment(404, {'name': 'X', 'sku': 'S', 'quantity': 1})


@pytest.mark.parametrize("message, expected", [
    ("UNIQUE constraint failed: equipments.user_id, equipments.sku", True),
    ('duplicate key value violates unique constraint "uq_equipments_owner_sku"', True),
    ("Duplicate entry '1-EQ-1' for key 'equipments.uq_equipments_owner_sku'", True),
    ("CHECK constraint failed: ck_equipments_quantity_non_negative", False),
    ("NOT NULL constraint failed: equipment_units.serial_number (sku EQ-1)", False),
])
def test_sku_conflict_detection(message, expected):
    error = IntegrityError("INSERT INTO equipments", {}, Exception(message))
    assert is_sku_conflict(error) is expected
