"""
Tests for customer management
"""
from datetime import date

import pytest

from warranty_tracker.business.customers.customer_manager import CustomerManager
from warranty_tracker.business.equipment.quantity_ledger import EquipmentQuantityLedger
from warranty_tracker.business.errors import NotFoundError, ValidationError


def test_create_and_get(user):
    manager = CustomerManager(user.id)
    created = manager.create({'company_name': '  Harbor Logistics ', 'phone': '', 'email': 'ops@harbor.example'})

    fetched = manager.get(created.id)
    assert fetched.company_name == 'Harbor Logistics'
    assert fetched.phone is None
    assert fetched.user_id == user.id


@pytest.mark.parametrize('fields, field', [
    ({'company_name': ''}, 'company_name'),
    ({'company_name': 'X', 'email': 'not-an-email'}, 'email'),
])
def test_validation(user, fields, field):
    with pytest.raises(ValidationError) as excinfo:
        CustomerManager(user.id).create(fields)
    assert excinfo.value.field == field


def test_update(user, customer):
    updated = CustomerManager(user.id).update(customer.id, {'company_name': 'Acme Health', 'contact_name': 'Lee'})
    assert updated.company_name == 'Acme Health'
    assert updated.contact_name == 'Lee'
    # Full overwrite: fields left out are cleared
    assert updated.tax_id is None


def test_list_search_and_counts(user, customer, make_equipment):
    manager = CustomerManager(user.id)
    manager.create({'company_name': 'Harbor Logistics', 'tax_id': '98.765.432/0001-10'})
    make_equipment(customer_id=customer.id)
    make_equipment(customer_id=customer.id)

    rows = manager.list()
    assert [c.company_name for c, _ in rows] == ['Harbor Logistics', 'Acme Hospital']
    assert dict((c.company_name, n) for c, n in rows) == {'Harbor Logistics': 0, 'Acme Hospital': 2}

    assert [c.company_name for c, _ in manager.list(search='dana')] == ['Acme Hospital']
    assert [c.company_name for c, _ in manager.list(search='98.765')] == ['Harbor Logistics']
    assert manager.list(search='nobody') == []


def test_delete(user):
    manager = CustomerManager(user.id)
    customer = manager.create({'company_name': 'Temporary'})
    manager.delete(customer.id)
    with pytest.raises(NotFoundError):
        manager.get(customer.id)


def test_delete_refused_while_referenced(user, customer, gateway, make_equipment):
    equipment = make_equipment(quantity=2)
    ledger = EquipmentQuantityLedger(gateway)
    ledger.register_movement(equipment.id, 'outgoing', 1, customer_id=customer.id, movement_date=date(2024, 1, 1))
    ledger.register_movement(equipment.id, 'incoming', 1, movement_date=date(2024, 1, 2))

    # No longer the holder, but still the counterparty of a movement
    assert gateway.get_equipment(equipment.id).customer_id is None
    with pytest.raises(ValidationError):
        CustomerManager(user.id).delete(customer.id)


def test_other_owner_cannot_see_customer(customer, other_user):
    manager = CustomerManager(other_user.id)
    with pytest.raises(NotFoundError):
        manager.get(customer.id)
    assert manager.list() == []
