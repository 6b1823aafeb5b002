#!/usr/bin/env python3
"""
Database build for the warranty tracker
Creates the tables, guarantees the administrator account and optionally
loads demo data through the same domain services the API uses.
"""

import json
from datetime import timedelta
from pathlib import Path

from sqlalchemy import select

from warranty_tracker import create_app, db
from warranty_tracker.logger import get_logger
from warranty_tracker.utils.dates import utc_today

logger = get_logger("warranty_tracker.build")

DEMO_DATA_FILE = Path(__file__).parent / 'data' / 'build_data_demo.json'


def ensure_admin_user(app):
    """
    Create the administrator from ADMIN_* settings when it does not exist.

    Returns:
        User or None when no ADMIN_PASSWORD is configured
    """
    from warranty_tracker.data.core.user import User

    username = app.config.get('ADMIN_USERNAME') or 'admin'
    admin = db.session.execute(select(User).filter_by(username=username)).scalar_one_or_none()
    if admin is not None:
        logger.info(f"Admin user '{username}' already present")
        return admin

    password = app.config.get('ADMIN_PASSWORD')
    if not password:
        logger.warning("ADMIN_PASSWORD not set; skipping admin user creation")
        return None

    admin = User(username=username, email=app.config.get('ADMIN_EMAIL'), is_admin=True)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    logger.info(f"Created admin user '{username}'")
    return admin


def _warranty_date(entry):
    offset = entry.pop('warranty_days_from_today', None)
    if offset is not None:
        entry['warranty_expires_on'] = utc_today() + timedelta(days=offset)
    return entry


def insert_demo_data(owner, data_file=DEMO_DATA_FILE):
    """
    Load demo customers, equipment, movements and maintenance orders for ``owner``.

    Skipped when the owner already has customers.
    """
    from warranty_tracker.business.customers.customer_manager import CustomerManager
    from warranty_tracker.business.equipment.gateway import SqlAlchemyEquipmentGateway
    from warranty_tracker.business.equipment.quantity_ledger import EquipmentQuantityLedger
    from warranty_tracker.business.equipment.registration import EquipmentRegistrationWorkflow
    from warranty_tracker.business.maintenance.maintenance_manager import MaintenanceManager

    customers = CustomerManager(owner.id)
    if customers.list():
        logger.info("Demo data already present, skipping")
        return

    with open(data_file, 'r') as f:
        demo = json.load(f)

    customer_ids = {}
    for entry in demo.get('Customers', []):
        customer = customers.create(entry)
        customer_ids[customer.company_name] = customer.id

    gateway = SqlAlchemyEquipmentGateway(owner.id)
    workflow = EquipmentRegistrationWorkflow(gateway)
    equipment_ids = {}
    for entry in demo.get('Equipment', []):
        entry = _warranty_date(dict(entry))
        entry['units'] = [_warranty_date(dict(unit)) for unit in entry.get('units', [])]
        equipment = workflow.create_equipment(entry)
        equipment_ids[equipment.name] = equipment.id

    ledger = EquipmentQuantityLedger(gateway)
    for entry in demo.get('Movements', []):
        ledger.register_movement(
            equipment_ids[entry['equipment']],
            entry['kind'],
            entry['quantity'],
            customer_id=customer_ids.get(entry.get('customer')),
            movement_date=utc_today(),
        )

    orders = MaintenanceManager(owner.id)
    for entry in demo.get('MaintenanceOrders', []):
        fields = dict(entry, equipment_id=equipment_ids[entry.pop('equipment')])
        orders.create(fields)

    logger.info(
        f"Inserted demo data: {len(customer_ids)} customers, {len(equipment_ids)} equipment, "
        f"{len(demo.get('MaintenanceOrders', []))} maintenance orders"
    )


def build_database(app=None, demo_data=False):
    """
    Create all tables and the admin account; load demo data when asked.

    Args:
        app: Flask application (a new one is created when omitted)
        demo_data (bool): Insert demo records owned by the admin user
    """
    app = app or create_app()
    with app.app_context():
        logger.info("Creating database tables")
        db.create_all()

        admin = ensure_admin_user(app)
        if demo_data:
            if admin is None:
                logger.warning("Demo data requires the admin user; set ADMIN_PASSWORD")
            else:
                insert_demo_data(admin)

        logger.info("Database build complete")
    return app
