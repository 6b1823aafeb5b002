"""
Pytest configuration and fixtures for the warranty tracker
"""
import os
import tempfile

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault('WARRANTY_TRACKER_LOG_DIR', os.path.join(tempfile.gettempdir(), 'warranty_tracker_test_logs'))

import pytest

from warranty_tracker import create_app
from warranty_tracker import db as _db

TEST_PASSWORD = 'correct-horse-battery'

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'WTF_CSRF_ENABLED': False,
    'RATELIMIT_ENABLED': False,
    'ENABLE_HTTPS': False,
    'FORCE_HTTPS_REDIRECT': False,
    'SESSION_COOKIE_SECURE': False,
    'REMEMBER_COOKIE_SECURE': False,
    'WARRANTY_EXPIRING_DAYS': 30,
    'ADMIN_PASSWORD': None,
}


@pytest.fixture(scope='function')
def app():
    """Create a Flask application backed by a fresh in-memory database"""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def db(app):
    return _db


def make_user(username, email, password=TEST_PASSWORD):
    from warranty_tracker.data.core.user import User

    user = User(username=username, email=email)
    user.set_password(password)
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture(scope='function')
def user(app):
    return make_user('tester', 'tester@example.com')


@pytest.fixture(scope='function')
def other_user(app):
    return make_user('outsider', 'outsider@example.com')


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def authenticated_client(client, user):
    """Test client logged in as the ``user`` fixture"""
    response = client.post('/login', json={'username': user.username, 'password': TEST_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture(scope='function')
def gateway(user):
    from warranty_tracker.business.equipment.gateway import SqlAlchemyEquipmentGateway

    return SqlAlchemyEquipmentGateway(user.id)


@pytest.fixture(scope='function')
def customer(user):
    from warranty_tracker.business.customers.customer_manager import CustomerManager

    return CustomerManager(user.id).create({
        'company_name': 'Acme Hospital',
        'tax_id': '12.345.678/0001-90',
        'contact_name': 'Dana Smith',
        'email': 'dana@acme.example',
    })


@pytest.fixture(scope='function')
def make_equipment(gateway):
    """Factory registering equipment through the registration workflow"""
    from warranty_tracker.business.equipment.registration import EquipmentRegistrationWorkflow

    workflow = EquipmentRegistrationWorkflow(gateway)

    def _make(**fields):
        fields.setdefault('name', 'Infusion Pump')
        return workflow.create_equipment(fields)

    return _make
