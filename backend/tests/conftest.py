"""
Pytest fixtures for the bakery POS backend tests.

Provides an in-memory application, per-test table wipes, staff users for
each role, catalog fixtures and authentication helpers.
"""

from decimal import Decimal

import pytest

from bakery import create_app
from bakery.extensions import db
from bakery.models import Customer, Product
from bakery.permissions import ROLE_ADMIN, ROLE_PRODUCTION, ROLE_SELLER
from bakery.services.auth_service import create_user

TEST_PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expire_all()

    yield db.session

    # Cleanup after test
    db.session.rollback()


@pytest.fixture(scope='function')
def admin_user(db_session):
    return create_user(name="Ada Admin", email="admin@bakery.test", password=TEST_PASSWORD, role=ROLE_ADMIN)


@pytest.fixture(scope='function')
def seller_user(db_session):
    return create_user(name="Sam Seller", email="seller@bakery.test", password=TEST_PASSWORD, role=ROLE_SELLER)


@pytest.fixture(scope='function')
def production_user(db_session):
    return create_user(
        name="Pat Production",
        email="production@bakery.test",
        password=TEST_PASSWORD,
        role=ROLE_PRODUCTION,
    )


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(code, name, price, stock, is_active=True)."""
    def _make(code="PAN-001", name="Baguette", price="0.30", stock=10, is_active=True):
        product = Product(
            code=code,
            name=name,
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def bread(make_product):
    """Baguette at 0.30 with 10 units in stock."""
    return make_product()


@pytest.fixture(scope='function')
def croissant(make_product):
    return make_product(code="CRO-001", name="Croissant", price="1.25", stock=20)


@pytest.fixture(scope='function')
def customer(db_session):
    customer = Customer(name="Maria Lopez", email="maria@example.com", phone="555-0101")
    db_session.add(customer)
    db_session.commit()
    return customer


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.email))


@pytest.fixture(scope='function')
def seller_headers(client, seller_user):
    return auth_headers(get_auth_token(client, seller_user.email))


@pytest.fixture(scope='function')
def production_headers(client, production_user):
    return auth_headers(get_auth_token(client, production_user.email))
