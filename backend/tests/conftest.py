"""
Pytest fixtures for storefront backend tests.

Provides in-memory database setup, users with bearer sessions, catalog
fixtures, and the Flask test client.
"""

import pytest
from storefront import create_app
from storefront.extensions import db
from storefront.services import auth_service, products_service, session_service


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
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
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _bearer(user) -> dict:
    _session, token = session_service.create_session(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope='function')
def customer_user(db_session):
    """Shopper account (role=customer) with its linked Customer record."""
    return auth_service.signup(
        name="Aisha Customer",
        email="aisha@example.ae",
        password=PASSWORD,
        confirm_password=PASSWORD,
        phone="+971500000001",
    )


@pytest.fixture(scope='function')
def other_customer(db_session):
    return auth_service.signup(
        name="Omar Customer",
        email="omar@example.ae",
        password=PASSWORD,
        confirm_password=PASSWORD,
    )


@pytest.fixture(scope='function')
def admin_user(db_session):
    return auth_service.create_admin(
        name="Store Admin",
        email="admin@example.ae",
        password=PASSWORD,
    )


@pytest.fixture(scope='function')
def customer_headers(customer_user):
    return _bearer(customer_user)


@pytest.fixture(scope='function')
def other_headers(other_customer):
    return _bearer(other_customer)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return _bearer(admin_user)


@pytest.fixture(scope='function')
def category(db_session):
    return products_service.create_category(patch={"name": "Silk", "description": "Premium silk fabrics"})


@pytest.fixture(scope='function')
def make_product(db_session, category):
    """Factory: make_product(name=..., price_cents=..., stock=...)."""
    def _make(name="Premium Blue Silk", price_cents=4500, stock=100, **extra):
        patch = {
            "name": name,
            "description": f"{name} fabric",
            "price_cents": price_cents,
            "category_id": category.id,
            "stock": stock,
        }
        patch.update(extra)
        return products_service.create_product(patch=patch)
    return _make


@pytest.fixture(scope='function')
def product(make_product):
    return make_product()


SHIPPING_ADDRESS = {
    "street": "12 Al Wasl Road",
    "city": "Dubai",
    "emirate": "Dubai",
    "country": "AE",
}
