"""
Pytest fixtures for Little Tea Pot backend tests.

Provides the test app (in-memory SQLite), per-test table clearing,
one staff user per role, and login helpers.
"""

from datetime import timedelta

import pytest
from teapot import create_app
from teapot.extensions import db
from teapot.models import Customer, Transaction, User
from teapot.services.auth_service import hash_password
from teapot.services.purchase_service import RESERVED_CUSTOMER_ID
from teapot.time_utils import utcnow


PASSWORD = "Password123!"


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


@pytest.fixture(scope='session')
def password_hash(app):
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(PASSWORD)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
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


@pytest.fixture(scope='function')
def cli_runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def inventory_account(db_session):
    account = Customer(id=RESERVED_CUSTOMER_ID, name="Inventory System")
    db_session.add(account)
    db_session.commit()
    return account


def _make_user(db_session, password_hash, username, role, is_active=True):
    user = User(
        username=username,
        email=f"{username}@teapot.test",
        password_hash=password_hash,
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session, password_hash):
    return _make_user(db_session, password_hash, "admin_user", "admin")


@pytest.fixture(scope='function')
def inventory_user(db_session, password_hash):
    return _make_user(db_session, password_hash, "stock_clerk", "inventory")


@pytest.fixture(scope='function')
def customer_user(db_session, password_hash):
    return _make_user(db_session, password_hash, "counter_staff", "customer")


@pytest.fixture(scope='function')
def seed(inventory_account, admin_user, inventory_user, customer_user):
    """Inventory account plus one user per role."""
    return {
        "admin": admin_user,
        "inventory": inventory_user,
        "customer": customer_user,
    }


@pytest.fixture(scope='function')
def admin_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["admin"].username, PASSWORD))


@pytest.fixture(scope='function')
def inventory_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["inventory"].username, PASSWORD))


@pytest.fixture(scope='function')
def customer_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["customer"].username, PASSWORD))


@pytest.fixture(scope='function')
def add_transaction(db_session):
    """
    Insert a transaction with an explicit timestamp.

    Creates the customer row when missing so time-based tests can build
    any history they need.
    """
    def _add(customer_id, quantity, *, ago=timedelta(0), at=None, created_by=None):
        if db_session.get(Customer, customer_id) is None:
            db_session.add(Customer(id=customer_id))
            db_session.flush()
        tx = Transaction(
            customer_id=customer_id,
            quantity=quantity,
            created_at=at if at is not None else utcnow() - ago,
            created_by=created_by,
        )
        db_session.add(tx)
        db_session.commit()
        return tx

    return _add


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
