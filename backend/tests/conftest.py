"""
Pytest fixtures for gestor backend tests.

Provides an app on in-memory SQLite, the service registry, one actor per
role, and a test client with login helpers.
"""

import pytest

from gestor import create_app
from gestor.extensions import db
from gestor.models import Employee
from gestor.permissions import Role
from gestor.services import get_services

MANAGER_LOGIN = ("admin@system.local", "admin@123*")
CLERK_LOGIN = ("clerk@system.local", "user@123*")


@pytest.fixture(scope='function')
def app():
    """Fresh application and database per test."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'CREDENTIAL_SALT': 'test-salt',
        'CREDENTIAL_KDF_ROUNDS': 1,
        'WRITE_LOCK_TIMEOUT_SECONDS': 2,
        'WRITE_RETRY_ATTEMPTS': 3,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture(scope='function')
def services(app):
    return get_services()


@pytest.fixture
def no_backoff(monkeypatch):
    """Retries without sleeping."""
    monkeypatch.setattr("gestor.services.concurrency.time.sleep", lambda _seconds: None)


# -- actors (not persisted; the facade only needs id, name and role) --

@pytest.fixture
def manager():
    return Employee(id="e1", name="Main Manager", role=Role.MANAGER, email="admin@system.local")


@pytest.fixture
def admin():
    return Employee(id="a1", name="Office Admin", role=Role.ADMIN, email="office@system.local")


@pytest.fixture
def clerk():
    return Employee(id="e2", name="Store Clerk 1", role=Role.SALES, email="clerk@system.local")


@pytest.fixture
def warehouse():
    return Employee(id="w1", name="Warehouse Keeper", role=Role.WAREHOUSE, email="stock@system.local")


# -- HTTP helpers --

def get_auth_token(client, email: str, password: str) -> str:
    """Helper to get auth token for an employee."""
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def manager_headers(client):
    return auth_headers(get_auth_token(client, *MANAGER_LOGIN))


@pytest.fixture
def clerk_headers(client):
    return auth_headers(get_auth_token(client, *CLERK_LOGIN))


@pytest.fixture
def warehouse_headers(client, services, manager):
    services.employees.create_employee(manager, {
        "name": "Warehouse Keeper",
        "email": "stock@system.local",
        "role": Role.WAREHOUSE,
        "password": "stock#2024",
    })
    return auth_headers(get_auth_token(client, "stock@system.local", "stock#2024"))
