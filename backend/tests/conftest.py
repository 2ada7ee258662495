"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before any application module reads settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import itertools
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from shared.config.constants import Roles, Stations
from shared.infrastructure.db import get_db
from shared.security.auth import sign_staff_token
from shared.security.password import hash_password
from rest_api.models import (
    Base, Tenant, Restaurant, User, MenuCategory, MenuItem, Table,
)
from rest_api.repositories import TenantScope
from rest_api.services.domain import SessionService
from ws_gateway.notifier import notifier


# Counter for unique emails/codes across fixtures and tests
_id_counter = itertools.count(1000)


def next_id() -> int:
    return next(_id_counter)


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.

    HTTP requests and WebSocket connections opened through this client share
    one event loop, so events published by a request reach open sockets.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = TestingSessionLocal
    notifier.registry.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    notifier.registry.reset()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def seed_tenant(db_session):
    """Create a test tenant."""
    tenant = Tenant(name="Test Restaurant Group")
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def seed_restaurant(db_session, seed_tenant):
    """Create a test restaurant."""
    restaurant = Restaurant(
        tenant_id=seed_tenant.id,
        name="Test Restaurant",
        address="123 Test St",
        currency="TRY",
    )
    db_session.add(restaurant)
    db_session.commit()
    db_session.refresh(restaurant)
    return restaurant


@pytest.fixture
def scope(seed_tenant, seed_restaurant):
    """Scope of the seeded restaurant."""
    return TenantScope(tenant_id=seed_tenant.id, restaurant_id=seed_restaurant.id)


@pytest.fixture
def seed_table(db_session, seed_restaurant):
    """Create table T01."""
    table = Table(
        tenant_id=seed_restaurant.tenant_id,
        restaurant_id=seed_restaurant.id,
        code="T01",
        name="Masa 1",
    )
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


@pytest.fixture
def seed_table_2(db_session, seed_restaurant):
    """Create table T02."""
    table = Table(
        tenant_id=seed_restaurant.tenant_id,
        restaurant_id=seed_restaurant.id,
        code="T02",
        name="Masa 2",
    )
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


@pytest.fixture
def seed_menu(db_session, seed_restaurant):
    """
    Menu used by the pricing scenarios.

    Returns a dict keyed by short name: soup (30.00, COLD), kofte (45.00),
    pizza (65.00), ayran (10.00, BAR) and retired (inactive).
    """
    category = MenuCategory(
        tenant_id=seed_restaurant.tenant_id,
        restaurant_id=seed_restaurant.id,
        name="Ana Yemekler",
        sort=1,
    )
    db_session.add(category)
    db_session.flush()

    def item(name, price, station=Stations.HOT, is_active=True):
        menu_item = MenuItem(
            tenant_id=seed_restaurant.tenant_id,
            restaurant_id=seed_restaurant.id,
            category_id=category.id,
            name=name,
            price=Decimal(price),
            vat_rate=Decimal("18.00"),
            station=station,
            is_active=is_active,
        )
        db_session.add(menu_item)
        return menu_item

    items = {
        "soup": item("Mercimek Çorbası", "30.00", Stations.COLD),
        "kofte": item("Izgara Köfte", "45.00"),
        "pizza": item("Margherita Pizza", "65.00"),
        "ayran": item("Ayran", "10.00", Stations.BAR),
        "retired": item("Eski Yemek", "20.00", is_active=False),
    }
    db_session.commit()
    for menu_item in items.values():
        db_session.refresh(menu_item)
    items["category"] = category
    return items


def _make_user(db_session, tenant_id, role, email=None, password="testpass123", is_active=True):
    user = User(
        tenant_id=tenant_id,
        name=f"Test {role.title()}",
        email=email or f"{role.lower()}{next_id()}@test.com",
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def seed_admin_user(db_session, seed_tenant, seed_restaurant):
    """Create an admin user for testing authenticated endpoints."""
    return _make_user(db_session, seed_tenant.id, Roles.ADMIN, email="admin@test.com")


@pytest.fixture
def seed_chef_user(db_session, seed_tenant, seed_restaurant):
    return _make_user(db_session, seed_tenant.id, Roles.CHEF, email="chef@test.com")


@pytest.fixture
def seed_waiter_user(db_session, seed_tenant, seed_restaurant):
    return _make_user(db_session, seed_tenant.id, Roles.WAITER, email="waiter@test.com")


@pytest.fixture
def make_user(db_session, seed_tenant):
    """Factory for extra staff users in the seeded tenant."""
    def _factory(role, **kwargs):
        return _make_user(db_session, seed_tenant.id, role, **kwargs)
    return _factory


@pytest.fixture
def other_tenant(db_session):
    """
    A second tenant with its own restaurant, table, menu item and admin.
    Nothing in it may be reachable from the first tenant.
    """
    tenant = Tenant(name="Other Group")
    db_session.add(tenant)
    db_session.flush()
    restaurant = Restaurant(tenant_id=tenant.id, name="Other Restaurant", currency="EUR")
    db_session.add(restaurant)
    db_session.flush()
    table = Table(tenant_id=tenant.id, restaurant_id=restaurant.id, code="X1", name="Other 1")
    category = MenuCategory(tenant_id=tenant.id, restaurant_id=restaurant.id, name="Other", sort=1)
    db_session.add_all([table, category])
    db_session.flush()
    item = MenuItem(
        tenant_id=tenant.id,
        restaurant_id=restaurant.id,
        category_id=category.id,
        name="Foreign Dish",
        price=Decimal("12.00"),
        vat_rate=Decimal("10.00"),
        station=Stations.HOT,
    )
    db_session.add(item)
    db_session.commit()
    admin = _make_user(db_session, tenant.id, Roles.ADMIN, email="admin@other.com")
    return {
        "tenant": tenant,
        "restaurant": restaurant,
        "table": table,
        "item": item,
        "admin": admin,
    }


# =============================================================================
# Credentials
# =============================================================================


def staff_headers(user, restaurant_ids):
    """Authorization header for a user, signed without going through login."""
    token = sign_staff_token(
        user_id=user.id,
        tenant_id=user.tenant_id,
        role=user.role,
        restaurant_ids=restaurant_ids,
        email=user.email,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Factory: headers_for(user, restaurant_ids)."""
    return staff_headers


@pytest.fixture
def auth_headers(client, seed_admin_user):
    """Get authentication headers for API calls."""
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@test.com", "password": "testpass123"},
    )
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def waiter_headers(seed_waiter_user, seed_restaurant):
    return staff_headers(seed_waiter_user, [seed_restaurant.id])


@pytest.fixture
def chef_headers(seed_chef_user, seed_restaurant):
    return staff_headers(seed_chef_user, [seed_restaurant.id])


@pytest.fixture
def table_session(db_session, seed_table):
    """An open session on T01 (SessionHandle)."""
    return SessionService(db_session).open_session(
        seed_table.tenant_id, seed_table.restaurant_id, seed_table.id
    )


@pytest.fixture
def table_headers(table_session):
    return {"X-Table-Token": table_session.token}
