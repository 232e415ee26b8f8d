"""
Pytest fixtures for salesops backend tests.

Provides the test database, a test client and small factories for
warehouses, roles, principals, customers and orders.
"""

import itertools
from datetime import datetime, timedelta

import pytest
from salesops import create_app
from salesops.extensions import db
from salesops.models import Customer, Order, OrderItem, Role, User, UserWarehouseAccess, Warehouse


# Fixed clock for recency maths
AS_OF = datetime(2026, 6, 30, 12, 0, 0)


def days_ago(days: float) -> datetime:
    return AS_OF - timedelta(days=days)


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


@pytest.fixture(scope='function')
def roles(db_session):
    """Default roles keyed by name."""
    created = {}
    for name in ("Sales Executive", "Manager", "Admin"):
        role = Role(name=name)
        db_session.add(role)
        created[name] = role
    db_session.commit()
    return created


@pytest.fixture(scope='function')
def make_warehouse(db_session):
    counter = itertools.count(1)

    def _make(name=None, *, city="Delhi", state="Delhi", area=None, managers=()):
        n = next(counter)
        warehouse = Warehouse(
            name=name or f"Warehouse {n}",
            code=f"W{n:02d}",
            city=city,
            state=state,
            area=area,
        )
        warehouse.managers.extend(managers)
        db_session.add(warehouse)
        db_session.commit()
        return warehouse

    return _make


@pytest.fixture(scope='function')
def make_user(db_session, roles):
    counter = itertools.count(1)

    def _make(first_name, last_name="Kumar", *, role="Sales Executive", department="Sales",
              primary_warehouse=None, access=(), is_active=True):
        n = next(counter)
        user = User(
            employee_id=f"EMP{n:04d}",
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}{n}@salesops.local",
            phone=f"98100{n:05d}",
            role_id=roles[role].id,
            department=department,
            position="Executive",
            primary_warehouse_id=primary_warehouse.id if primary_warehouse else None,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.flush()
        for warehouse in access:
            db_session.add(UserWarehouseAccess(user_id=user.id, warehouse_id=warehouse.id))
        db_session.commit()
        return user

    return _make


@pytest.fixture(scope='function')
def make_customer(db_session):
    counter = itertools.count(1)

    def _make(business_name=None, *, warehouse=None, is_active=True, **fields):
        n = next(counter)
        customer = Customer(
            customer_code=f"CUST{n:04d}",
            business_name=business_name or f"Customer {n}",
            contact_person=f"Contact {n}",
            city="Delhi",
            state="Delhi",
            assigned_warehouse_id=warehouse.id if warehouse else None,
            is_active=is_active,
            **fields,
        )
        db_session.add(customer)
        db_session.commit()
        return customer

    return _make


@pytest.fixture(scope='function')
def make_order(db_session):
    """
    Create an order or visit.

    created_by accepts a User, a raw user id (may point at nobody) or None.
    items is a list of dicts passed to OrderItem; totals are taken from
    total/paid rather than recalculated from items.
    """
    counter = itertools.count(1)

    def _make(customer, *, created_by=None, total=100.0, paid=0.0, status="pending",
              delivery_status=None, record_date=None, warehouse=None, kind="order", items=()):
        n = next(counter)
        creator_id = created_by.id if isinstance(created_by, User) else created_by

        order = Order(
            record_kind=kind,
            order_number=f"{'VST' if kind == 'visit' else 'ORD'}{n:06d}",
            customer_id=customer.id,
            warehouse_id=warehouse.id if warehouse else None,
            subtotal=total,
            total_amount=total,
            paid_amount=paid,
            status=status,
            delivery_status=delivery_status,
            record_date=record_date or days_ago(1),
            created_by_user_id=creator_id,
        )
        for item in items:
            order.items.append(OrderItem(**item))
        if kind == "visit":
            order.recalculate_totals()
        db_session.add(order)
        db_session.commit()
        return order

    return _make


@pytest.fixture(scope='session')
def as_of():
    return AS_OF


@pytest.fixture(scope='session')
def ago():
    """days_ago(n): a timestamp n days before AS_OF."""
    return days_ago


@pytest.fixture(scope='session')
def principal_headers():
    """Helper to create the gateway principal header."""
    def _headers(user) -> dict:
        return {'X-Principal-Id': str(user.id)}
    return _headers
