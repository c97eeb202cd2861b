"""
Pytest configuration and fixtures for backend tests.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scaffold_api.main import create_app
from scaffold_api.models import Base
from scaffold_api.routers import controller_factory, resource_router
from scaffold_api.services.crud import LocalUploadSink, SqlResourceRepository
from scaffold_shared.infrastructure.db import get_db
from tests.resources import (
    CATEGORIES,
    CATEGORY_CONFIG,
    CUSTOMER_CONFIG,
    CUSTOMERS,
    PRODUCT_CONFIG,
    PRODUCTS,
    Category,
    Customer,
    Invoice,
    Order,
    Product,
)


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

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


@pytest.fixture
def upload_sink(tmp_path):
    """Upload sink writing under the test's temporary directory."""
    return LocalUploadSink(tmp_path / "uploads")


@pytest.fixture
def customers_repo(db_session, upload_sink):
    return SqlResourceRepository(CUSTOMERS, db_session, uploads=upload_sink)


@pytest.fixture
def categories_repo(db_session):
    return SqlResourceRepository(CATEGORIES, db_session)


@pytest.fixture
def products_repo(db_session):
    return SqlResourceRepository(PRODUCTS, db_session)


@pytest.fixture
def client(db_session, upload_sink):
    """
    Create a test client with database session override.
    """
    app = create_app(
        resource_router(
            CUSTOMERS,
            controller_factory(CUSTOMERS, CUSTOMER_CONFIG, uploads=upload_sink),
            prefix="/api/customers",
        ),
        resource_router(
            CATEGORIES,
            controller_factory(CATEGORIES, CATEGORY_CONFIG),
            prefix="/api/categories",
        ),
        resource_router(
            PRODUCTS,
            controller_factory(PRODUCTS, PRODUCT_CONFIG),
            prefix="/api/products",
        ),
        create_tables=False,
    )

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def seed_customers(db_session):
    """Three customers with ids 1, 2 and 3."""
    customers = [
        Customer(id=1, name="Ada Lovelace", email="ada@example.com"),
        Customer(id=2, name="Alan Turing", email="alan@example.com"),
        Customer(id=3, name="Grace Hopper", email="grace@example.com"),
    ]
    db_session.add_all(customers)
    db_session.commit()
    return customers


@pytest.fixture
def seed_order(db_session, seed_customers):
    """One live order of customer 1."""
    order = Order(id=1, customer_id=1, reference="ORD-1")
    db_session.add(order)
    db_session.commit()
    return order


@pytest.fixture
def seed_invoice(db_session, seed_customers):
    """One invoice of customer 1."""
    invoice = Invoice(id=1, customer_id=1, total_cents=1500)
    db_session.add(invoice)
    db_session.commit()
    return invoice


@pytest.fixture
def seed_category(db_session):
    category = Category(id=1, name="Drinks")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def seed_products(db_session, seed_category):
    """Three products of category 1, the second one featured."""
    products = [
        Product(id=1, name="Water", category_id=1, price_cents=100),
        Product(id=2, name="Soda", category_id=1, price_cents=250, featured=True),
        Product(id=3, name="Juice", category_id=1, price_cents=300),
    ]
    db_session.add_all(products)
    db_session.commit()
    return products
