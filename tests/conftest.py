import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from storefront.database.core import Base, get_db
from storefront.database import models  # noqa: F401
from storefront.main import app
from storefront.auth.service import create_access_token
from storefront.users.models import User
from storefront.products.models import Product
from storefront.cart.models import UserCart
from storefront.payments.client import MercadoPagoClient, get_payment_gateway
from storefront.shipping.client import MelhorEnvioClient, get_shipping_gateway

# Use an in-memory SQLite database for testing
TEST_SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """
    Creates a new, isolated in-memory database session for each test.
    StaticPool keeps the single in-memory connection shared between fixtures and requests.
    """
    engine = create_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def customer(db_session):
    user = User(name="Test Customer", email="customer@example.com", role="customer",
                phone="51999990000", address="Rua A, 100")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def admin_user(db_session):
    user = User(name="Store Admin", email="admin@example.com", role="ADMIN")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def make_product(db_session):
    """Factory for catalog products with sensible defaults."""
    def _make(name="Phone Case", price=50.0, stock=10, **overrides):
        data = {
            "name": name,
            "description": "A sturdy phone case",
            "price": price,
            "stock": stock,
            "category": "cases",
            "color": "black",
            "model": "iPhone 15",
        }
        data.update(overrides)
        product = Product(**data)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make


@pytest.fixture(scope="function")
def fill_cart(db_session):
    """Puts (product, quantity) pairs straight into a user's cart."""
    def _fill(user, *lines):
        cart = UserCart(
            user_id=user.id,
            items=[{"product_id": product.id, "quantity": quantity} for product, quantity in lines]
        )
        db_session.add(cart)
        db_session.commit()
        return cart
    return _fill


@pytest.fixture(scope="function")
def payment_gateway():
    return MagicMock(spec=MercadoPagoClient)


@pytest.fixture(scope="function")
def shipping_gateway():
    return MagicMock(spec=MelhorEnvioClient)


@pytest.fixture(scope="function")
def client(db_session, payment_gateway, shipping_gateway):
    """
    Creates a TestClient for the app, overriding the session and the external service clients.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_shipping_gateway] = lambda: shipping_gateway

    yield TestClient(app)

    app.dependency_overrides.clear()


def bearer(user):
    token = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def auth_headers(customer):
    return bearer(customer)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return bearer(admin_user)
