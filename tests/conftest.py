"""
Shared fixtures for the component tests.

Real routes, services and models run against an in-memory SQLite database.
The get_db dependency is overridden so every request uses the test engine,
and authentication uses real tokens from create_token().
"""
import base64
import io
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PAYMENT_GATEWAY", "simulated")
os.environ["FIREBASE_PROJECT_ID"] = ""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config.database import Base, get_db
from common.security import create_token, hash_password
from main import app
from modules.user.models import User
from modules.customer.address_models import Address
from modules.catalog.models import Category, Product, ProductImage
from modules.cart.models import Cart, CartItem


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_png_data_url(colour=(200, 30, 30), fmt="PNG") -> str:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), colour).save(buf, format=fmt)
    mime = fmt.lower()
    return f"data:image/{mime};base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    """TestClient wired to the in-memory database."""
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_data_url():
    return make_png_data_url()


@pytest.fixture
def make_user(db):
    """Factory: persisted password user, optionally with a default address."""
    def _make(email="buyer@example.com", name="Buyer", password="secret123", with_address=True):
        user = User(name=name, email=email, password_hash=hash_password(password))
        db.add(user)
        db.flush()
        if with_address:
            db.add(Address(
                user_id=user.id, first_name=name, last_name="Test", email=email,
                phone="555-0100", address="1 Main Street", city="Springfield",
                postal_code="12345", is_default=True,
            ))
        db.commit()
        db.refresh(user)
        return user
    return _make


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_token(user.id, user.email)}"}


@pytest.fixture
def buyer(make_user):
    return make_user(email="buyer@example.com", name="Buyer")


@pytest.fixture
def seller(make_user):
    return make_user(email="seller@example.com", name="Seller")


@pytest.fixture
def category(db):
    cat = Category(name="Electronics")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def make_product(db, seller, category, png_data_url):
    """Factory: persisted product owned by `seller` with one image."""
    def _make(name="Headphones", price="250.00", owner=None):
        product = Product(
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            category_id=category.id,
            user_id=(owner or seller).id,
        )
        db.add(product)
        db.flush()
        db.add(ProductImage(url=png_data_url, product_id=product.id))
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def fill_cart(db):
    """Factory: put (product, quantity) pairs into a user's cart directly."""
    def _fill(user, *lines):
        cart = db.query(Cart).filter(Cart.user_id == user.id).first()
        if not cart:
            cart = Cart(user_id=user.id)
            db.add(cart)
            db.flush()
        for product, quantity in lines:
            db.add(CartItem(cart_id=cart.id, product_id=product.id, quantity=quantity))
        db.commit()
        return cart
    return _fill
