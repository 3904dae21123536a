"""Pytest configuration and fixtures"""
import os
import uuid

import pytest

# Set test environment variables before any app module reads settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.database import get_session
from app.main import app
from app.models.product import Product
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.services.cart_service import CartService


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def phone(session):
    """Catalog product with a modern `name`"""
    product = Product(
        name="Galaxy Phone",
        thumbnail="https://cdn.example.com/phone.png",
        price=499.0,
        brand="Acme",
        description="A phone",
        rating=4.5,
        discount_percentage=10.0,
        stock=12,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture
def lamp(session):
    """Legacy catalog product that only has a `title`"""
    product = Product(title="Desk Lamp", price=25.0, brand="Lumo", stock=3)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture
def user(session):
    user = User(id=uuid.uuid4(), email="shopper@example.com", role="user")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session):
    admin = User(id=uuid.uuid4(), email="ops@example.com", role="admin")
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


@pytest.fixture
def cart_repo():
    return CartRepository()


@pytest.fixture
def cart_service():
    return CartService(CartRepository(), ProductRepository(), UserRepository())


def _encode_token(subject, email=None, secret="test-secret") -> str:
    claims = {"sub": str(subject)}
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def make_token():
    return _encode_token


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {_encode_token(user.id, user.email)}"}


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {_encode_token(admin.id, admin.email)}"}


@pytest.fixture
def client(session):
    """Test client with every request bound to the test session"""

    def _session_override():
        return session

    app.dependency_overrides[get_session] = _session_override
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
