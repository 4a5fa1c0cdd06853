"""
Pytest configuration and shared fixtures.

The settings are read at import time, so the environment is prepared
before anything from `storefront` is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["AUTH_JWT_ALG"] = "HS256"

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from storefront.database import engine, get_session
from storefront.main import app
from storefront.models.product import Product, Variation
from storefront.models.user import User


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def session():
    """Fresh in-memory schema per test."""
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(session):
    """TestClient whose requests share the test's session."""

    def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Auth
# ============================================================================


def make_token(user_id: uuid.UUID, email: str) -> str:
    claims = {
        "sub": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def _add_user(session: Session, email: str, role: str = "user", tier: str = "BRONZE") -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        name=email.split("@")[0],
        role=role,
        tier=tier,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    """SILVER member (5% off)."""
    return _add_user(session, "silver@example.com", tier="SILVER")


@pytest.fixture
def other_customer(session):
    return _add_user(session, "other@example.com")


@pytest.fixture
def admin(session):
    return _add_user(session, "admin@example.com", role="admin")


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}

    return _headers


# ============================================================================
# Catalog
# ============================================================================


@pytest.fixture
def catalog(session):
    """
    Two variations priced 100 and 50 on an active product, plus one on an
    inactive product.
    """
    shirt = Product(name="Linen Shirt", slug="linen-shirt", category="tops")
    retired = Product(name="Old Scarf", slug="old-scarf", is_active=False)
    session.add(shirt)
    session.add(retired)
    session.commit()

    a = Variation(product_id=shirt.id, name="Large / Blue", sku="LS-L-BL", price=100.0, quantity=5)
    b = Variation(product_id=shirt.id, name="Small / White", sku="LS-S-WH", price=50.0, quantity=3)
    gone = Variation(product_id=retired.id, name="One size", sku="OS-1", price=20.0, quantity=10)
    for v in (a, b, gone):
        session.add(v)
    session.commit()
    for obj in (shirt, retired, a, b, gone):
        session.refresh(obj)

    return SimpleNamespace(product=shirt, retired=retired, a=a, b=b, inactive=gone)
