from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from medistore import models  # noqa: F401
from medistore.config import settings
from medistore.database import get_session
from medistore.dependencies.clients import get_object_store, get_payment_gateway
from medistore.exceptions import PaymentGatewayError
from medistore.main import app
from medistore.models.product import Product
from medistore.services.xendit_client import Invoice
from medistore.utils.token import CurrentUser, get_current_user

WEBHOOK_TOKEN = "test-callback-token"


class FakeGateway:
    def __init__(self):
        self.calls = []
        self.error = None
        self.on_create = None

    def create_invoice(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if self.on_create:
            self.on_create(kwargs)
        n = len(self.calls)
        return Invoice(
            id=f"inv_{n}",
            invoice_url=f"https://checkout.xendit.co/web/inv_{n}",
            expiry_date=datetime(2026, 10, 20, 12, 0, 0) + timedelta(minutes=n),
            status="PENDING",
        )

    def fail_with(self, message="Payment gateway unavailable"):
        self.error = PaymentGatewayError(message)


class FakeStore:
    def __init__(self):
        self.uploaded = []

    def upload_image(self, file, folder):
        key = f"{folder}/{file.filename}"
        self.uploaded.append((key, file.file.read()))
        return key

    def public_url(self, key):
        return f"https://cdn.example.com/{key}"


class Identity:
    def __init__(self):
        self.user = CurrentUser(id="user-1", email="buyer@example.com")

    def as_admin(self):
        self.user = CurrentUser(id="admin-1", email="admin@example.com", role="admin")

    def as_user(self, user_id="user-1"):
        self.user = CurrentUser(id=user_id, email=f"{user_id}@example.com")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def identity():
    return Identity()


@pytest.fixture
def client(engine, gateway, store, identity, monkeypatch):
    monkeypatch.setattr(settings, "xendit_webhook_token", WEBHOOK_TOKEN)

    def override_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_current_user] = lambda: identity.user

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_product(session):
    def _make(price=250000, is_active=True, title="Masker Medis", category="alat-kesehatan"):
        product = Product(
            title_id=title,
            title_en=title,
            description_id="Deskripsi",
            description_en="Description",
            category=category,
            price=price,
            is_active=is_active,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product
    return _make


def checkout_body(*lines, **overrides):
    body = {
        "items": [{"product_id": pid, "quantity": qty} for pid, qty in lines],
        "shipping_address": "Jl. Sudirman No. 1, Jakarta",
        "shipping_name": "Budi Santoso",
        "shipping_phone": "081234567890",
    }
    body.update(overrides)
    return body
