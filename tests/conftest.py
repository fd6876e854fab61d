"""Pytest fixtures for the shop backend tests."""

import itertools
import os

# Settings are read once (lru_cache); configure before importing the app.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
for _key in (
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "GOOGLE_SHEETS_ID",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
    "GOOGLE_ORDERS_SHEET",
    "GOOGLE_CONTACTS_SHEET",
    "CLICK_SERVICE_ID",
    "CLICK_AUTH_TOKEN",
    "PAYME_MERCHANT_ID",
    "SEED_SAMPLE_PRODUCTS",
):
    os.environ.pop(_key, None)

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.payment_providers import PaymentGateway
from app.models.contact import Contact  # noqa: F401
from app.models.order import Order, OrderItem  # noqa: F401
from app.models.product import Product
from app.repositories.product_repo import ProductRepository


class FakeDispatcher:
    """Records every notification instead of sending it."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls: list[tuple] = []

    def _record(self, *call):
        self.calls.append(call)
        return self.result

    def send_order_notification(self, order):
        return self._record("order", order)

    def log_order(self, order):
        return self._record("log_order", order)

    def send_contact_notification(self, contact):
        return self._record("contact", contact)

    def log_contact(self, contact):
        return self._record("log_contact", contact)

    def send_order_status_update(self, order, old_status, new_status):
        return self._record("status", order, old_status, new_status)

    def send_low_stock_alert(self, product):
        return self._record("low_stock", product)

    def send_daily_summary(self, summary):
        return self._record("daily_summary", summary)

    def ensure_sheets(self):
        return self.result

    def kinds(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeClick:
    def __init__(self):
        self.invoices: list[tuple] = []

    def create_invoice(self, order_id, amount):
        self.invoices.append((order_id, amount))
        return f"https://my.click.uz/invoice/{order_id}"


@pytest.fixture
def engine():
    """In-memory SQLite shared across sessions of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def failing_dispatcher():
    return FakeDispatcher(result=False)


@pytest.fixture
def fake_click():
    return FakeClick()


@pytest.fixture
def gateway(fake_click):
    return PaymentGateway(
        click=fake_click,
        payme_merchant_id="merchant-42",
        payme_checkout_url="https://checkout.paycom.uz",
    )


@pytest.fixture
def make_product(session):
    """Factory that stores a product and returns it."""

    counter = itertools.count(1)

    def _make(**overrides) -> Product:
        n = next(counter)
        fields = {
            "name": f"Selofan Paket {n}",
            "sku": f"SEL-{n:06d}",
            "description": "Kichik selofan paket",
            "category": "Selofan",
            "size": "20x30 sm",
            "price": 500,
            "quantity": 100,
        }
        fields.update(overrides)
        return ProductRepository().save(session, Product(**fields))

    return _make


@pytest.fixture
def order_payload():
    """Factory for a valid order payload (plain dict, as sent over HTTP)."""

    def _make(items=None, **overrides) -> dict:
        payload = {
            "customer": {"name": "Aziz", "phone": "+998901234567"},
            "delivery": {"address": "Amir Temur 1", "city": "Toshkent"},
            "items": items
            if items is not None
            else [
                {
                    "product_id": "00000000-0000-0000-0000-000000000001",
                    "name": "Selofan Paket Kichik",
                    "size": "20x30 sm",
                    "price": 500,
                    "quantity": 2,
                },
                {
                    "product_id": "00000000-0000-0000-0000-000000000002",
                    "name": "Selofan Paket O'rta",
                    "size": "30x40 sm",
                    "price": 800,
                    "quantity": 1,
                },
            ],
            "payment": {"method": "cash"},
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def client(engine, dispatcher, gateway):
    """TestClient bound to the test engine and fake integrations."""
    from app.database import get_session
    from app.main import app
    from app.services.notification_service import get_notification_dispatcher
    from app.services.payment_service import get_payment_gateway

    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    yield TestClient(app)

    app.dependency_overrides.clear()


def _token(claims: dict) -> str:
    return jwt.encode(claims, "test-secret", algorithm="HS256")


@pytest.fixture
def admin_headers():
    token = _token({"sub": "admin-1", "name": "agent7", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers():
    token = _token({"sub": "user-1", "role": "customer"})
    return {"Authorization": f"Bearer {token}"}
