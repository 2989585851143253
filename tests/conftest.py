import os
from datetime import datetime, timezone

# Settings are read at import time; provide test values before importing cafe.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STAFF_USERNAME", "KlaseCo")
os.environ.setdefault("STAFF_PASSWORD", "brew-test-pass")
os.environ.setdefault("STAFF_JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from cafe.core.auth import create_staff_token
from cafe.core.cart_session import get_cart_registry
from cafe.core.storage import MemoryStorage
from cafe.database import get_session, get_session_factory
from cafe.main import app
from cafe.models.menu import Addon, Category, MenuItem
from cafe.models.order import Order
from cafe.services.cart_service import CartRegistry
from helpers import line_payload


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="cart_storages")
def cart_storages_fixture() -> dict[str, MemoryStorage]:
    """Cart storage per cart session id, inspectable from tests."""
    return {}


@pytest.fixture(name="client")
def client_fixture(engine, session, cart_storages):
    def get_session_override():
        return session

    registry = CartRegistry(
        lambda session_id: cart_storages.setdefault(session_id, MemoryStorage())
    )

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_session_factory] = lambda: (lambda: Session(engine))
    app.dependency_overrides[get_cart_registry] = lambda: registry

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="staff_headers")
def staff_headers_fixture() -> dict[str, str]:
    token, _ = create_staff_token()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="menu")
def menu_fixture(session) -> dict:
    """
    Small catalog:
      - Coffee: Cafe Latte (70), Mocha (70, unavailable), Biscoff Latte (80)
      - Fruit Sodas: Lychee (60)
      - add-ons: Nata (10), Espresso Shot (20)
    """
    coffee = Category(name="Coffee", slug="coffee")
    sodas = Category(name="Fruit Sodas", slug="fruit-sodas")
    session.add_all([coffee, sodas])
    session.commit()

    latte = MenuItem(category_id=coffee.id, name="Cafe Latte", base_price=70)
    mocha = MenuItem(category_id=coffee.id, name="Mocha", base_price=70, is_available=False)
    biscoff = MenuItem(category_id=coffee.id, name="Biscoff Latte", base_price=80)
    lychee = MenuItem(category_id=sodas.id, name="Lychee", base_price=60)
    nata = Addon(name="Nata", price=10)
    espresso = Addon(name="Espresso Shot", price=20)
    session.add_all([latte, mocha, biscoff, lychee, nata, espresso])
    session.commit()

    for row in (coffee, sodas, latte, mocha, biscoff, lychee, nata, espresso):
        session.refresh(row)

    return {
        "coffee": coffee,
        "sodas": sodas,
        "latte": latte,
        "mocha": mocha,
        "biscoff": biscoff,
        "lychee": lychee,
        "nata": nata,
        "espresso": espresso,
    }


@pytest.fixture(name="place_order")
def place_order_fixture(client, menu):
    """Add a latte with Nata to the cart and check out. Returns the order id."""

    def _place(customer_name: str = "Ana", quantity: int = 1) -> str:
        res = client.post(
            "/api/v1/cart/items",
            json=line_payload(menu["latte"], quantity=quantity, addons=[menu["nata"]]),
        )
        assert res.status_code == 201
        res = client.post(
            "/api/v1/orders/checkout",
            json={
                "customer_name": customer_name,
                "customer_phone": "09171234567",
                "order_type": "dine-in",
                "payment_method": "cash",
            },
        )
        assert res.status_code == 201, res.text
        return res.json()["order_id"]

    return _place


@pytest.fixture(name="make_order")
def make_order_fixture(session):
    """Insert an order row directly (no items)."""

    def _make(
        status: str = "pending",
        total_amount: float = 100.0,
        created_at: datetime | None = None,
        customer_name: str = "Walk-in",
    ) -> Order:
        order = Order(
            customer_name=customer_name,
            customer_phone="09170000000",
            order_type="takeout",
            payment_method="gcash",
            status=status,
            total_amount=total_amount,
            created_at=created_at or datetime.now(timezone.utc),
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make
