from decimal import Decimal
from typing import Generator
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pizzeria import auth, config, crud, models, schemas
from pizzeria.db import enable_sqlite_foreign_keys, init_db
from pizzeria.main import app, get_db


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    init_db(engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(db_session):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_config():
    # Tests may toggle strict transitions or pricing; restore afterwards
    saved = config.state
    yield
    config.state = saved


@pytest.fixture(scope="function")
def menu(db_session):
    """A small catalog with predictable ids and prices."""
    rows = {
        "bases": [
            models.PizzaBase(id=1, name="Thin Crust", price=Decimal("0.00"), stock=50, threshold=20),
            models.PizzaBase(id=2, name="Cheese Stuffed", price=Decimal("4.00"), stock=30, threshold=15),
        ],
        "sauces": [
            models.Sauce(id=1, name="Marinara", price=Decimal("0.00"), stock=60, threshold=25),
            models.Sauce(id=2, name="Pesto", price=Decimal("2.00"), stock=25, threshold=15),
        ],
        "cheeses": [
            models.Cheese(id=1, name="Mozzarella", price=Decimal("0.00"), stock=80, threshold=30),
            models.Cheese(id=2, name="Parmesan", price=Decimal("2.00"), stock=35, threshold=20),
        ],
        "toppings": [
            models.Topping(id=1, name="Mushrooms", price=Decimal("1.00"), category="vegetables", stock=40, threshold=20),
            models.Topping(id=2, name="Pepperoni", price=Decimal("2.00"), category="meats", stock=60, threshold=25),
            models.Topping(id=3, name="Grilled Chicken", price=Decimal("3.00"), category="meats", stock=25, threshold=15),
        ],
        "varieties": [
            models.PizzaVariety(id=1, name="Classic Margherita", base_price=Decimal("12.99")),
            models.PizzaVariety(id=2, name="Pepperoni Supreme", base_price=Decimal("15.99")),
        ],
    }
    for group in rows.values():
        db_session.add_all(group)
    db_session.commit()
    return rows


def _headers(user_id: str, **claims) -> dict:
    token = auth.create_access_token(user_id, claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers():
    return _headers("customer-1", email="customer1@example.com", first_name="Casey")


@pytest.fixture
def other_customer_headers():
    return _headers("customer-2", email="customer2@example.com")


@pytest.fixture
def admin_headers(db_session):
    # The admin flag lives only in the local mirror
    crud.upsert_user(db_session, schemas.UserUpsert(id="admin-1", email="admin@example.com", is_admin=True))
    return _headers("admin-1", email="admin@example.com")


@pytest.fixture
def customer(db_session):
    return crud.upsert_user(db_session, schemas.UserUpsert(id="customer-1", email="customer1@example.com"))


def custom_item(**overrides) -> dict:
    item = {
        "isCustom": True,
        "pizzaBaseId": 1,
        "sauceId": 1,
        "cheeseId": 1,
        "toppings": [1, 2],
        "quantity": 1,
        "itemPrice": "15.00",
    }
    item.update(overrides)
    return item


def order_payload(*items, address="221B Baker Street, London", total="19.74") -> dict:
    return {
        "deliveryAddress": address,
        "items": list(items) or [custom_item()],
        "totalAmount": total,
    }
