import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from backend import database
from backend.main import app
from backend.seed import seed_catalog
from backend.users import get_user_store


@pytest.fixture
def engine():
    engine = database.configure("sqlite://")
    database.init_db()
    yield engine
    engine.dispose()


@pytest.fixture
def seeded(engine):
    seed_catalog()
    return engine


@pytest.fixture
def client(seeded):
    get_user_store().reset()
    with TestClient(app) as c:
        yield c


def address(**overrides):
    data = {
        "salutation": "mr",
        "firstName": "Max",
        "lastName": "Mustermann",
        "street": "Magdeburger Str.",
        "houseNumber": "50",
        "additionalAddress": "Haus 2",
        "postcode": "14770",
        "city": "Brandenburg an der Havel",
        "phoneNumber": "+4933813550",
    }
    data.update(overrides)
    return data


def order_payload(items=None, **overrides):
    items = items if items is not None else [
        {
            "id": 1,
            "quantity": 2,
            "variant": {
                "size": 30,
                "price": 38.95,
                "original_price": 62.50,
                "discount_amount": 23.55,
                "discount_percentage": 38,
            },
        }
    ]
    data = {
        "email": "test@test.com",
        "paymentMethod": 1,
        "order": {"total": 77.90, "subtotal": 77.90, "shippingCost": 0, "items": items},
        "invoiceAddress": address(),
        "shippingAddress": address(firstName="Erika", street="Hauptstr.", houseNumber="1"),
    }
    data.update(overrides)
    return data
