import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.app.config import TestConfig
from storefront.app.extensions import backend
from storefront.app.factory import create_app
from storefront.app.models import Address, CartReference, Product


PRODUCTS = [
    Product(id="a", name="iPhone XR", category="Phones", cost=10, rating=4, image_url="https://i.imgur.com/lulqWzW.jpg"),
    Product(id="b", name="Basketball", category="Sports", cost=20, rating=5, image_url="https://i.imgur.com/lulqWzW.jpg"),
]


@pytest.fixture()
def products():
    return list(PRODUCTS)


@pytest.fixture()
def api(monkeypatch):
    """Replace every backend call with a MagicMock; tests tweak return values."""
    mocks = {
        "list_products": MagicMock(return_value=list(PRODUCTS)),
        "search_products": MagicMock(return_value=[]),
        "login": MagicMock(return_value={"success": True, "token": "tok-123", "username": "crio.do", "balance": 5000}),
        "register": MagicMock(return_value={"success": True}),
        "get_cart": MagicMock(return_value=[]),
        "update_cart": MagicMock(return_value=[]),
        "checkout": MagicMock(return_value={"success": True}),
        "list_addresses": MagicMock(return_value=[Address(id="addr1", address="221B Baker Street")]),
        "add_address": MagicMock(return_value=[]),
        "delete_address": MagicMock(return_value=[]),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(backend, name, mock)
    return MagicMock(**mocks)


@pytest.fixture()
def app(api):
    app = create_app(TestConfig)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def logged_in(client):
    with client.session_transaction() as sess:
        sess["token"] = "tok-123"
        sess["username"] = "crio.do"
        sess["balance"] = 5000
    return client


def refs(*pairs):
    return [CartReference(product_id=pid, qty=qty) for pid, qty in pairs]
