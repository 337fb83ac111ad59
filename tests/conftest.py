"""
Shared fixtures: fake provider clients and a TestClient wired to them.

The fakes record every call so tests can assert on what reached Stripe and
Mailgun without any network access.
"""

import os
import tempfile
from pathlib import Path

# Keep the service log out of the working tree.
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "infball_service_test.log"))
os.environ.setdefault("STRIPE_SKU", "sku_ticket")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from infball_service.main import app, get_order_handler  # noqa: E402
from infball_service.workflow import OrderHandler  # noqa: E402

TEST_SKU = "sku_ticket"


def run_now(target, *args):
    target(*args)


class FakePaymentClient:
    def __init__(self, stock=10):
        self.stock = stock
        self.sku_error = None
        self.order_error = None
        self.pay_error = None
        self.charge_error = None
        self.calls = []
        self.orders = []
        self.charge_updates = []

    def get_sku(self, sku_id):
        self.calls.append(("get_sku", sku_id))
        if self.sku_error:
            raise self.sku_error
        return {"id": sku_id, "inventory": {"type": "finite", "quantity": self.stock}}

    def create_order(self, sku_id, email, metadata, currency="gbp"):
        self.calls.append(("create_order", sku_id))
        if self.order_error:
            raise self.order_error
        order = {
            "id": f"or_{len(self.orders) + 1}",
            "currency": currency,
            "email": email,
            "items": [{"type": "sku", "parent": sku_id, "quantity": 1}],
            "metadata": dict(metadata),
            "status": "created",
        }
        self.orders.append(order)
        return order

    def pay_order(self, order_id, source):
        self.calls.append(("pay_order", order_id, source))
        if self.pay_error:
            raise self.pay_error
        order = next(o for o in self.orders if o["id"] == order_id)
        order["status"] = "paid"
        order["charge"] = f"ch_{order_id}"
        return order

    def update_charge(self, charge_id, description):
        self.calls.append(("update_charge", charge_id))
        if self.charge_error:
            raise self.charge_error
        self.charge_updates.append((charge_id, description))
        return {"id": charge_id, "description": description}


class FakeEmailClient:
    def __init__(self):
        self.error = None
        self.sent = []

    def send_ticket_email(self, name, email, order_id, auth_token):
        if self.error:
            raise self.error
        self.sent.append({"name": name, "email": email, "order_id": order_id, "auth_token": auth_token})
        return {"id": "<1@comp-soc.com>", "message": "Queued. Thank you."}


@pytest.fixture
def payment():
    return FakePaymentClient()


@pytest.fixture
def mailer():
    return FakeEmailClient()


@pytest.fixture
def handler(payment, mailer):
    return OrderHandler(payment, mailer, TEST_SKU, run_in_background=run_now)


@pytest.fixture
def client(handler):
    app.dependency_overrides[get_order_handler] = lambda: handler
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def form():
    return {
        "token": "tok_visa",
        "fullName": "Ada Lovelace",
        "uun": "s1234567",
        "email": "ada@example.com",
        "over18": True,
        "starter": "soup",
        "main": "beef",
        "dessert": "brownie",
        "specialReqs": "No nuts please.",
    }
