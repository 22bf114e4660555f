"""Integration tests for the order placement endpoint.

Covers:
- Success 201: order, items and totals; stock decremented.
- Validation 400: empty cart, zero quantity, blank address, duplicate lines.
- Business 400/404/409: inactive product, unknown product, insufficient stock.
- Authentication 401: anonymous caller.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


def _payload(*lines, **overrides):
    payload = {
        "address": "Main Street",
        "number": "42",
        "floor": "3",
        "postal_code": "01310-100",
        "items": [
            {"product_id": str(product.id), "quantity": quantity}
            for product, quantity in lines
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def widget(make_product):
    return make_product(name="Widget", price="9.99", stock=10)


@pytest.fixture()
def gadget(make_product):
    return make_product(name="Gadget", price="25.00", stock=2)


class TestPlaceOrderSuccess:
    def test_returns_201_with_order_body(self, auth_client, client_user, widget):
        response = auth_client.post(URL, _payload((widget, 3)), format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == OrderStatus.PENDING
        assert data["user_id"] == client_user.id
        assert data["username"] == "alice"
        assert data["address"] == "Main Street"
        assert data["postal_code"] == "01310-100"
        assert Decimal(data["total"]) == Decimal("29.97")
        assert len(data["items"]) == 1
        item = data["items"][0]
        assert item["product_name"] == "Widget"
        assert item["quantity"] == 3
        assert Decimal(item["unit_price"]) == Decimal("9.99")
        assert Decimal(item["subtotal"]) == Decimal("29.97")

    def test_decrements_stock(self, auth_client, widget, gadget):
        auth_client.post(URL, _payload((widget, 3), (gadget, 2)), format="json")

        widget.refresh_from_db()
        gadget.refresh_from_db()
        assert widget.stock == 7
        assert gadget.stock == 0

    def test_total_sums_all_lines(self, auth_client, widget, gadget):
        response = auth_client.post(
            URL, _payload((widget, 1), (gadget, 2)), format="json"
        )
        assert Decimal(response.json()["total"]) == Decimal("59.99")

    def test_optional_address_fields_may_be_omitted(self, auth_client, widget):
        payload = _payload((widget, 1))
        del payload["floor"]
        del payload["postal_code"]

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 201
        assert response.json()["floor"] == ""

    def test_price_is_captured_at_purchase(self, auth_client, widget):
        response = auth_client.post(URL, _payload((widget, 1)), format="json")
        widget.price = Decimal("99.00")
        widget.save()

        order_id = response.json()["id"]
        data = auth_client.get(f"{URL}{order_id}/").json()
        assert Decimal(data["items"][0]["unit_price"]) == Decimal("9.99")


class TestPlaceOrderValidation:
    def test_empty_cart_returns_400(self, auth_client):
        response = auth_client.post(URL, _payload(), format="json")
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_argument"

    def test_zero_quantity_returns_400(self, auth_client, widget):
        response = auth_client.post(URL, _payload((widget, 0)), format="json")
        assert response.status_code == 400
        assert Order.objects.count() == 0

    def test_blank_address_returns_400(self, auth_client, widget):
        response = auth_client.post(
            URL, _payload((widget, 1), address="   "), format="json"
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_argument"

    def test_duplicate_product_lines_return_400(self, auth_client, widget):
        response = auth_client.post(
            URL, _payload((widget, 1), (widget, 2)), format="json"
        )
        assert response.status_code == 400
        widget.refresh_from_db()
        assert widget.stock == 10

    def test_malformed_product_id_returns_400(self, auth_client):
        payload = _payload()
        payload["items"] = [{"product_id": "not-a-uuid", "quantity": 1}]
        response = auth_client.post(URL, payload, format="json")
        assert response.status_code == 400


class TestPlaceOrderBusinessErrors:
    def test_unknown_product_returns_404(self, auth_client):
        payload = _payload()
        payload["items"] = [{"product_id": str(uuid4()), "quantity": 1}]

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        assert Order.objects.count() == 0

    def test_inactive_product_returns_400(self, auth_client, make_product):
        retired = make_product(name="Retired", stock=4, active=False)

        response = auth_client.post(URL, _payload((retired, 1)), format="json")

        assert response.status_code == 400
        assert response.json()["code"] == "product_inactive"
        retired.refresh_from_db()
        assert retired.stock == 4
        assert Order.objects.count() == 0

    def test_insufficient_stock_returns_409(self, auth_client, gadget):
        response = auth_client.post(URL, _payload((gadget, 3)), format="json")

        assert response.status_code == 409
        assert response.json()["code"] == "insufficient_stock"
        gadget.refresh_from_db()
        assert gadget.stock == 2
        assert Order.objects.count() == 0

    def test_exact_stock_succeeds(self, auth_client, gadget):
        response = auth_client.post(URL, _payload((gadget, 2)), format="json")
        assert response.status_code == 201


class TestPlaceOrderAuthentication:
    def test_anonymous_returns_401(self, api_client, widget):
        response = api_client.post(URL, _payload((widget, 1)), format="json")
        assert response.status_code == 401
        widget.refresh_from_db()
        assert widget.stock == 10
