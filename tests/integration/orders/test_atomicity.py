"""Integration test for order atomicity on partial stock failures.

Ensures stock reservation is all-or-nothing when any item lacks stock.
"""

from __future__ import annotations

import pytest

from modules.orders.models import Order, OrderItem

pytestmark = pytest.mark.integration


def test_mixed_cart_rolls_back_every_line(auth_client, make_product):
    plenty = make_product(name="Plenty", stock=10)
    scarce = make_product(name="Scarce", stock=1)
    payload = {
        "address": "Main Street",
        "number": "7",
        "items": [
            {"product_id": str(plenty.id), "quantity": 4},
            {"product_id": str(scarce.id), "quantity": 2},
        ],
    }

    response = auth_client.post("/api/v1/orders/", payload, format="json")

    assert response.status_code == 409
    assert response.json()["code"] == "insufficient_stock"
    plenty.refresh_from_db()
    scarce.refresh_from_db()
    assert plenty.stock == 10
    assert scarce.stock == 1
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0


def test_failed_order_does_not_block_next_one(auth_client, make_product):
    product = make_product(stock=3)
    payload = {
        "address": "Main Street",
        "number": "7",
        "items": [{"product_id": str(product.id), "quantity": 5}],
    }
    assert auth_client.post("/api/v1/orders/", payload, format="json").status_code == 409

    payload["items"][0]["quantity"] = 3
    response = auth_client.post("/api/v1/orders/", payload, format="json")

    assert response.status_code == 201
    product.refresh_from_db()
    assert product.stock == 0
