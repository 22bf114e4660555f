"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class PlaceOrderItemSerializer(serializers.Serializer):
    """Validates a single cart line."""

    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class PlaceOrderSerializer(serializers.Serializer):
    """Validates the order placement payload."""

    address = serializers.CharField(max_length=255)
    number = serializers.CharField(max_length=20)
    floor = serializers.CharField(
        max_length=20, required=False, default="", allow_blank=True
    )
    postal_code = serializers.CharField(
        max_length=20, required=False, default="", allow_blank=True
    )
    items = PlaceOrderItemSerializer(many=True, allow_empty=False)


class UpdateStatusSerializer(serializers.Serializer):
    """Status literal for ``PATCH orders/{id}/status/``.

    The literal is checked by the service so unknown values yield the
    ``invalid_status`` error code.
    """

    status = serializers.CharField()


class MyOrdersQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)
    page = serializers.IntegerField(required=False, default=0, min_value=0)
    size = serializers.IntegerField(required=False, min_value=1)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with the product name."""

    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items."""

    items = OrderItemSerializer(many=True, read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    status = serializers.ChoiceField(choices=OrderStatus.choices, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "username",
            "address",
            "number",
            "floor",
            "postal_code",
            "status",
            "total",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested items)."""

    username = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "username",
            "status",
            "total",
            "created_at",
        ]
        read_only_fields = fields

