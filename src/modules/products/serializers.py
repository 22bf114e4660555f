"""Product DRF serializers for API output.

Writes go through Pydantic DTOs from ``dtos.py``; this serializer only
renders products.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "brand",
            "category",
            "active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
