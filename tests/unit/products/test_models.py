"""Unit tests for the Product model."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from modules.products.models import Product

pytestmark = pytest.mark.unit


class TestProductModel:
    def test_defaults(self):
        product = Product.objects.create(name="Widget", price=Decimal("1.00"))
        assert product.stock == 0
        assert product.active is True
        assert product.id is not None

    def test_clean_rejects_negative_stock(self):
        product = Product(name="Widget", price=Decimal("1.00"), stock=-1)
        with pytest.raises(ValidationError):
            product.clean()

    def test_database_rejects_negative_stock(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.create(name="Widget", price=Decimal("1.00"), stock=-1)

    def test_database_rejects_negative_price(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.create(name="Widget", price=Decimal("-1.00"))

    def test_str_includes_brand(self):
        assert str(Product(name="Drill", brand="Acme", price=1)) == "Drill (Acme)"
        assert str(Product(name="Drill", price=1)) == "Drill"
