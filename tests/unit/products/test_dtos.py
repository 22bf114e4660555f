"""Unit tests for product DTOs."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.products.dtos import CreateProductDTO, UpdateProductDTO

pytestmark = pytest.mark.unit


class TestCreateProductDTO:
    def test_valid(self):
        dto = CreateProductDTO(name="  Widget ", price=Decimal("1.50"))
        assert dto.name == "Widget"
        assert dto.stock == 0
        assert dto.active is True

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match="Name must not be empty"):
            CreateProductDTO(name="  ", price=Decimal("1.00"))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError, match="Price cannot be negative"):
            CreateProductDTO(name="Widget", price=Decimal("-0.01"))

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="Stock cannot be negative"):
            CreateProductDTO(name="Widget", price=Decimal("1.00"), stock=-1)


class TestUpdateProductDTO:
    def test_all_fields_optional(self):
        dto = UpdateProductDTO()
        assert dto.model_dump(exclude_none=True) == {}

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            UpdateProductDTO(stock=-5)
