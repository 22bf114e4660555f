"""Unit tests for the DRF exception handler."""

from __future__ import annotations

import pytest
from rest_framework.exceptions import ValidationError

from modules.core.exception_handler import api_exception_handler
from modules.core.exceptions import (
    Conflict,
    DomainError,
    Forbidden,
    InvalidArgument,
    NotAuthenticated,
    NotFound,
)
from modules.orders.exceptions import InsufficientStock

pytestmark = pytest.mark.unit


class TestDomainErrors:
    @pytest.mark.parametrize(
        "exc,status,code",
        [
            (NotAuthenticated(), 401, "not_authenticated"),
            (Forbidden(), 403, "forbidden"),
            (NotFound(), 404, "not_found"),
            (InvalidArgument(), 400, "invalid_argument"),
            (Conflict(), 409, "conflict"),
        ],
    )
    def test_category_maps_to_status(self, exc, status, code):
        response = api_exception_handler(exc, {})
        assert response.status_code == status
        assert response.data["code"] == code
        assert response.data["detail"] == exc.detail

    def test_custom_detail(self):
        response = api_exception_handler(NotFound("Order not found."), {})
        assert response.data == {"detail": "Order not found.", "code": "not_found"}

    def test_insufficient_stock_carries_diagnostics(self):
        exc = InsufficientStock("p-1", requested=5, available=2)
        response = api_exception_handler(exc, {})
        assert response.status_code == 409
        assert response.data["code"] == "insufficient_stock"
        assert "requested 5" in response.data["detail"]
        assert "available 2" in response.data["detail"]

    def test_default_detail(self):
        assert DomainError().detail == DomainError.default_detail


class TestOtherErrors:
    def test_drf_errors_keep_default_rendering(self):
        response = api_exception_handler(ValidationError({"name": ["required"]}), {})
        assert response.status_code == 400
        assert response.data == {"name": ["required"]}

    def test_unexpected_error_is_generic_500(self):
        response = api_exception_handler(RuntimeError("db password=hunter2"), {})
        assert response.status_code == 500
        assert response.data == {
            "detail": "Internal server error.",
            "code": "internal_error",
        }
