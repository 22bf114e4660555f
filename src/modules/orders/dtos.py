"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: a single cart line.
- ``PlaceOrderDTO``: delivery info plus cart lines.
- ``OrderQueryDTO``: parsed filter and page parameters for order listings.
- ``ProductSalesDTO`` / ``CustomerOrdersDTO``: sales statistics rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import InvalidStatus

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class PlaceOrderItemDTO(BaseModel):
    """Immutable DTO for a single cart line.

    The client sends ``product_id`` and ``quantity``.  The unit price is
    resolved by the Service Layer from the catalog.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order placement requests.

    Validates:
    - ``items`` must contain at least one line.
    - ``address`` and ``number`` are not blank.
    - No product appears twice.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    number: str
    floor: str = ""
    postal_code: str = ""
    items: List[PlaceOrderItemDTO]

    @field_validator("address", "number")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Must not be blank.")
        return v.strip()

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[PlaceOrderItemDTO]
    ) -> List[PlaceOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def no_duplicate_products(self):
        """Prevent duplicate product IDs in the same order."""
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self


class OrderQueryDTO(BaseModel):
    """Immutable DTO for order listing parameters.

    ``page`` is zero-based.  ``size`` is capped at ``settings.MAX_PAGE_SIZE``
    and falls back to ``settings.DEFAULT_PAGE_SIZE`` when omitted.
    Status literals are case-sensitive.
    """

    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    status: Optional[OrderStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = 0
    size: Optional[int] = None

    @field_validator("status", mode="before")
    @classmethod
    def status_must_be_known(cls, v):
        if v is None or v == "":
            return None
        if v not in OrderStatus.values:
            raise InvalidStatus(f"Unknown order status '{v}'.")
        return OrderStatus(v)

    @field_validator("username", mode="before")
    @classmethod
    def blank_username_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v):
        if v == "":
            return None
        return v

    @field_validator("page")
    @classmethod
    def page_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Page index must be zero or greater.")
        return v

    @field_validator("size")
    @classmethod
    def size_must_be_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return None
        if v <= 0:
            raise ValueError("Page size must be greater than zero.")
        return min(v, settings.MAX_PAGE_SIZE)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ProductSalesDTO(BaseModel):
    """Units sold for one product."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    name: str
    units_sold: int


class CustomerOrdersDTO(BaseModel):
    """Number of orders placed by one user."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    order_count: int


class SalesStatsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    best_sellers: List[ProductSalesDTO]
    top_customers: List[CustomerOrdersDTO]
