"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The API exception handler renders them using the status and code of
their category.
"""

from __future__ import annotations

from typing import Any

from modules.core.exceptions import Conflict, InvalidArgument, NotFound


class ProductNotFound(NotFound):
    """The requested product does not exist."""

    default_detail = "Product not found."

    def __init__(self, product_id: Any = None) -> None:
        self.product_id = product_id
        detail = f"Product {product_id} not found." if product_id else None
        super().__init__(detail)


class ProductInUse(Conflict):
    """The product is referenced by existing order items and cannot be deleted."""

    code = "product_in_use"
    default_detail = "Product is referenced by existing orders."


class InactiveProduct(InvalidArgument):
    """The product is withdrawn from sale and cannot be ordered."""

    code = "product_inactive"
    default_detail = "Product is not available for sale."

    def __init__(self, product_id: Any = None) -> None:
        self.product_id = product_id
        detail = f"Product {product_id} is not available for sale." if product_id else None
        super().__init__(detail)
