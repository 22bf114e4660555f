"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
belongs to a category of ``modules.core.exceptions``; the API exception
handler renders it with that category's status and code.
"""

from __future__ import annotations

from typing import Any

from modules.core.exceptions import Conflict, DomainError, InvalidArgument, NotFound


class OrderNotFound(NotFound):
    """The order does not exist, or is not visible to the caller.

    Both cases use the same message so callers cannot discover other
    users' orders.
    """

    default_detail = "Order not found."


class InsufficientStock(DomainError):
    """A cart line asks for more units than the product has in stock."""

    status_code = 409
    code = "insufficient_stock"

    def __init__(self, product_id: Any, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}."
        )


class StockConflict(Conflict):
    """A concurrent order consumed the stock between validation and write."""

    code = "stock_conflict"

    def __init__(self, product_id: Any) -> None:
        self.product_id = product_id
        super().__init__(
            f"Stock for product {product_id} changed concurrently; retry the order."
        )


class InvalidStatus(InvalidArgument):
    """The status literal is not one of the known order statuses."""

    code = "invalid_status"


class InvalidTransition(InvalidArgument):
    """The requested status is not reachable from the current one."""

    code = "invalid_transition"
