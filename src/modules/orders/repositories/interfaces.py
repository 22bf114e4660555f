"""Order repository interface.

Extends ``IRepository[Order]`` with the methods required by the Order
aggregate: atomic creation with items, status overwrite under a row lock,
criteria queries and sales aggregates.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order, OrderItem
    from modules.orders.specifications import OrderCriterion


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Mutations must
    be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``user_id``, the delivery fields, ``total``
        and ``items`` (list of dicts with ``product_id``, ``quantity``,
        ``unit_price``, ``subtotal``).
        """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with its owner and items eagerly loaded."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional ORM look-ups."""

    @abstractmethod
    def query(self, criteria: Iterable[OrderCriterion]) -> QuerySet:
        """Return a lazy, newest-first queryset matching every criterion."""

    @abstractmethod
    def update_status(self, order: Order, status: str) -> Order:
        """Overwrite the status of an order already locked by ``get_for_update``.

        Only the ``status`` column is written.
        """

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock."""

    @abstractmethod
    def items_for(self, order_id: Any) -> List[OrderItem]:
        """Return the line items of an order."""

    @abstractmethod
    def best_sellers(self, limit: int) -> List[Dict[str, Any]]:
        """Products ordered by total units sold, descending."""

    @abstractmethod
    def top_customers(self, limit: int) -> List[Dict[str, Any]]:
        """Users ordered by number of orders placed, descending."""
