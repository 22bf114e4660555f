"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` so the
Order aggregate (Order + OrderItems) is persisted atomically.

Concurrent status writes on the same order are serialized with
``select_for_update()``; the last write wins.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, QuerySet, Sum

from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.specifications import OrderCriterion, combine

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` keys:
        - ``user_id``, ``address``, ``number`` (required)
        - ``floor``, ``postal_code`` (optional)
        - ``total`` (required, already derived from the items)
        - ``items`` (required): list of dicts with ``product_id``,
          ``quantity``, ``unit_price``, ``subtotal``
        """
        order = Order(
            user_id=data["user_id"],
            address=data["address"],
            number=data["number"],
            floor=data.get("floor", ""),
            postal_code=data.get("postal_code", ""),
            total=data["total"],
        )
        order.save()

        items = data.get("items", [])
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=item_data["product_id"],
                    quantity=item_data["quantity"],
                    unit_price=item_data["unit_price"],
                    subtotal=item_data["subtotal"],
                )
                for item_data in items
            ]
        )

        log = logger.bind(order_id=str(order.id), item_count=len(items))
        log.info("order.persisted")
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for the user FK and ``prefetch_related``
        for items and their products, preventing N+1 queries.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("user")
                .prefetch_related("items__product")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Returns ``None`` for
        non-existent or invalid IDs.
        """
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters and eager-loaded relations.

        Examples of valid filters::

            {"status": "PENDING"}
            {"user_id": 3}
        """
        queryset = Order.objects.select_related("user").prefetch_related(
            "items__product"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def query(self, criteria: Iterable[OrderCriterion]) -> QuerySet:
        return (
            Order.objects.select_related("user")
            .prefetch_related("items__product")
            .filter(combine(criteria))
            .order_by("-created_at", "-id")
        )

    def items_for(self, order_id: Any) -> List[OrderItem]:
        return list(
            OrderItem.objects.select_related("product")
            .filter(order_id=order_id)
            .order_by("created_at", "id")
        )

    # ------------------------------------------------------------------
    # Save / Update / Delete
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    @transaction.atomic
    def update_status(self, order: Order, status: str) -> Order:
        order.status = status
        order.save(update_fields=["status"])
        return order

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        """Delete an order and, through the CASCADE, its items."""
        order = self.get_for_update(id)
        if not order:
            return False
        order.delete()
        logger.info("order.deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def best_sellers(self, limit: int) -> List[Dict[str, Any]]:
        rows = (
            OrderItem.objects.values("product_id", "product__name")
            .annotate(units_sold=Sum("quantity"))
            .order_by("-units_sold", "product__name")[:limit]
        )
        return [
            {
                "product_id": row["product_id"],
                "name": row["product__name"],
                "units_sold": row["units_sold"],
            }
            for row in rows
        ]

    def top_customers(self, limit: int) -> List[Dict[str, Any]]:
        rows = (
            Order.objects.values("user_id", "user__username")
            .annotate(order_count=Count("id"))
            .order_by("-order_count", "user__username")[:limit]
        )
        return [
            {
                "user_id": row["user_id"],
                "username": row["user__username"],
                "order_count": row["order_count"],
            }
            for row in rows
        ]
