"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern for reads: look-ups return
``None`` instead of raising, and the Service Layer decides how to
translate a missing entity.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, ProtectedError

from modules.products.exceptions import ProductInUse
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Concurrent stock decrements
        on the same row wait until the lock holder commits.
        """
        try:
            return Product.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_many(self, ids: Iterable[Any]) -> Dict[Any, Product]:
        try:
            return Product.objects.in_bulk(list(ids))
        except (ValueError, ValidationError):
            return {}

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"active": True}
            {"name__icontains": "widget"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def random(
        self, limit: int, filters: Optional[Dict[str, Any]] = None
    ) -> List[Product]:
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset.order_by("?")[:limit])

    @transaction.atomic
    def save(
        self, entity: Product, update_fields: Optional[Iterable[str]] = None
    ) -> Product:
        """Persist (create or update) a product.

        With ``update_fields`` only those columns are written, so a
        concurrent ``decrement_stock`` is never overwritten by a stale
        in-memory ``stock`` value.
        """
        if update_fields is None:
            entity.save()
        else:
            entity.save(update_fields=list(update_fields))
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        """Delete a product by ID.

        Returns ``False`` if no product exists with the given ID.

        Raises:
            ProductInUse: order items reference the product (FK ``PROTECT``).
        """
        product = self.get_by_id(id)
        if not product:
            return False
        try:
            product.delete()
        except ProtectedError as exc:
            logger.warning("product.delete_protected", product_id=str(id))
            raise ProductInUse(
                f"Product {id} is referenced by existing orders."
            ) from exc
        logger.info("product.deleted", product_id=str(id))
        return True

    def decrement_stock(self, id: Any, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, stock__gte=quantity).update(
            stock=F("stock") - quantity
        )
        return updated == 1

    def is_referenced(self, id: Any) -> bool:
        return Product.objects.filter(id=id, order_items__isnull=False).exists()
