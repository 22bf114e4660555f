"""Product model with price and stock constraints.

Business rules implemented:
- Price is never negative (DB check constraint + ``clean``).
- Stock is never negative (DB check constraint + ``clean``).  Order
  placement decrements it only through a conditional update, see
  ``ProductDjangoRepository.decrement_stock``.
- A product referenced by an order item cannot be deleted (``PROTECT`` on
  ``OrderItem.product``).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    """Catalog entry.

    ``active`` controls visibility to customers; inactive products keep
    their history but are hidden from the public catalog listing.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(max_length=2000, blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    brand = models.CharField(max_length=120, blank=True, default="")
    category = models.CharField(max_length=120, blank=True, default="")
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(fields=["active"], name="products_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                name=self.name,
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.brand})" if self.brand else self.name
