"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups the catalog needs and
the guarded stock decrement used by order placement.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional filters."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Product]:
        """Retrieve a product with a row-level lock."""

    @abstractmethod
    def random(
        self, limit: int, filters: Optional[Dict[str, Any]] = None
    ) -> List[Product]:
        """Return up to ``limit`` products in random order."""

    @abstractmethod
    def save(
        self, entity: Product, update_fields: Optional[Iterable[str]] = None
    ) -> Product:
        """Persist a product, optionally writing only ``update_fields``."""

    @abstractmethod
    def get_many(self, ids: Iterable[Any]) -> Dict[Any, Product]:
        """Load several products at once, keyed by primary key.

        Missing ids are simply absent from the result.
        """

    @abstractmethod
    def decrement_stock(self, id: Any, quantity: int) -> bool:
        """Atomically subtract ``quantity`` from the product's stock.

        The write only happens if the current stock is at least
        ``quantity``.  Returns ``False`` when no row was updated (product
        gone or stock already consumed by a concurrent writer).
        """

    @abstractmethod
    def is_referenced(self, id: Any) -> bool:
        """Whether any order item points at the product."""
