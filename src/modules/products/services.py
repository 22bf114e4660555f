"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Rules enforced here:
- Catalog writes require the administrative role.
- Inactive products are visible to administrators only.
- A product referenced by any order item cannot be deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.accounts.access import require_admin
from modules.products.exceptions import ProductInUse, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.accounts.access import Principal
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

RANDOM_SAMPLE_SIZE = 4

_UPDATABLE_FIELDS = (
    "name",
    "price",
    "description",
    "stock",
    "brand",
    "category",
    "active",
)


def _visibility(principal: Optional[Principal]) -> Dict[str, Any]:
    """Look-ups restricting a catalog read to what ``principal`` may see."""
    if principal is not None and principal.is_admin:
        return {}
    return {"active": True}


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(
        self, principal: Optional[Principal], dto: CreateProductDTO
    ) -> Product:
        require_admin(principal)
        product = Product(**dto.model_dump())
        product = self._repo.save(product)
        logger.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(
        self, principal: Optional[Principal], id: Any, dto: UpdateProductDTO
    ) -> Product:
        """Update an existing product with the supplied fields.

        The row is locked for the duration of the edit and only the
        supplied columns are written; ``stock`` keeps whatever order
        placement left in it unless the edit sets it explicitly.

        Raises:
            Forbidden: caller is not an administrator.
            ProductNotFound: if the product does not exist.
        """
        require_admin(principal)
        product = self._repo.get_for_update(id)
        if not product:
            raise ProductNotFound(id)

        changed = []
        for field in _UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)
                changed.append(field)

        if changed:
            product = self._repo.save(product, update_fields=changed)
        logger.info("product.updated", product_id=str(id), fields=changed)
        return product

    @transaction.atomic
    def delete_product(self, principal: Optional[Principal], id: Any) -> None:
        """Delete a product that no order references.

        Raises:
            Forbidden: caller is not an administrator.
            ProductNotFound: if the product does not exist.
            ProductInUse: if order items reference the product.
        """
        require_admin(principal)
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(id)
        if self._repo.is_referenced(product.id):
            logger.warning("product.delete_rejected", product_id=str(id))
            raise ProductInUse(f"Product {id} is referenced by existing orders.")
        self._repo.delete(product.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """Return a list of products, optionally filtered."""
        return self._repo.list(filters)

    def search_by_name(self, principal: Optional[Principal], name: str) -> List[Product]:
        """Products whose name contains ``name``, ignoring case."""
        return self._repo.list({"name__icontains": name, **_visibility(principal)})

    def list_by_category(
        self, principal: Optional[Principal], category: str
    ) -> List[Product]:
        return self._repo.list({"category__iexact": category, **_visibility(principal)})

    def random_products(
        self, principal: Optional[Principal], count: int = RANDOM_SAMPLE_SIZE
    ) -> List[Product]:
        return self._repo.random(count, _visibility(principal))

    def get_product(self, principal: Optional[Principal], id: Any) -> Product:
        """Retrieve a single product by ID.

        Inactive products are reported as missing to non-administrators.

        Raises:
            ProductNotFound: if the product does not exist or is hidden.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(id)
        if not product.active and _visibility(principal):
            raise ProductNotFound(id)
        return product
