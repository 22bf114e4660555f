"""Order service layer (Use Cases).

Orchestrates order placement, status management and order queries.
All write operations are atomic; the service defines the unit-of-work
boundary.

Business rules enforced:
- Placement validates every line before touching stock, then decrements
  each product with a conditional update.  Losing a race against a
  concurrent order aborts and rolls back the whole placement.
- ``total`` is the sum of the line subtotals, priced from the catalog.
- Status changes and deletions require the administrative role.
- An order is only visible to its owner and to administrators; any other
  caller gets the same error as for a missing order.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.conf import settings
from django.db import transaction

from modules.accounts.access import require_admin, require_authenticated
from modules.core.exceptions import InvalidArgument, NotAuthenticated
from modules.core.pagination import Page, paginate
from modules.orders.constants import STATS_LIMIT, OrderStatus
from modules.orders.dtos import CustomerOrdersDTO, ProductSalesDTO, SalesStatsDTO
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidStatus,
    InvalidTransition,
    OrderNotFound,
    StockConflict,
)
from modules.orders.specifications import (
    ByDateRange,
    ByOwner,
    ByStatus,
    ByUsername,
    OrderCriterion,
)
from modules.products.exceptions import InactiveProduct, ProductNotFound

if TYPE_CHECKING:
    from modules.accounts.access import Principal
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.orders.dtos import OrderQueryDTO, PlaceOrderDTO
    from modules.orders.models import Order, OrderItem
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        user_repository: IUserRepository,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._user_repo = user_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def place_order(self, principal: Optional[Principal], dto: PlaceOrderDTO) -> Order:
        """Turn a cart into a persisted ``PENDING`` order.

        Steps:
        1. Resolve the principal to an existing user.
        2. Load every product (sorted by id to keep lock order stable); all
           must exist and be active.
        3. Check stock for every line.  Nothing is written yet.
        4. Decrement stock with ``stock >= quantity`` as the guard, pricing
           each line from the catalog.
        5. Persist the order and its items.

        Raises:
            NotAuthenticated: no principal, or it does not resolve to a user.
            ProductNotFound: a product does not exist.
            InactiveProduct: a product is withdrawn from sale.
            InsufficientStock: a line asks for more than is in stock.
            StockConflict: a concurrent order consumed the stock first.
        """
        principal = require_authenticated(principal)
        user = self._user_repo.get_by_id(principal.user_id)
        if not user:
            raise NotAuthenticated("Principal does not resolve to a known user.")

        log = logger.bind(user_id=principal.user_id, line_count=len(dto.items))
        log.info("order.placement_started")

        lines = sorted(dto.items, key=lambda line: str(line.product_id))
        products = self._product_repo.get_many(line.product_id for line in lines)

        for line in lines:
            if line.product_id not in products:
                raise ProductNotFound(line.product_id)
            if not products[line.product_id].active:
                log.info("order.inactive_product", product_id=str(line.product_id))
                raise InactiveProduct(line.product_id)

        for line in lines:
            product = products[line.product_id]
            if product.stock < line.quantity:
                log.info(
                    "order.insufficient_stock",
                    product_id=str(product.id),
                    requested=line.quantity,
                    available=product.stock,
                )
                raise InsufficientStock(product.id, line.quantity, product.stock)

        total = Decimal("0.00")
        items = []
        for line in lines:
            product = products[line.product_id]
            if not self._product_repo.decrement_stock(product.id, line.quantity):
                log.warning("order.stock_conflict", product_id=str(product.id))
                raise StockConflict(product.id)

            subtotal = product.price * line.quantity
            total += subtotal
            items.append(
                {
                    "product_id": product.id,
                    "quantity": line.quantity,
                    "unit_price": product.price,
                    "subtotal": subtotal,
                }
            )

        order = self._order_repo.create(
            {
                "user_id": user.pk,
                "address": dto.address,
                "number": dto.number,
                "floor": dto.floor,
                "postal_code": dto.postal_code,
                "total": total,
                "items": items,
            }
        )

        log.info("order.placed", order_id=str(order.id), total=str(total))
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def update_status(
        self, principal: Optional[Principal], order_id: Any, new_status: str
    ) -> Order:
        """Set the status of an order.

        The new status overwrites the current one (last write wins) unless
        ``settings.ORDERS_ENFORCE_TRANSITIONS`` is enabled, in which case
        only moves listed in ``VALID_TRANSITIONS`` are accepted.

        Raises:
            Forbidden: caller is not an administrator.
            InvalidStatus: ``new_status`` is not a known status literal.
            OrderNotFound: order does not exist.
            InvalidTransition: the move is illegal and enforcement is on.
        """
        require_admin(principal)
        if new_status not in OrderStatus.values:
            raise InvalidStatus(f"Unknown order status '{new_status}'.")

        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound()

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )

        if settings.ORDERS_ENFORCE_TRANSITIONS and not order.can_transition_to(
            new_status
        ):
            log.info("order.invalid_transition")
            raise InvalidTransition(
                f"Cannot transition from {order.status} to {new_status}."
            )

        self._order_repo.update_status(order, new_status)
        log.info("order.status_updated")
        return self._order_repo.get_by_id(order.id)

    @transaction.atomic
    def delete_order(self, principal: Optional[Principal], order_id: Any) -> None:
        """Delete an order and its items.  Stock is not restored.

        Raises:
            Forbidden: caller is not an administrator.
            OrderNotFound: order does not exist.
        """
        require_admin(principal)
        if not self._order_repo.delete(order_id):
            raise OrderNotFound()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, principal: Optional[Principal], order_id: Any) -> Order:
        """Retrieve an order owned by the caller, or any order for admins.

        Raises:
            NotAuthenticated: no principal.
            OrderNotFound: the order does not exist or is not visible.
        """
        principal = require_authenticated(principal)
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound()
        if order.user_id != principal.user_id and not principal.is_admin:
            logger.info(
                "order.access_denied",
                order_id=str(order.id),
                user_id=principal.user_id,
            )
            raise OrderNotFound()
        return order

    def get_order_items(
        self, principal: Optional[Principal], order_id: Any
    ) -> List[OrderItem]:
        order = self.get_order(principal, order_id)
        return self._order_repo.items_for(order.id)

    def list_my_orders(
        self,
        principal: Optional[Principal],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: int = 0,
        size: Optional[int] = None,
    ) -> Page:
        """Page through the caller's own orders, newest first."""
        principal = require_authenticated(principal)
        criteria: List[OrderCriterion] = [
            ByOwner(principal.user_id),
            ByDateRange(start, end),
        ]
        return self._page(criteria, page, size)

    def list_orders(self, principal: Optional[Principal], query: OrderQueryDTO) -> Page:
        """Page through all orders matching the query.  Admin only."""
        require_admin(principal)
        criteria: List[OrderCriterion] = []
        if query.username:
            criteria.append(ByUsername(query.username))
        if query.status:
            criteria.append(ByStatus(query.status))
        if query.start_date or query.end_date:
            criteria.append(ByDateRange(query.start_date, query.end_date))
        return self._page(criteria, query.page, query.size)

    def sales_stats(self, principal: Optional[Principal]) -> SalesStatsDTO:
        """Best-selling products and most active customers.  Admin only."""
        require_admin(principal)
        return SalesStatsDTO(
            best_sellers=[
                ProductSalesDTO(**row)
                for row in self._order_repo.best_sellers(STATS_LIMIT)
            ],
            top_customers=[
                CustomerOrdersDTO(**row)
                for row in self._order_repo.top_customers(STATS_LIMIT)
            ],
        )

    def _page(
        self, criteria: List[OrderCriterion], page: int, size: Optional[int]
    ) -> Page:
        size = settings.DEFAULT_PAGE_SIZE if size is None else size
        if page < 0:
            raise InvalidArgument("Page index must be zero or greater.")
        if size <= 0:
            raise InvalidArgument("Page size must be greater than zero.")
        size = min(size, settings.MAX_PAGE_SIZE)
        return paginate(self._order_repo.query(criteria), page, size)
