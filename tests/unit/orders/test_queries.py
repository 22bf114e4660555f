"""Unit tests for the order query operations of OrderService."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from modules.core.exceptions import Forbidden, InvalidArgument, NotAuthenticated
from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderQueryDTO, PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import Order

pytestmark = pytest.mark.unit

BASE = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def product(make_product):
    return make_product(stock=1000)


@pytest.fixture()
def place(order_service, product):
    """Place a one-line order and backdate it to ``BASE + days``."""

    def _place(principal, days=0, quantity=1):
        dto = PlaceOrderDTO(
            address="Main Street",
            number="1",
            items=[PlaceOrderItemDTO(product_id=product.id, quantity=quantity)],
        )
        order = order_service.place_order(principal, dto)
        Order.objects.filter(id=order.id).update(created_at=BASE + timedelta(days=days))
        return Order.objects.get(id=order.id)

    return _place


# ===========================================================================
# get_order / get_order_items
# ===========================================================================


class TestGetOrder:
    def test_owner_can_read(self, order_service, client_principal, place):
        order = place(client_principal)
        assert order_service.get_order(client_principal, order.id).id == order.id

    def test_admin_can_read_any(
        self, order_service, client_principal, admin_principal, place
    ):
        order = place(client_principal)
        assert order_service.get_order(admin_principal, order.id).id == order.id

    def test_other_user_gets_not_found(
        self, order_service, client_principal, other_principal, place
    ):
        order = place(client_principal)

        with pytest.raises(OrderNotFound) as foreign:
            order_service.get_order(other_principal, order.id)
        with pytest.raises(OrderNotFound) as missing:
            order_service.get_order(other_principal, uuid4())

        assert foreign.value.detail == missing.value.detail
        assert foreign.value.code == missing.value.code

    def test_malformed_id_is_not_found(self, order_service, client_principal):
        with pytest.raises(OrderNotFound):
            order_service.get_order(client_principal, "not-a-uuid")

    def test_anonymous_is_rejected(self, order_service, client_principal, place):
        order = place(client_principal)
        with pytest.raises(NotAuthenticated):
            order_service.get_order(None, order.id)

    def test_items_follow_ownership(
        self, order_service, client_principal, other_principal, place
    ):
        order = place(client_principal, quantity=3)

        items = order_service.get_order_items(client_principal, order.id)
        assert [item.quantity for item in items] == [3]

        with pytest.raises(OrderNotFound):
            order_service.get_order_items(other_principal, order.id)


# ===========================================================================
# list_my_orders
# ===========================================================================


class TestListMyOrders:
    def test_only_own_orders_newest_first(
        self, order_service, client_principal, other_principal, place
    ):
        older = place(client_principal, days=0)
        newer = place(client_principal, days=1)
        place(other_principal, days=2)

        page = order_service.list_my_orders(client_principal)

        assert [o.id for o in page.items] == [newer.id, older.id]
        assert page.total == 2

    def test_date_range_is_inclusive(self, order_service, client_principal, place):
        place(client_principal, days=0)
        inside = place(client_principal, days=5)
        place(client_principal, days=10)

        page = order_service.list_my_orders(
            client_principal,
            start=BASE + timedelta(days=5),
            end=BASE + timedelta(days=5),
        )

        assert [o.id for o in page.items] == [inside.id]

    def test_open_ended_range(self, order_service, client_principal, place):
        place(client_principal, days=0)
        place(client_principal, days=5)

        page = order_service.list_my_orders(
            client_principal, start=BASE + timedelta(days=1)
        )
        assert page.total == 1

    def test_pagination_metadata(self, order_service, client_principal, place):
        for day in range(5):
            place(client_principal, days=day)

        page = order_service.list_my_orders(client_principal, page=1, size=2)

        assert len(page.items) == 2
        assert page.total == 5
        assert page.total_pages == 3
        assert page.has_next

    def test_page_past_end_is_empty(self, order_service, client_principal, place):
        place(client_principal)
        page = order_service.list_my_orders(client_principal, page=3, size=10)
        assert page.items == []
        assert page.total == 1

    @pytest.mark.parametrize("page,size", [(-1, 10), (0, 0), (0, -5)])
    def test_invalid_page_parameters(
        self, order_service, client_principal, page, size
    ):
        with pytest.raises(InvalidArgument):
            order_service.list_my_orders(client_principal, page=page, size=size)

    def test_anonymous_is_rejected(self, order_service):
        with pytest.raises(NotAuthenticated):
            order_service.list_my_orders(None)


# ===========================================================================
# list_orders (admin)
# ===========================================================================


class TestListOrders:
    def test_requires_admin(self, order_service, client_principal):
        with pytest.raises(Forbidden):
            order_service.list_orders(client_principal, OrderQueryDTO())

    def test_no_criteria_returns_everything(
        self, order_service, admin_principal, client_principal, other_principal, place
    ):
        place(client_principal)
        place(other_principal)

        page = order_service.list_orders(admin_principal, OrderQueryDTO())
        assert page.total == 2

    def test_filter_by_status(
        self, order_service, admin_principal, client_principal, place
    ):
        pending = place(client_principal, days=0)
        confirmed = place(client_principal, days=1)
        order_service.update_status(
            admin_principal, confirmed.id, OrderStatus.CONFIRMED
        )

        page = order_service.list_orders(
            admin_principal, OrderQueryDTO(status="PENDING")
        )

        assert [o.id for o in page.items] == [pending.id]
        assert all(o.status == OrderStatus.PENDING for o in page.items)

    def test_filter_by_username_substring(
        self, order_service, admin_principal, client_principal, other_principal, place
    ):
        mine = place(client_principal)
        place(other_principal)

        page = order_service.list_orders(
            admin_principal, OrderQueryDTO(username="LIC")
        )

        assert [o.id for o in page.items] == [mine.id]

    def test_criteria_are_conjunctive(
        self, order_service, admin_principal, client_principal, other_principal, place
    ):
        target = place(client_principal, days=3)
        place(client_principal, days=10)
        place(other_principal, days=3)

        page = order_service.list_orders(
            admin_principal,
            OrderQueryDTO(
                username="alice",
                status="PENDING",
                start_date=BASE + timedelta(days=2),
                end_date=BASE + timedelta(days=4),
            ),
        )

        assert [o.id for o in page.items] == [target.id]


# ===========================================================================
# sales_stats
# ===========================================================================


class TestSalesStats:
    def test_best_sellers_and_top_customers(
        self,
        order_service,
        admin_principal,
        client_principal,
        other_principal,
        make_product,
    ):
        hot = make_product(name="Hot", stock=100)
        cold = make_product(name="Cold", stock=100)

        def buy(principal, *lines):
            order_service.place_order(
                principal,
                PlaceOrderDTO(
                    address="Main Street",
                    number="1",
                    items=[
                        PlaceOrderItemDTO(product_id=p.id, quantity=q)
                        for p, q in lines
                    ],
                ),
            )

        buy(client_principal, (hot, 5), (cold, 1))
        buy(client_principal, (hot, 2))
        buy(other_principal, (cold, 1))

        stats = order_service.sales_stats(admin_principal)

        assert [(row.name, row.units_sold) for row in stats.best_sellers] == [
            ("Hot", 7),
            ("Cold", 2),
        ]
        assert [(row.username, row.order_count) for row in stats.top_customers] == [
            ("alice", 2),
            ("bob", 1),
        ]

    def test_requires_admin(self, order_service, client_principal):
        with pytest.raises(Forbidden):
            order_service.sales_stats(client_principal)
