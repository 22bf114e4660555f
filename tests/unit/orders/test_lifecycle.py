"""Unit tests for order status updates and deletion."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.exceptions import Forbidden, NotAuthenticated
from modules.orders.constants import OrderStatus
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.exceptions import InvalidStatus, InvalidTransition, OrderNotFound
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


class _RecordingOrderRepository(OrderDjangoRepository):
    """Records every row lock taken and every instance whose status is written."""

    def __init__(self):
        self.locked = []
        self.written = []

    def get_for_update(self, id):
        order = super().get_for_update(id)
        self.locked.append(order)
        return order

    def update_status(self, order, status):
        self.written.append(order)
        return super().update_status(order, status)


@pytest.fixture()
def product(make_product):
    return make_product(stock=10)


@pytest.fixture()
def order(order_service, client_principal, product):
    dto = PlaceOrderDTO(
        address="Main Street",
        number="1",
        items=[PlaceOrderItemDTO(product_id=product.id, quantity=2)],
    )
    return order_service.place_order(client_principal, dto)


class TestUpdateStatus:
    def test_admin_can_update_status(self, order_service, admin_principal, order):
        updated = order_service.update_status(
            admin_principal, order.id, OrderStatus.CONFIRMED
        )
        assert updated.status == OrderStatus.CONFIRMED
        assert Order.objects.get(id=order.id).status == OrderStatus.CONFIRMED

    def test_owner_without_admin_role_is_forbidden(
        self, order_service, client_principal, order
    ):
        with pytest.raises(Forbidden):
            order_service.update_status(
                client_principal, order.id, OrderStatus.CONFIRMED
            )
        assert Order.objects.get(id=order.id).status == OrderStatus.PENDING

    def test_anonymous_is_rejected(self, order_service, order):
        with pytest.raises(NotAuthenticated):
            order_service.update_status(None, order.id, OrderStatus.CONFIRMED)

    def test_locks_the_order_once(self, admin_principal, order):
        repo = _RecordingOrderRepository()
        service = OrderService(
            order_repository=repo,
            product_repository=ProductDjangoRepository(),
            user_repository=UserDjangoRepository(),
        )

        service.update_status(admin_principal, order.id, OrderStatus.SHIPPED)

        assert len(repo.locked) == 1
        assert repo.written == repo.locked

    @pytest.mark.parametrize("literal", ["confirmed", "UNKNOWN", ""])
    def test_unknown_literal_raises(
        self, order_service, admin_principal, order, literal
    ):
        with pytest.raises(InvalidStatus):
            order_service.update_status(admin_principal, order.id, literal)

    def test_missing_order_raises(self, order_service, admin_principal):
        with pytest.raises(OrderNotFound):
            order_service.update_status(
                admin_principal, uuid4(), OrderStatus.CONFIRMED
            )

    def test_any_jump_allowed_by_default(self, order_service, admin_principal, order):
        order_service.update_status(admin_principal, order.id, OrderStatus.DELIVERED)
        updated = order_service.update_status(
            admin_principal, order.id, OrderStatus.PENDING
        )
        assert updated.status == OrderStatus.PENDING

    def test_status_change_keeps_items_and_total(
        self, order_service, admin_principal, order
    ):
        total = order.total
        order_service.update_status(admin_principal, order.id, OrderStatus.SHIPPED)
        reloaded = Order.objects.get(id=order.id)
        assert reloaded.total == total
        assert reloaded.items.count() == 1


class TestEnforcedTransitions:
    @pytest.fixture(autouse=True)
    def _enforce_transitions(self, settings):
        settings.ORDERS_ENFORCE_TRANSITIONS = True

    def test_legal_path_to_delivered(self, order_service, admin_principal, order):
        for status in (
            OrderStatus.CONFIRMED,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ):
            updated = order_service.update_status(admin_principal, order.id, status)
        assert updated.status == OrderStatus.DELIVERED

    def test_illegal_jump_raises(self, order_service, admin_principal, order):
        with pytest.raises(InvalidTransition):
            order_service.update_status(
                admin_principal, order.id, OrderStatus.DELIVERED
            )
        assert Order.objects.get(id=order.id).status == OrderStatus.PENDING

    def test_terminal_state_is_final(self, order_service, admin_principal, order):
        order_service.update_status(admin_principal, order.id, OrderStatus.CANCELLED)
        with pytest.raises(InvalidTransition):
            order_service.update_status(
                admin_principal, order.id, OrderStatus.CONFIRMED
            )


class TestDeleteOrder:
    def test_admin_deletes_order_and_items(
        self, order_service, admin_principal, order
    ):
        order_service.delete_order(admin_principal, order.id)

        assert not Order.objects.filter(id=order.id).exists()
        assert not OrderItem.objects.filter(order_id=order.id).exists()

    def test_delete_does_not_restock(
        self, order_service, admin_principal, order, product
    ):
        order_service.delete_order(admin_principal, order.id)
        product.refresh_from_db()
        assert product.stock == 8

    def test_non_admin_is_forbidden(self, order_service, client_principal, order):
        with pytest.raises(Forbidden):
            order_service.delete_order(client_principal, order.id)
        assert Order.objects.filter(id=order.id).exists()

    def test_missing_order_raises(self, order_service, admin_principal):
        with pytest.raises(OrderNotFound):
            order_service.delete_order(admin_principal, uuid4())
