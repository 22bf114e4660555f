"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.
Domain exceptions propagate to the API exception handler, which renders
them with their status and code; the view never swallows them.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import serializers, status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from modules.accounts.access import Principal
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.exceptions import InvalidArgument
from modules.core.pagination import page_payload
from modules.orders.dtos import OrderQueryDTO, PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    MyOrdersQuerySerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
    PlaceOrderSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


def _validated(serializer: serializers.Serializer) -> dict:
    """Validate ``serializer``, reporting failures as ``InvalidArgument``."""
    if not serializer.is_valid():
        raise InvalidArgument(str(serializer.errors))
    return serializer.validated_data


class OrderViewSet(ViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).  Does **not**
    extend ``ModelViewSet``; all ORM access goes through the
    service/repository layer.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            user_repository=UserDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "admin_list", "retrieve", "items"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def _principal(self, request: Request) -> Principal | None:
        return Principal.from_user(request.user)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        data = _validated(PlaceOrderSerializer(data=request.data))
        try:
            dto = PlaceOrderDTO(
                address=data["address"],
                number=data["number"],
                floor=data.get("floor", ""),
                postal_code=data.get("postal_code", ""),
                items=[
                    PlaceOrderItemDTO(
                        product_id=item["product_id"],
                        quantity=item["quantity"],
                    )
                    for item in data["items"]
                ],
            )
        except PydanticValidationError as exc:
            raise InvalidArgument(str(exc)) from exc

        order = self._service.place_order(self._principal(request), dto)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?start=&end=&page=&size=

        The caller's own orders, newest first.
        """
        params = _validated(MyOrdersQuerySerializer(data=request.query_params))
        page = self._service.list_my_orders(
            self._principal(request),
            start=params.get("start"),
            end=params.get("end"),
            page=params["page"],
            size=params.get("size"),
        )
        return Response(page_payload(page, OrderListSerializer))

    @action(detail=False, methods=["get"], url_path="admin")
    def admin_list(self, request: Request) -> Response:
        """GET /api/v1/orders/admin/?username=&status=&startDate=&endDate=&page=&size="""
        params = request.query_params
        try:
            query = OrderQueryDTO(
                username=params.get("username"),
                status=params.get("status"),
                start_date=params.get("startDate"),
                end_date=params.get("endDate"),
                page=params.get("page", 0),
                size=params.get("size"),
            )
        except PydanticValidationError as exc:
            raise InvalidArgument(str(exc)) from exc

        page = self._service.list_orders(self._principal(request), query)
        return Response(page_payload(page, OrderListSerializer))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(self._principal(request), pk)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def items(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/items/"""
        items = self._service.get_order_items(self._principal(request), pk)
        return Response(OrderItemSerializer(items, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """GET /api/v1/orders/stats/"""
        stats = self._service.sales_stats(self._principal(request))
        return Response(stats.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Status Update / Delete
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/"""
        data = _validated(UpdateStatusSerializer(data=request.data))
        order = self._service.update_status(
            self._principal(request), pk, data["status"]
        )
        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        self._service.delete_order(self._principal(request), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
