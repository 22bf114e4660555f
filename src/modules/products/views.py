"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.  Domain
exceptions propagate to the API exception handler, which renders them
with their status and code.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.access import Principal
from modules.core.exceptions import InvalidArgument
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


def _bad_request(exc: Exception) -> Response:
    return Response(
        {"detail": str(exc), "code": "invalid_argument"},
        status=status.HTTP_400_BAD_REQUEST,
    )


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for the catalog.

    Reads are open to any authenticated user; writes require the
    administrative role (checked by ``ProductService``).
    """

    filterset_class = ProductFilter
    search_fields = ["name", "description", "brand", "category"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def _principal(self, request: Request) -> Principal | None:
        return Principal.from_user(request.user)

    def get_queryset(self):
        principal = self._principal(self.request)
        queryset = Product.objects.all()
        if principal is not None and principal.is_admin:
            return queryset
        return queryset.filter(active=True)

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(self._principal(request), pk)
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Search / Showcase
    # ------------------------------------------------------------------

    def _required_param(self, request: Request, name: str) -> str:
        value = request.query_params.get(name, "").strip()
        if not value:
            raise InvalidArgument(f"Query parameter '{name}' is required.")
        return value

    @action(detail=False, methods=["get"], url_path="search/name")
    def search_name(self, request: Request) -> Response:
        """GET /api/v1/products/search/name/?name="""
        products = self._service.search_by_name(
            self._principal(request), self._required_param(request, "name")
        )
        return Response(ProductSerializer(products, many=True).data)

    @action(detail=False, methods=["get"], url_path="search/category")
    def search_category(self, request: Request) -> Response:
        """GET /api/v1/products/search/category/?category="""
        products = self._service.list_by_category(
            self._principal(request), self._required_param(request, "category")
        )
        return Response(ProductSerializer(products, many=True).data)

    @action(detail=False, methods=["get"])
    def random(self, request: Request) -> Response:
        """GET /api/v1/products/random/"""
        products = self._service.random_products(self._principal(request))
        return Response(ProductSerializer(products, many=True).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = request.data
        try:
            dto = CreateProductDTO(
                name=data.get("name", ""),
                price=data.get("price", 0),
                description=data.get("description", ""),
                stock=data.get("stock", 0),
                brand=data.get("brand", ""),
                category=data.get("category", ""),
                active=data.get("active", True),
            )
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(exc)

        product = self._service.create_product(self._principal(request), dto)
        return Response(
            ProductSerializer(product).data, status=status.HTTP_201_CREATED
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        data = request.data
        try:
            dto = UpdateProductDTO(
                **{key: data.get(key) for key in UpdateProductDTO.model_fields}
            )
        except (PydanticValidationError, ValueError) as exc:
            return _bad_request(exc)

        product = self._service.update_product(self._principal(request), pk, dto)
        return Response(ProductSerializer(product).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        self._service.delete_product(self._principal(request), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
