"""Account API views: registration, the current principal and user admin."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ViewSet

from modules.accounts.access import Principal
from modules.accounts.dtos import RegisterUserDTO, UserQueryDTO
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.serializers import (
    AdminUserSerializer,
    ReplaceRolesSerializer,
    UserSerializer,
)
from modules.accounts.services import AccountService
from modules.core.exceptions import InvalidArgument
from modules.core.pagination import page_payload


class RegisterView(APIView):
    """POST /api/v1/auth/register/"""

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        try:
            dto = RegisterUserDTO(
                username=request.data.get("username", ""),
                password=request.data.get("password", ""),
                email=request.data.get("email", ""),
                name=request.data.get("name", ""),
                nif=request.data.get("nif", ""),
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_argument"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        service = AccountService(user_repository=UserDjangoRepository())
        user = service.register(dto)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class MeView(APIView):
    """GET /api/v1/auth/me/"""

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)


class UserViewSet(ViewSet):
    """Administrative user management.

    Every action requires the administrative role (checked by
    ``AccountService``).
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(user_repository=UserDjangoRepository())

    def _principal(self, request: Request) -> Principal | None:
        return Principal.from_user(request.user)

    def list(self, request: Request) -> Response:
        """GET /api/v1/users/?username=&email=&nif=&role=&page=&size="""
        params = request.query_params
        try:
            query = UserQueryDTO(
                username=params.get("username"),
                email=params.get("email"),
                nif=params.get("nif"),
                role=params.get("role"),
                page=params.get("page", 0),
                size=params.get("size"),
            )
        except PydanticValidationError as exc:
            raise InvalidArgument(str(exc)) from exc

        page = self._service.list_users(self._principal(request), query)
        return Response(page_payload(page, AdminUserSerializer))

    @action(detail=True, methods=["put"])
    def roles(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/users/{pk}/roles/

        Accepts either a bare JSON list of role names or ``{"roles": [...]}``.
        """
        data = request.data
        if isinstance(data, list):
            data = {"roles": data}
        serializer = ReplaceRolesSerializer(data=data)
        if not serializer.is_valid():
            raise InvalidArgument(str(serializer.errors))

        user = self._service.replace_roles(
            self._principal(request), pk, serializer.validated_data["roles"]
        )
        return Response(UserSerializer(user).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/users/{pk}/"""
        self._service.delete_user(self._principal(request), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
