"""Django ORM implementation of the user repository."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, Optional

import structlog
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, ProtectedError, QuerySet

from modules.accounts.exceptions import NifTaken, UserHasOrders, UsernameTaken
from modules.accounts.filters import UserFilter
from modules.accounts.models import Profile, Role
from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Concrete user repository backed by ``django.contrib.auth``."""

    def __init__(self) -> None:
        self._model = get_user_model()

    def get_by_id(self, id: Any) -> Optional[Any]:
        try:
            return self._model.objects.filter(pk=id).first()
        except (TypeError, ValueError):
            return None

    def get_by_username(self, username: str) -> Optional[Any]:
        return self._model.objects.filter(username=username).first()

    def get_by_nif(self, nif: str) -> Optional[Any]:
        return self._model.objects.filter(profile__nif=nif).first()

    def role_names(self, user_id: Any) -> FrozenSet[str]:
        return frozenset(
            Role.objects.filter(users__pk=user_id).values_list("name", flat=True)
        )

    def known_roles(self) -> FrozenSet[str]:
        return frozenset(Role.objects.values_list("name", flat=True))

    def create_user(
        self,
        username: str,
        password: str,
        email: str,
        roles: Iterable[str],
        name: str = "",
        nif: str = "",
    ) -> Any:
        """Create the user, its profile and role links in one savepoint.

        Uniqueness is finally enforced by the database: when a concurrent
        registration wins the race the resulting ``IntegrityError`` is
        translated into the matching domain conflict.
        """
        try:
            with transaction.atomic():
                user = self._model.objects.create_user(
                    username=username, password=password, email=email
                )
                Profile.objects.create(user=user, full_name=name, nif=nif)
                for role_name in roles:
                    role, _ = Role.objects.get_or_create(name=role_name)
                    role.users.add(user)
        except IntegrityError as exc:
            if self._model.objects.filter(username=username).exists():
                logger.info("user.duplicate_username", username=username)
                raise UsernameTaken(
                    f"Username '{username}' already registered."
                ) from exc
            if nif and Profile.objects.filter(nif=nif).exists():
                logger.info("user.duplicate_nif", username=username)
                raise NifTaken(f"NIF '{nif}' already registered.") from exc
            raise
        logger.info("user.created", user_id=user.pk, username=username)
        return user

    def search(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = (
            self._model.objects.select_related("profile")
            .prefetch_related("roles")
            .annotate(order_count=Count("orders", distinct=True))
        )
        return UserFilter(filters or {}, queryset=queryset).qs.order_by(
            "username", "pk"
        )

    @transaction.atomic
    def replace_roles(self, user: Any, names: Iterable[str]) -> Any:
        roles = [Role.objects.get_or_create(name=name)[0] for name in set(names)]
        user.roles.set(roles)
        logger.info(
            "user.roles_replaced",
            user_id=user.pk,
            roles=sorted(role.name for role in roles),
        )
        return user

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        user = self.get_by_id(id)
        if not user:
            return False
        try:
            user.delete()
        except ProtectedError as exc:
            logger.warning("user.delete_protected", user_id=id)
            raise UserHasOrders(f"User {id} has placed orders.") from exc
        logger.info("user.deleted", user_id=id)
        return True
