"""Account service layer: registration and user administration.

Rules enforced here:
- Usernames and non-blank NIFs are unique.
- Every user keeps the client role; an administrator editing their own
  roles keeps the administrative one.
- Administrators cannot delete themselves, nor users that placed orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

import structlog
from django.conf import settings
from django.db import transaction

from modules.accounts.access import require_admin
from modules.accounts.constants import ADMIN_ROLE, CLIENT_ROLE, DEFAULT_ROLES
from modules.accounts.exceptions import (
    CannotDeleteSelf,
    NifTaken,
    UnknownRole,
    UserNotFound,
    UsernameTaken,
)
from modules.core.pagination import Page, paginate

if TYPE_CHECKING:
    from modules.accounts.access import Principal
    from modules.accounts.dtos import RegisterUserDTO, UserQueryDTO
    from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(self, user_repository: IUserRepository) -> None:
        self._user_repo = user_repository

    def register(self, dto: RegisterUserDTO) -> Any:
        """Create a client account.

        Raises:
            UsernameTaken: the username is already registered.
            NifTaken: the NIF is already registered.
        """
        if self._user_repo.get_by_username(dto.username):
            logger.info("user.duplicate_username", username=dto.username)
            raise UsernameTaken(f"Username '{dto.username}' already registered.")
        if dto.nif and self._user_repo.get_by_nif(dto.nif):
            logger.info("user.duplicate_nif", username=dto.username)
            raise NifTaken(f"NIF '{dto.nif}' already registered.")
        return self._user_repo.create_user(
            username=dto.username,
            password=dto.password,
            email=dto.email,
            roles=[CLIENT_ROLE],
            name=dto.name,
            nif=dto.nif,
        )

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def list_users(self, principal: Optional[Principal], query: UserQueryDTO) -> Page:
        """Page through users sorted by username.  Admin only.

        ``username``, ``email`` and ``nif`` match as case-insensitive
        substrings; ``role`` must equal a role name.
        """
        require_admin(principal)
        size = settings.DEFAULT_PAGE_SIZE if query.size is None else query.size
        return paginate(self._user_repo.search(query.filters()), query.page, size)

    @transaction.atomic
    def replace_roles(
        self, principal: Optional[Principal], user_id: Any, names: Iterable[str]
    ) -> Any:
        """Replace the role set of a user.  Admin only.

        The client role is always kept.  An administrator changing their
        own roles keeps the administrative role too.

        Raises:
            UnknownRole: a name is neither stored nor a built-in role.
            UserNotFound: no user has ``user_id``.
        """
        principal = require_admin(principal)
        user = self._user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)

        wanted = {name.strip() for name in names}
        unknown = wanted - self._user_repo.known_roles() - set(DEFAULT_ROLES)
        if unknown:
            raise UnknownRole(f"Unknown role(s): {', '.join(sorted(unknown))}.")

        wanted.add(CLIENT_ROLE)
        if user.pk == principal.user_id:
            wanted.add(ADMIN_ROLE)
        return self._user_repo.replace_roles(user, wanted)

    def delete_user(self, principal: Optional[Principal], user_id: Any) -> None:
        """Delete a user.  Admin only.

        Raises:
            CannotDeleteSelf: the caller targeted their own account.
            UserNotFound: no user has ``user_id``.
            UserHasOrders: the user has placed orders.
        """
        principal = require_admin(principal)
        user = self._user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFound(user_id)
        if user.pk == principal.user_id:
            raise CannotDeleteSelf()
        self._user_repo.delete(user.pk)
