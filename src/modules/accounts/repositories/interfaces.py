"""User repository interface.

The order core only needs to know whether a user exists and which roles
it holds.  Administrators additionally list, re-role and delete users.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Optional

if TYPE_CHECKING:
    from django.db.models import QuerySet


class IUserRepository(ABC):
    """Repository contract for users and their role assignments."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Any]:
        """Retrieve a user by primary key."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[Any]:
        """Retrieve a user by username (exact match)."""

    @abstractmethod
    def get_by_nif(self, nif: str) -> Optional[Any]:
        """Retrieve the user whose profile holds ``nif`` (exact match)."""

    @abstractmethod
    def role_names(self, user_id: Any) -> FrozenSet[str]:
        """Return the names of the roles assigned to a user."""

    @abstractmethod
    def known_roles(self) -> FrozenSet[str]:
        """Return the names of every role stored."""

    @abstractmethod
    def create_user(
        self,
        username: str,
        password: str,
        email: str,
        roles: Iterable[str],
        name: str = "",
        nif: str = "",
    ) -> Any:
        """Create a user with a hashed password, a profile and the given roles.

        Raises:
            UsernameTaken: another user already holds ``username``.
            NifTaken: another user already holds ``nif``.
        """

    @abstractmethod
    def search(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Return a lazy queryset of users matching ``filters``, by username."""

    @abstractmethod
    def replace_roles(self, user: Any, names: Iterable[str]) -> Any:
        """Make ``names`` the complete role set of ``user``."""

    @abstractmethod
    def delete(self, id: Any) -> bool:
        """Remove a user; ``False`` if it does not exist.

        Raises:
            UserHasOrders: the user has placed orders.
        """
