"""Access gate: the calling principal and the role checks made against it.

Services never read the current user from ambient state.  Views build a
``Principal`` from the authenticated request user and pass it explicitly
to every operation that needs to know who is calling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional

from modules.accounts.constants import ADMIN_ROLE
from modules.core.exceptions import Forbidden, NotAuthenticated


@dataclass(frozen=True)
class Principal:
    """An authenticated actor: a user identity plus its role set."""

    user_id: int
    username: str
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: Any) -> Optional[Principal]:
        """Build a principal from a Django user; ``None`` for anonymous users."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        roles = frozenset(user.roles.values_list("name", flat=True))
        return cls(user_id=user.pk, username=user.get_username(), roles=roles)

    def has_role(self, name: str) -> bool:
        return name in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(ADMIN_ROLE)


def require_authenticated(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise NotAuthenticated()
    return principal


def require_role(principal: Optional[Principal], name: str) -> Principal:
    principal = require_authenticated(principal)
    if not principal.has_role(name):
        raise Forbidden(f"Role {name} required.")
    return principal


def require_admin(principal: Optional[Principal]) -> Principal:
    return require_role(principal, ADMIN_ROLE)
