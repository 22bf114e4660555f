"""Account domain exceptions."""

from __future__ import annotations

from typing import Any

from modules.core.exceptions import Conflict, InvalidArgument, NotFound


class UsernameTaken(Conflict):
    """Registration attempted with a username that is already in use."""

    code = "username_taken"
    default_detail = "Username already registered."


class NifTaken(Conflict):
    code = "nif_taken"
    default_detail = "NIF already registered."


class UserNotFound(NotFound):
    default_detail = "User not found."

    def __init__(self, user_id: Any = None) -> None:
        self.user_id = user_id
        detail = f"User {user_id} not found." if user_id is not None else None
        super().__init__(detail)


class UnknownRole(InvalidArgument):
    code = "unknown_role"
    default_detail = "Unknown role."


class CannotDeleteSelf(Conflict):
    """An administrator tried to delete their own account."""

    code = "cannot_delete_self"
    default_detail = "Administrators cannot delete their own account."


class UserHasOrders(Conflict):
    """The user placed orders, which keep a protected reference to them."""

    code = "user_has_orders"
    default_detail = "User has placed orders and cannot be deleted."
