"""Error taxonomy shared by all modules.

Every business failure raised by a Service Layer derives from
``DomainError``.  Each category carries the HTTP-equivalent status and a
stable machine-readable ``code``; the API exception handler turns them
into responses without further mapping.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for expected, typed failures."""

    status_code = 400
    code = "domain_error"
    default_detail = "Request could not be processed."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotAuthenticated(DomainError):
    """No principal could be resolved for the request."""

    status_code = 401
    code = "not_authenticated"
    default_detail = "Authentication credentials were not provided."


class Forbidden(DomainError):
    """The principal is authenticated but lacks the required role."""

    status_code = 403
    code = "forbidden"
    default_detail = "You do not have permission to perform this action."


class NotFound(DomainError):
    """The entity does not exist, or is not visible to the caller."""

    status_code = 404
    code = "not_found"
    default_detail = "Not found."


class InvalidArgument(DomainError):
    """A filter, literal or payload value is malformed."""

    status_code = 400
    code = "invalid_argument"
    default_detail = "Invalid argument."


class Conflict(DomainError):
    """The request conflicts with the current state of the store."""

    status_code = 409
    code = "conflict"
    default_detail = "The resource was modified concurrently."
