"""Account DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from django.conf import settings
from pydantic import BaseModel, ConfigDict, field_validator


class RegisterUserDTO(BaseModel):
    """Input for self-service registration."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str
    email: str = ""
    name: str = ""
    nif: str = ""

    @field_validator("username")
    @classmethod
    def username_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Username must not be empty.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long.")
        return v

    @field_validator("name", "nif")
    @classmethod
    def strip_optional_text(cls, v: str) -> str:
        return v.strip()


class UserQueryDTO(BaseModel):
    """Filter and page parameters for the administrative user listing.

    ``page`` is zero-based.  ``size`` is capped at ``settings.MAX_PAGE_SIZE``
    and falls back to ``settings.DEFAULT_PAGE_SIZE`` when omitted.
    """

    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    email: Optional[str] = None
    nif: Optional[str] = None
    role: Optional[str] = None
    page: int = 0
    size: Optional[int] = None

    @field_validator("username", "email", "nif", "role", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("page")
    @classmethod
    def page_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Page index must be zero or greater.")
        return v

    @field_validator("size")
    @classmethod
    def size_must_be_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return None
        if v <= 0:
            raise ValueError("Page size must be greater than zero.")
        return min(v, settings.MAX_PAGE_SIZE)

    def filters(self) -> dict:
        """The non-empty filter parameters, keyed as ``UserFilter`` expects."""
        return {
            key: value
            for key, value in self.model_dump(
                include={"username", "email", "nif", "role"}
            ).items()
            if value is not None
        }
