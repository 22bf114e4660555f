"""Role and profile models.

A user may hold any number of roles; authorisation decisions only look at
role names (see ``modules.accounts.access``).  User credentials live in
Django's own ``auth`` user model; the full name and tax identifier
(NIF) collected at registration live on ``Profile``.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from modules.core.models import BaseModel


class Role(BaseModel):
    name = models.CharField(max_length=50, unique=True)
    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="roles",
        blank=True,
    )

    class Meta:
        db_table = "roles"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Profile(BaseModel):
    """Personal data attached one-to-one to a user.

    ``nif`` is optional, but two users can never share a non-blank one.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    full_name = models.CharField(max_length=150, blank=True)
    nif = models.CharField(max_length=20, blank=True)

    class Meta:
        db_table = "profiles"
        constraints = [
            models.UniqueConstraint(
                fields=["nif"],
                condition=~Q(nif=""),
                name="profiles_nif_unique_when_set",
            )
        ]

    def __str__(self) -> str:
        return f"Profile({self.user_id})"
