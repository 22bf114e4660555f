"""Composable order filters.

Each criterion is a small immutable object that knows how to express
itself as a Django ``Q``.  Criteria are combined conjunctively with
``combine``; an empty list imposes no constraint.

    criteria = [ByOwner(user_id), ByStatus(OrderStatus.PENDING)]
    Order.objects.filter(combine(criteria))
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from django.db.models import Q


class OrderCriterion:
    """Base class for order filter objects."""

    def to_q(self) -> Q:
        raise NotImplementedError


@dataclass(frozen=True)
class ByOwner(OrderCriterion):
    user_id: Any

    def to_q(self) -> Q:
        return Q(user_id=self.user_id)


@dataclass(frozen=True)
class ByStatus(OrderCriterion):
    status: str

    def to_q(self) -> Q:
        return Q(status=self.status)


@dataclass(frozen=True)
class ByDateRange(OrderCriterion):
    """Creation timestamp between ``start`` and ``end``, both inclusive.

    Either bound may be omitted.
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_q(self) -> Q:
        q = Q()
        if self.start is not None:
            q &= Q(created_at__gte=self.start)
        if self.end is not None:
            q &= Q(created_at__lte=self.end)
        return q


@dataclass(frozen=True)
class ByUsername(OrderCriterion):
    """Case-insensitive substring match on the owner's username."""

    fragment: str

    def to_q(self) -> Q:
        return Q(user__username__icontains=self.fragment)


def combine(criteria: Iterable[OrderCriterion]) -> Q:
    """AND all criteria together."""
    q = Q()
    for criterion in criteria:
        q &= criterion.to_q()
    return q
