"""Pagination primitives.

- ``StandardResultsSetPagination``: DRF page-number pagination for plain
  list endpoints (``?page=1&page_size=50``).
- ``Page`` / ``paginate``: framework-agnostic, zero-based pages returned by
  the Service Layer together with the total count, rendered by
  ``page_payload``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from django.conf import settings
from django.db.models import QuerySet
from rest_framework.pagination import PageNumberPagination

T = TypeVar("T")


class StandardResultsSetPagination(PageNumberPagination):
    page_size_query_param = "page_size"
    max_page_size = settings.MAX_PAGE_SIZE


@dataclass(frozen=True)
class Page(Generic[T]):
    """A slice of a result set plus the metadata needed to page through it."""

    items: List[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages


def paginate(queryset: QuerySet, page: int, size: int) -> Page:
    """Return page ``page`` (zero-based) of ``size`` rows from ``queryset``."""
    if page < 0:
        raise ValueError("page must be >= 0")
    if size <= 0:
        raise ValueError("size must be > 0")
    total = queryset.count()
    offset = page * size
    items = list(queryset[offset : offset + size]) if offset < total else []
    return Page(items=items, page=page, size=size, total=total)


def page_payload(page: Page, serializer_class) -> dict:
    """Render a service-layer ``Page`` with its metadata."""
    return {
        "results": serializer_class(page.items, many=True).data,
        "page": page.page,
        "size": page.size,
        "total": page.total,
        "total_pages": page.total_pages,
    }
