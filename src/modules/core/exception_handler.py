"""DRF exception handler.

- ``DomainError`` subclasses become ``{"detail", "code"}`` responses with
  the status they declare.  They are expected outcomes and are logged at
  info level only.
- Anything DRF already understands (validation, authentication,
  throttling) keeps DRF's default rendering.
- Everything else is logged with its traceback and answered with a
  generic 500 that exposes no internal detail.
"""

from __future__ import annotations

from typing import Any

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.exceptions import DomainError

logger = structlog.get_logger(__name__)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    if isinstance(exc, DomainError):
        logger.info(
            "api.domain_error",
            error=type(exc).__name__,
            code=exc.code,
            status_code=exc.status_code,
        )
        return Response(
            {"detail": exc.detail, "code": exc.code},
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception(
        "api.unhandled_error",
        error=type(exc).__name__,
        view=type(view).__name__ if view is not None else None,
    )
    return Response(
        {"detail": "Internal server error.", "code": "internal_error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
