"""
Cross-origin allow-list.

Only origins on the allow-list receive ``Access-Control-Allow-Origin``.
Requests from any other origin are still routed normally; they simply get no
CORS headers, so the browser refuses to expose the response. Preflights from
an unlisted origin are answered with Starlette's 400 rejection.
"""

from __future__ import annotations

from typing import Iterable

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

__all__ = ["ALLOWED_METHODS", "cors_middleware"]


ALLOWED_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]


def cors_middleware(allowed_origins: Iterable[str]) -> Middleware:
    """Return a CORS middleware entry restricted to ``allowed_origins``."""

    return Middleware(
        CORSMiddleware,
        allow_origins=list(allowed_origins),
        allow_methods=ALLOWED_METHODS,
    )
