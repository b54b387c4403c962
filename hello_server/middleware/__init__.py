"""
Middleware stack for the hello server.

`build_middleware` returns the stack outermost-first, which is the order
FastAPI's ``middleware=`` argument expects. The canonical order is
CORS -> JSON -> URL-encoded: CORS sees every request first, and a body is
claimed by the JSON parser before the URL-encoded parser looks at it.
"""

from __future__ import annotations

from typing import List

from starlette.middleware import Middleware

from hello_server.config import ServerConfig
from hello_server.middleware.body_parser import (
    JSONBodyParser,
    URLEncodedBodyParser,
    parse_nested_query,
)
from hello_server.middleware.cors import cors_middleware


def build_middleware(config: ServerConfig) -> List[Middleware]:
    """Assemble the middleware stack for ``config``."""

    return [
        cors_middleware(config.allowed_origins),
        Middleware(JSONBodyParser, limit=config.json_limit),
        Middleware(
            URLEncodedBodyParser,
            limit=config.urlencoded_limit,
            parameter_limit=config.parameter_limit,
        ),
    ]


__all__ = [
    "JSONBodyParser",
    "URLEncodedBodyParser",
    "build_middleware",
    "cors_middleware",
    "parse_nested_query",
]
