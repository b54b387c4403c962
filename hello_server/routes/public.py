"""Public routes that need no authentication."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

HELLO_PATH = "/hello"
HELLO_BODY = "Hello world"


async def hello() -> PlainTextResponse:
    """Greet the caller; request data is ignored."""
    return PlainTextResponse(HELLO_BODY, status_code=200)


def register(app: FastAPI) -> None:
    """Bind ``GET /hello`` on ``app``."""

    app.add_api_route(
        HELLO_PATH,
        hello,
        methods=["GET"],
        response_class=PlainTextResponse,
        include_in_schema=False,
    )


__all__ = ["HELLO_BODY", "HELLO_PATH", "register"]
