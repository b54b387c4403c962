"""
Application bootstrap for the hello server.

`create_app` assembles the ASGI application: middleware first (CORS, then
the JSON and URL-encoded body parsers), then the public routes, then the
inline root route. `run` binds the listening socket and serves the app with
uvicorn until the process is interrupted.

Usage:
    from hello_server.config import load_config
    from hello_server.server import run

    run(load_config())
"""

from __future__ import annotations

import socket
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from hello_server import __version__
from hello_server.config import ServerConfig, load_config
from hello_server.exceptions import ServerStartupError
from hello_server.middleware import build_middleware
from hello_server.observability import configure_logging, get_logger
from hello_server.routes import public

logger = get_logger(__name__)

ROOT_BODY = "<h1>Express + TypeScript Server</h1>"


def create_app(config: ServerConfig) -> FastAPI:
    """
    Build the application for ``config``.

    The returned app is not listening yet; hand it to any ASGI server or to
    `run`.
    """

    app = FastAPI(
        title="hello-server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        middleware=build_middleware(config),
    )

    public.register(app)

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def root() -> HTMLResponse:
        return HTMLResponse(ROOT_BODY, status_code=200)

    return app


def bind_socket(config: ServerConfig) -> socket.socket:
    """
    Open a TCP socket bound to ``config.host``:``config.port``.

    Raises:
        ServerStartupError: if the address cannot be bound (port in use,
            permission denied, unknown interface).
    """

    family = socket.AF_INET6 if ":" in config.host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((config.host, config.port))
    except OSError as exc:
        sock.close()
        logger.error(
            "server_bind_failed",
            host=config.host,
            port=config.port,
            error=str(exc),
        )
        raise ServerStartupError(
            f"Cannot bind {config.host}:{config.port}: {exc}",
            host=config.host,
            port=config.port,
        ) from exc

    sock.set_inheritable(True)
    return sock


def build_server(app: FastAPI, config: ServerConfig) -> uvicorn.Server:
    """Wrap ``app`` in a uvicorn server; uvicorn does not touch logging."""

    return uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_config=None,
            access_log=False,
        )
    )


def run(config: Optional[ServerConfig] = None) -> None:
    """
    Serve the application until interrupted.

    Args:
        config: Server configuration. Loaded from the environment when
            omitted, in which case a missing ``PORT`` raises `ConfigError`.

    Raises:
        ConfigError: if configuration cannot be loaded.
        ServerStartupError: if the port cannot be bound. No retry is made.
    """

    if config is None:
        config = load_config()

    configure_logging(level=config.log_level, format=config.log_format)

    sock = bind_socket(config)
    server = build_server(create_app(config), config)

    logger.info(
        "server_started",
        host=config.host,
        port=config.port,
        url=config.url,
    )
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
        logger.info("server_stopped", port=config.port)


__all__ = ["ROOT_BODY", "bind_socket", "build_server", "create_app", "run"]
