"""
Entrypoint for the hello server.

`bootstrap()` returns a configured app without starting a listener, for use
with an external ASGI server::

    uvicorn hello_server.main:bootstrap --factory --port 8080

`main()` reads ``PORT`` (and any ``.env`` file) and serves until interrupted.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from hello_server.config import ServerConfig, load_config
from hello_server.exceptions import ConfigError, ServerStartupError
from hello_server.observability import configure_logging, get_logger
from hello_server.server import create_app, run

logger = get_logger(__name__)


def bootstrap(config: Optional[ServerConfig] = None) -> FastAPI:
    """Return a configured application instance."""

    return create_app(config or load_config())


def main() -> int:
    """Run the server; return the process exit status."""

    try:
        config = load_config()
    except ConfigError as exc:
        configure_logging()
        logger.error("config_invalid", variable=exc.variable, error=str(exc))
        return 1

    try:
        run(config)
    except ServerStartupError:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
