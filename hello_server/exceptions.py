"""
Exception hierarchy for the hello server.

Configuration and bind faults are fatal at startup and are raised out of
`hello_server.config.load_config` and `hello_server.server.bind_socket`.
Body parse failures never leave the middleware: they are converted into an
HTTP error response before any route handler runs.
"""

from __future__ import annotations

from typing import Optional


class HelloServerError(Exception):
    """Base exception for all hello server errors."""

    pass


class ConfigError(HelloServerError):
    """
    Raised when process configuration is missing or invalid.

    Attributes:
        variable: Name of the environment variable at fault, if any
    """

    def __init__(self, message: str, variable: Optional[str] = None):
        super().__init__(message)
        self.variable = variable


class ServerStartupError(HelloServerError):
    """
    Raised when the listening socket cannot be bound.

    Attributes:
        host: Interface the server tried to bind
        port: TCP port the server tried to bind
    """

    def __init__(self, message: str, host: str, port: int):
        super().__init__(message)
        self.host = host
        self.port = port


class BodyParseError(HelloServerError):
    """
    Raised by a body parser when a request body is rejected.

    Attributes:
        status_code: HTTP status the client should receive
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "HelloServerError",
    "ConfigError",
    "ServerStartupError",
    "BodyParseError",
]
