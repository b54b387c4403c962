"""
Minimal HTTP server scaffold.

The package exposes two static routes (``/`` and ``/hello``) behind a CORS
allow-list and JSON / URL-encoded body parsers. Layout:

* `hello_server.server` - application factory and listener.
* `hello_server.routes` - route registrars that attach handlers to an app.
* `hello_server.middleware` - CORS and body-parsing middleware.
* `hello_server.config` - environment-driven configuration.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
