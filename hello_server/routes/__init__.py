"""
Route registrars.

Each module exposes a ``register(app)`` function that binds its handlers onto
the shared application object. The bootstrap in `hello_server.server` calls
them in turn.
"""

from __future__ import annotations

from hello_server.routes import public

__all__ = ["public"]
