"""
Logging for the hello server.

Usage:
    from hello_server.observability import configure_logging, get_logger

    configure_logging(level="INFO", format="json")
    logger = get_logger(__name__)
    logger.info("server_started", port=8080)
"""

from hello_server.observability.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
