"""
Basic tests for hello-server
"""
import httpx
import pytest

from hello_server import __version__


def test_version():
    """Test that version is defined."""
    assert __version__ == "0.1.0"


def test_import():
    """Test that the package and its entrypoint can be imported."""
    import hello_server
    import hello_server.main

    assert hello_server is not None
    assert callable(hello_server.main.main)


@pytest.mark.asyncio
async def test_repeated_requests_are_byte_identical(app):
    """Handlers hold no state, so identical requests give identical bodies."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        for path in ("/", "/hello"):
            first = await client.get(path)
            for _ in range(5):
                again = await client.get(path)
                assert again.status_code == first.status_code == 200
                assert again.content == first.content
                assert again.headers["content-type"] == first.headers["content-type"]
