"""Outbound HTTP client dependency."""
import httpx


async def get_http_client():
    """Dependency yielding an ``httpx.AsyncClient`` scoped to one request.

    Library default timeouts apply; nothing is retried.
    """
    async with httpx.AsyncClient() as client:
        yield client
