"""Shared utilities for OpenAI-compatible API access."""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from openai import AsyncOpenAI

from settings import Settings


def build_client(
    credential: str,
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncOpenAI:
    """Return an AsyncOpenAI client pointed at the configured endpoint.

    The SDK's built-in retries are disabled (`max_retries=0`): the dispatcher
    owns the retry policy so that attempts and backoff are counted in one place.
    `http_client` lets hosts share a connection pool and tests plug in an
    `httpx.MockTransport`.
    """
    return AsyncOpenAI(
        api_key=credential,
        base_url=settings.resolved_base_url,
        timeout=settings.timeout,
        max_retries=0,
        http_client=http_client,
    )


@asynccontextmanager
async def open_client(
    credential: str,
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[AsyncOpenAI]:
    """Yield a client for one call.

    The client is closed on exit only when it owns its transport; an
    injected `http_client` belongs to the caller and stays open.
    """
    client = build_client(credential, settings, http_client)
    try:
        yield client
    finally:
        if http_client is None:
            await client.close()
