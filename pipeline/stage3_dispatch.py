"""Stage 3: Retry Dispatcher. Obtain the upstream response stream.

Sends one chat-completion request per attempt through the OpenAI SDK's raw
streaming response API and yields the undecoded body bytes. A single deadline
(`settings.timeout`) covers every attempt, every backoff sleep and every body
read; when it expires the in-flight request is aborted and `Timeout` raised.

Status handling:
  2xx        proceed with the stream
  401 / 403  FatalHttp (credential rejected), never retried
  429 / 5xx  TransientHttp, retried
  other      FatalHttp, never retried

Transient errors, connection failures and per-request timeouts are retried up
to `settings.max_attempts` times with a linear backoff of
`attempt * settings.retry_base_delay` seconds.
"""
import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
import openai
from openai import AsyncAPIResponse, AsyncOpenAI

from pipeline.errors import (
    FatalHttp,
    MalformedPayload,
    MissingCredential,
    PipelineError,
    Timeout,
    TransportFailure,
    classify_status,
)
from settings import Settings
from utils.openai_utils import open_client

logger = logging.getLogger(__name__)

_PING_PROMPT = "Hello"
_PING_MAX_TOKENS = 5


@asynccontextmanager
async def dispatch(
    prompt: str,
    credential: str | None,
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[AsyncIterator[bytes]]:
    """Yield the raw body of a successful streaming response.

    Usage:
        async with dispatch(prompt, credential, settings) as body:
            async for chunk in body:
                ...

    Raises a classified PipelineError; leaving the block releases the
    response and any client it created (an injected `http_client` stays
    open), whether it exits normally, by error or by cancellation.
    """
    if not credential or not credential.strip():
        raise MissingCredential("no API key configured")
    credential = credential.strip()

    try:
        async with asyncio.timeout(settings.timeout):
            async with AsyncExitStack() as stack:
                client = await stack.enter_async_context(
                    open_client(credential, settings, http_client)
                )
                response = await _open_with_retry(stack, client, prompt, settings)
                yield _iter_body(response)
    except TimeoutError as exc:
        raise Timeout(f"no complete response within {settings.timeout:g}s") from exc


async def check_connection(
    credential: str | None,
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> bool:
    """Send a tiny non-streaming request to verify endpoint and credential.

    Single attempt, no retries: the options page reports the first failure.
    """
    if not credential or not credential.strip():
        raise MissingCredential("no API key configured")
    credential = credential.strip()

    try:
        async with asyncio.timeout(settings.timeout):
            async with open_client(credential, settings, http_client) as client:
                await client.chat.completions.create(
                    model=settings.resolved_model,
                    messages=[{"role": "user", "content": _PING_PROMPT}],
                    max_tokens=_PING_MAX_TOKENS,
                )
    except TimeoutError as exc:
        raise Timeout(f"no response within {settings.timeout:g}s") from exc
    except openai.APIError as exc:
        raise _classify(exc) from exc

    logger.info("Connection check succeeded (%s, %s).",
                settings.resolved_base_url, settings.resolved_model)
    return True


# ---------------------------------------------------------------------------
# Attempts
# ---------------------------------------------------------------------------

async def _open_with_retry(
    stack: AsyncExitStack,
    client: AsyncOpenAI,
    prompt: str,
    settings: Settings,
) -> AsyncAPIResponse:
    """Open the response, retrying transient failures with linear backoff."""
    max_attempts = settings.max_attempts

    for attempt in range(1, max_attempts + 1):
        try:
            response = await _open(stack, client, prompt, settings)
        except PipelineError as exc:
            if not exc.retryable or attempt == max_attempts:
                logger.debug("Giving up after attempt %d/%d: %s", attempt, max_attempts, exc)
                raise
            delay = attempt * settings.retry_base_delay
            logger.warning(
                "%s on attempt %d/%d; retrying in %.1fs.",
                exc.kind, attempt, max_attempts, delay,
            )
            await _backoff(delay)
        else:
            logger.debug("Response %d obtained on attempt %d/%d.",
                         response.status_code, attempt, max_attempts)
            return response

    raise RuntimeError("Unreachable")  # pragma: no cover


async def _open(
    stack: AsyncExitStack,
    client: AsyncOpenAI,
    prompt: str,
    settings: Settings,
) -> AsyncAPIResponse:
    try:
        return await stack.enter_async_context(
            client.chat.completions.with_streaming_response.create(
                model=settings.resolved_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
                stream=True,
            )
        )
    except openai.APIError as exc:
        raise _classify(exc) from exc


async def _backoff(delay: float) -> None:
    await asyncio.sleep(delay)


async def _iter_body(response: AsyncAPIResponse) -> AsyncIterator[bytes]:
    """Raw body chunks; transport failures mid-body are classified, not retried."""
    try:
        async for chunk in response.iter_bytes():
            yield chunk
    except httpx.TimeoutException as exc:
        raise Timeout("response body read timed out") from exc
    except httpx.TransportError as exc:
        raise TransportFailure(f"response body read failed: {type(exc).__name__}") from exc


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def _classify(exc: openai.APIError) -> PipelineError:
    """Translate an SDK error into the pipeline's taxonomy."""
    if isinstance(exc, openai.APIStatusError):
        error_cls = classify_status(exc.status_code) or FatalHttp
        return error_cls(
            "upstream rejected the request",
            status=exc.status_code,
            snippet=exc.message,
        )
    if isinstance(exc, openai.APITimeoutError):
        return Timeout("request timed out")
    if isinstance(exc, openai.APIConnectionError):
        return TransportFailure(f"connection failed: {exc.message}")
    return MalformedPayload("unexpected response from upstream", snippet=str(exc))
