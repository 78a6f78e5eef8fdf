"""Shared HTTP utilities for botapidocs.

One GET with a total deadline.  httpx timeouts restart for every phase
(connect, headers, each read), so the whole request runs on an event loop
under ``anyio.fail_after``, which bounds connect, headers and body
together by wall-clock time.  No retries: the refresh interval is the
retry cadence.
"""

from __future__ import annotations

import functools

import anyio
import httpx

from botapidocs.errors import TransportError

DEFAULT_TIMEOUT = 10.0  # seconds, connect + headers + body
USER_AGENT = "botapidocs/0.1 (+https://github.com/PaulSonOfLars/telegram-bot-api-spec)"


async def _read_body(
    url: str, timeout: float, transport: httpx.AsyncBaseTransport | None, kwargs: dict
) -> bytes:
    chunks: list[bytes] = []
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport) as client:
        async with client.stream("GET", url, **kwargs) as resp:
            if not 200 <= resp.status_code < 300:
                raise TransportError(url, resp.status_code)
            async for chunk in resp.aiter_bytes():
                chunks.append(chunk)
    return b"".join(chunks)


async def _get_with_deadline(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
    **kwargs,
) -> bytes:
    kwargs.setdefault("follow_redirects", True)
    kwargs.setdefault("headers", {"User-Agent": USER_AGENT})
    try:
        with anyio.fail_after(timeout):
            return await _read_body(url, timeout, transport, kwargs)
    except TimeoutError as e:
        raise TransportError(url, 0, f"no complete response within {timeout:g}s") from e
    except httpx.TimeoutException as e:
        raise TransportError(url, 0, f"timed out after {timeout:g}s") from e
    except httpx.HTTPError as e:
        raise TransportError(url, 0, f"{type(e).__name__}: {e}") from e


def get_with_deadline(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
    **kwargs,
) -> bytes:
    """Fetch ``url`` and return the raw body.

    Must be called from a thread without a running event loop (the
    refresh worker, or a worker thread from ``anyio.to_thread``).

    Args:
        url: Request URL.
        timeout: Total deadline in seconds (default 10), covering connect,
            response headers and the whole body.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        **kwargs: Passed to ``AsyncClient.stream`` (params, headers, ...).

    Returns:
        The response body.

    Raises:
        TransportError: Connection/TLS failure, timeout, deadline exceeded,
            or a non-2xx status.
    """
    return anyio.run(
        functools.partial(_get_with_deadline, url, timeout=timeout, transport=transport, **kwargs)
    )
