"""
Shared async HTTP client for the lookup services.
GETs JSON from fixed API endpoints; transient failures (429, 5xx, dropped
connections, timeouts) are retried with exponential backoff.
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp
from aiohttp import ClientSession, TCPConnector

from tracklink.config.settings import settings

logger = logging.getLogger(__name__)

_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class HttpError(Exception):
    def __init__(self, status: int, message: str):
        self.status = status
        super().__init__(f"HTTP {status}: {message}")


class _Retryable(Exception):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"HTTP {status}")


def build_session() -> ClientSession:
    connector = TCPConnector(limit=10, ssl=True)
    timeout = aiohttp.ClientTimeout(total=settings.HTTP_TIMEOUT_SECONDS)
    return ClientSession(connector=connector, timeout=timeout, trust_env=False)


async def fetch_json(
    session: ClientSession,
    url: str,
    *,
    params: Optional[dict] = None,
    attempts: int = settings.HTTP_RETRY_ATTEMPTS,
    backoff: float = settings.HTTP_RETRY_BACKOFF,
) -> Any:
    """
    GET `url` and decode the JSON body.
    Raises HttpError for a non-retryable status or a retryable one on the last
    attempt; the last connection error if every attempt failed to connect.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await _get_json(session, url, params)
        except _Retryable as exc:
            if attempt == attempts:
                raise HttpError(exc.status, "giving up after retries") from exc
            reason = str(exc)
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as exc:
            if attempt == attempts:
                raise
            reason = str(exc) or type(exc).__name__

        wait = backoff ** attempt
        logger.warning(
            "HTTP request failed, retrying",
            extra={"url": url, "reason": reason, "attempt": attempt, "wait": wait},
        )
        await asyncio.sleep(wait)
    raise ValueError("attempts must be at least 1")


async def _get_json(session: ClientSession, url: str, params: Optional[dict]) -> Any:
    async with session.get(url, params=params, allow_redirects=False) as resp:
        if resp.status in _RETRYABLE_STATUSES:
            raise _Retryable(resp.status)
        if resp.status >= 400:
            body = await resp.text()
            raise HttpError(resp.status, body[:200])
        return await resp.json(content_type=None)
