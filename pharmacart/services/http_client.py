from __future__ import annotations

"""Lightweight async HTTP client util with retry.

Thin wrapper over httpx focused on GET JSON with limited retries. Every failure
mode (transport error, timeout, status >= 400, undecodable body) is reported as
HttpError so callers only need one except clause.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger("pharmacart.http")

DEFAULT_TIMEOUT = 5.0  # httpx default


class HttpError(Exception):
    pass


async def get_json(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = 0,
    backoff: float = 0.5,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    last_err: Optional[Exception] = None
    async with httpx.AsyncClient(
        timeout=timeout, transport=transport, follow_redirects=True
    ) as client:
        for attempt in range(retries + 1):
            try:
                resp = await client.get(url)
                if resp.status_code >= 400:
                    raise HttpError(f"HTTP {resp.status_code} for {url}")
                return resp.json()
            except (httpx.HTTPError, HttpError, ValueError) as e:  # ValueError for JSON decode
                last_err = e
                logger.debug("GET %s failed (attempt %d): %s", url, attempt + 1, e)
                if attempt == retries:
                    break
                await asyncio.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
