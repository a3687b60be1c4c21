"""Async HTTP utilities using httpx for host API calls."""

from __future__ import annotations

import asyncio
import httpx
from typing import Any, Optional
from config import settings


class AsyncHttpError(RuntimeError):
    pass


async def fetch_json(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    retries: int | None = None,
    backoff: float | None = None,
) -> Any:
    """GET ``url`` and decode the JSON body.

    Transport errors are retried with exponential backoff; a non-JSON body is
    not retried. Every failure surfaces as :class:`AsyncHttpError`.
    """
    retries = retries if retries is not None else settings.DEFAULT_RETRIES
    backoff = backoff if backoff is not None else settings.DEFAULT_BACKOFF_FACTOR
    close_client = False
    if client is None:
        headers = {"User-Agent": settings.DEFAULT_USER_AGENT, "Accept": "application/json"}
        client = httpx.AsyncClient(headers=headers, timeout=settings.DEFAULT_TIMEOUT)
        close_client = True
    try:
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = await client.get(url)
                resp.raise_for_status()
            except (httpx.TimeoutException, httpx.HTTPError) as e:
                if attempt > retries:
                    raise AsyncHttpError(f"Failed after {retries} retries: {e}") from e
                await asyncio.sleep(backoff * (2 ** (attempt - 1)))
                continue
            try:
                return resp.json()
            except ValueError as e:
                raise AsyncHttpError(f"Invalid JSON from {url}: {e}") from e
    finally:
        if close_client:
            await client.aclose()
