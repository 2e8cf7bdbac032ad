"""Async HTTP helpers for JSON APIs."""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from utils.logging import get_logger

logger = get_logger("utils.http")


class HttpRequestError(Exception):
    """Transport failure, timeout or non-200 response."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


async def request_json(
    method: str,
    url: str,
    timeout: float = 10,
    log_url: Optional[str] = None,
    **kwargs: Any,
) -> Any:
    """Send a request and return the decoded JSON body.

    ``log_url`` replaces ``url`` in errors and logs, for URLs carrying secrets.

    Raises:
        HttpRequestError: On transport failure, timeout, non-200 status or a non-JSON body
    """
    shown_url = log_url or url
    logger.debug("%s %s", method, shown_url)
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.request(method, url, **kwargs) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise HttpRequestError(
                        f"HTTP {resp.status} for {shown_url}: {text[:200]}", status=resp.status
                    )
                return await resp.json(content_type=None)
    except asyncio.TimeoutError as e:
        raise HttpRequestError(f"Timed out after {timeout}s for {shown_url}") from e
    except (aiohttp.ClientError, ValueError) as e:
        raise HttpRequestError(f"Request failed for {shown_url}: {e}") from e


async def get_json(url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 10) -> Any:
    return await request_json("GET", url, timeout=timeout, headers=headers)


async def post_json(url: str, payload: Dict[str, Any], timeout: float = 10, log_url: Optional[str] = None) -> Any:
    return await request_json("POST", url, timeout=timeout, log_url=log_url, json=payload)
