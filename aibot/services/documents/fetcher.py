"""Plain HTTP GET for documents referenced by URL."""

import asyncio
from typing import Optional

import aiohttp
from loguru import logger

from aibot.errors import FileDownloadError
from aibot.settings import settings


async def fetch_url(url: str, timeout: Optional[int] = None) -> bytes:
    """
    Download a document.

    :param url: absolute http(s) URL
    :param timeout: total request timeout in seconds
    :return: response body
    :raises FileDownloadError: on network errors or a non-200 response
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout or settings.http_timeout)
    logger.debug(f"Fetching document: {url}")

    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise FileDownloadError(
                        f"GET {url} returned HTTP {response.status}"
                    )
                body = await response.read()
        except aiohttp.ClientError as e:
            raise FileDownloadError(f"GET {url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise FileDownloadError(f"GET {url} timed out") from e

    logger.debug(f"Fetched {len(body)} bytes from {url}")
    return body
