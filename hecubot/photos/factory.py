"""
Shared HTTP client for the image collaborators and construction of the photo
pipeline from configuration.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

import httpx

from ..config import DEFAULT_USER_AGENT
from ..utils.logging import get_logger
from .pipeline import PhotoRetrievalPipeline
from .quota import DailyQuotaCounter
from .sources import GoogleImageSearch, HttpImageDownloader, PicsumRandomImage

logger = get_logger(__name__)

_client_lock = asyncio.Lock()
_client: Optional[httpx.AsyncClient] = None


def _build_client(max_connections: int, timeout_s: float, user_agent: str) -> httpx.AsyncClient:
    limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_connections)
    return httpx.AsyncClient(
        limits=limits,
        timeout=httpx.Timeout(timeout_s),
        headers={"User-Agent": user_agent},
        # the random-image service answers with a redirect to the actual file
        follow_redirects=True,
    )


async def get_http_client(config: Dict[str, Any]) -> httpx.AsyncClient:
    global _client
    if _client is not None:
        return _client
    async with _client_lock:
        if _client is None:
            _client = _build_client(
                config.get("HTTP_POOL_MAX_CONNECTIONS", 10),
                config.get("HTTP_TIMEOUT_S", 15.0),
                config.get("HTTP_USER_AGENT") or DEFAULT_USER_AGENT,
            )
            logger.debug("Created shared httpx.AsyncClient for photo sources")
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        try:
            await _client.aclose()
        except (httpx.HTTPError, RuntimeError) as e:
            logger.debug(f"Error closing photo HTTP client: {e}")
        finally:
            _client = None


async def build_photo_pipeline(config: Dict[str, Any]) -> PhotoRetrievalPipeline:
    """Wire the pipeline and its collaborators on the shared client."""
    client = await get_http_client(config)
    downloader = HttpImageDownloader(client)
    return PhotoRetrievalPipeline(
        search=GoogleImageSearch(
            client,
            config.get("GOOGLE_API_KEY"),
            config.get("GOOGLE_SEARCH_ENGINE_ID"),
            config["GOOGLE_SEARCH_ENDPOINT"],
            page_size=config["SEARCH_PAGE_SIZE"],
        ),
        downloader=downloader,
        random_source=PicsumRandomImage(downloader, config["RANDOM_IMAGE_ENDPOINT"]),
        quota=DailyQuotaCounter(config["MAX_PHOTO_REQUESTS"]),
        group_limit=config["PHOTO_GROUP_LIMIT"],
        max_start=config["SEARCH_MAX_START"],
        page_size=config["SEARCH_PAGE_SIZE"],
        max_idle_batches=config["PHOTO_MAX_IDLE_BATCHES"],
        max_random_attempts=config["PHOTO_MAX_RANDOM_ATTEMPTS"],
    )
