"""
HTTP collaborators of the photo pipeline: Google Custom Search for image
URLs, a plain downloader and the Lorem Picsum random-image service.
"""
from __future__ import annotations

from typing import List, Optional

import httpx

from ..exceptions import APIError
from ..utils.logging import get_logger

logger = get_logger(__name__)

GOOGLE_SEARCH_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
PICSUM_ENDPOINT = "https://picsum.photos"

# Custom Search returns at most 10 results per call
SEARCH_PAGE_SIZE = 10


class GoogleImageSearch:
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        engine_id: Optional[str],
        endpoint: str = GOOGLE_SEARCH_ENDPOINT,
        page_size: int = SEARCH_PAGE_SIZE,
    ):
        self.client = client
        self.api_key = api_key
        self.engine_id = engine_id
        self.endpoint = endpoint
        self.page_size = page_size

    async def search(self, query: str, start: int) -> List[str]:
        if not self.api_key or not self.engine_id:
            raise APIError("Image search is not configured (GOOGLE_API_KEY / GOOGLE_SEARCH_ENGINE_ID)")

        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "searchType": "image",
            "num": self.page_size,
            "start": start,
        }
        response = await self.client.get(self.endpoint, params=params)
        if response.status_code != 200:
            raise APIError(f"Image search failed with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise APIError("Image search returned a non-JSON body") from e

        items = body.get("items") if isinstance(body, dict) else None
        if not isinstance(items, list):
            items = []
        links = [
            item["link"]
            for item in items
            if isinstance(item, dict) and isinstance(item.get("link"), str) and item["link"]
        ]
        logger.debug(
            f"Image search returned {len(links)} candidates",
            extra={"subsys": "photos", "event": "search.page", "detail": {"start": start}},
        )
        return links


class HttpImageDownloader:
    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def download(self, url: str) -> Optional[bytes]:
        response = await self.client.get(url)
        if response.status_code != 200:
            logger.debug(
                f"Discarding {url}: HTTP {response.status_code}",
                extra={"subsys": "photos", "event": "download.status"},
            )
            return None
        return response.content


class PicsumRandomImage:
    def __init__(self, downloader: HttpImageDownloader, endpoint: str = PICSUM_ENDPOINT):
        self.downloader = downloader
        self.endpoint = endpoint.rstrip("/")

    async def fetch(self, width: int, height: int) -> Optional[bytes]:
        return await self.downloader.download(f"{self.endpoint}/{width}/{height}")
