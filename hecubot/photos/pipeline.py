"""
Photo retrieval pipeline.

Fetches exactly ``count`` validated images either from paged search results
or from a random-image service. Every candidate is sniffed from its bytes and
only JPEG, PNG and WebP survive. Search requests count against a daily quota;
random requests do not.
"""
from __future__ import annotations

import io
import random
from typing import List, Optional, Union

import httpx

from ..exceptions import PhotoSourceExhausted
from ..types import PhotoResult, QuotaExceeded
from ..utils.logging import get_logger
from .quota import DailyQuotaCounter
from .sniff import extension_for, sniff_mime
from .types import (
    ImageDownloader,
    ImageSearch,
    PhotoMode,
    ProgressEvent,
    ProgressListener,
    QueryMode,
    RandomImageSource,
    RandomMode,
)

logger = get_logger(__name__)

# Per-candidate failures that only discard the candidate
_CANDIDATE_ERRORS = (httpx.HTTPError, OSError)


class PhotoRetrievalPipeline:
    def __init__(
        self,
        search: ImageSearch,
        downloader: ImageDownloader,
        random_source: RandomImageSource,
        quota: DailyQuotaCounter,
        group_limit: int = 10,
        max_start: int = 90,
        page_size: int = 10,
        max_idle_batches: int = 10,
        max_random_attempts: int = 30,
        rng: Optional[random.Random] = None,
    ):
        self.search = search
        self.downloader = downloader
        self.random_source = random_source
        self.quota = quota
        self.group_limit = group_limit
        self.max_start = max_start
        self.page_size = page_size
        self.max_idle_batches = max_idle_batches
        self.max_random_attempts = max_random_attempts
        self.rng = rng or random.Random()

    async def fetch(
        self,
        mode: PhotoMode,
        count: int,
        progress: Optional[ProgressListener] = None,
    ) -> Union[List[PhotoResult], QuotaExceeded]:
        """Fetch ``count`` photos.

        Returns QuotaExceeded without touching the network when the daily
        search quota is used up. Raises PhotoSourceExhausted when the source
        stops producing acceptable images.
        """
        if not 1 <= count <= self.group_limit:
            raise ValueError(f"count must be between 1 and {self.group_limit}, got {count}")

        if isinstance(mode, QueryMode):
            if not self.quota.try_consume():
                return QuotaExceeded(self.quota.maximum)
            return await self._fetch_query(mode.query, count, progress)
        if isinstance(mode, RandomMode):
            return await self._fetch_random(mode, count, progress)
        raise TypeError(f"Unsupported photo mode: {mode!r}")

    async def _fetch_query(
        self, query: str, count: int, progress: Optional[ProgressListener]
    ) -> List[PhotoResult]:
        photos: List[PhotoResult] = []
        start = self.rng.randint(1, self.max_start)
        idle_batches = 0
        try:
            while len(photos) < count:
                await _emit(progress, ProgressEvent.BATCH_START)
                candidates = list(await self.search.search(query, start))
                accepted_before = len(photos)

                while candidates and len(photos) < count:
                    url = candidates.pop(self.rng.randrange(len(candidates)))
                    await _emit(progress, ProgressEvent.CANDIDATE)
                    try:
                        data = await self.downloader.download(url)
                    except _CANDIDATE_ERRORS as e:
                        logger.warning(
                            f"⚠ Error downloading candidate image: {e}",
                            extra={"subsys": "photos", "event": "candidate.error",
                                   "detail": {"url": url}},
                        )
                        continue
                    photo = self._accept(data, f"{query}{len(photos)}")
                    if photo is not None:
                        photos.append(photo)
                        await _emit(progress, ProgressEvent.ACCEPTED)

                if len(photos) == accepted_before:
                    idle_batches += 1
                    if idle_batches >= self.max_idle_batches:
                        raise PhotoSourceExhausted(
                            count, len(photos), f"{idle_batches} result pages without a usable image"
                        )
                else:
                    idle_batches = 0

                start += self.page_size
                if start > self.max_start:
                    start = 1
        except BaseException:
            _close_all(photos)
            raise

        logger.info(
            f"✔ Collected {len(photos)} photos for query",
            extra={"subsys": "photos", "event": "fetch.query_done"},
        )
        return photos

    async def _fetch_random(
        self, mode: RandomMode, count: int, progress: Optional[ProgressListener]
    ) -> List[PhotoResult]:
        photos: List[PhotoResult] = []
        failed_attempts = 0
        try:
            while len(photos) < count:
                await _emit(progress, ProgressEvent.CANDIDATE)
                try:
                    data = await self.random_source.fetch(mode.width, mode.height)
                except _CANDIDATE_ERRORS as e:
                    logger.warning(
                        f"⚠ Error downloading random image: {e}",
                        extra={"subsys": "photos", "event": "candidate.error"},
                    )
                    data = None

                photo = self._accept(data, str(len(photos))) if data is not None else None
                if photo is None:
                    failed_attempts += 1
                    if failed_attempts >= self.max_random_attempts:
                        raise PhotoSourceExhausted(
                            count, len(photos), f"{failed_attempts} random images rejected in a row"
                        )
                    continue

                failed_attempts = 0
                photos.append(photo)
                await _emit(progress, ProgressEvent.ACCEPTED)
        except BaseException:
            _close_all(photos)
            raise

        logger.info(
            f"✔ Collected {len(photos)} random photos ({mode.width}x{mode.height})",
            extra={"subsys": "photos", "event": "fetch.random_done"},
        )
        return photos

    def _accept(self, data: Optional[bytes], stem: str) -> Optional[PhotoResult]:
        if not data:
            return None
        mime = sniff_mime(data)
        ext = extension_for(mime) if mime else None
        if ext is None:
            logger.debug(
                f"Rejected candidate with content type {mime}",
                extra={"subsys": "photos", "event": "candidate.rejected"},
            )
            return None
        return PhotoResult(content=io.BytesIO(data), name=f"{stem}{ext}", mime=mime)


async def _emit(progress: Optional[ProgressListener], event: ProgressEvent) -> None:
    if progress is not None:
        await progress(event)


def _close_all(photos: List[PhotoResult]) -> None:
    for photo in photos:
        photo.close()
