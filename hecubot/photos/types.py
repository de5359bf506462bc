"""
Photo retrieval types and collaborator interfaces.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Union


@dataclass(frozen=True)
class QueryMode:
    query: str


@dataclass(frozen=True)
class RandomMode:
    width: int
    height: int


PhotoMode = Union[QueryMode, RandomMode]


@dataclass(frozen=True)
class PhotoRequest:
    """A parsed photo request: what to fetch and how many."""

    mode: PhotoMode
    count: int


class ProgressEvent(str, Enum):
    BATCH_START = "batch_start"  # a new page of search results is requested
    CANDIDATE = "candidate"  # a candidate image is being downloaded
    ACCEPTED = "accepted"  # a candidate passed validation


ProgressListener = Callable[[ProgressEvent], Awaitable[None]]


class ImageSearch(Protocol):
    async def search(self, query: str, start: int) -> List[str]:
        """Return candidate image URLs for one page of results starting at ``start``."""
        ...


class ImageDownloader(Protocol):
    async def download(self, url: str) -> Optional[bytes]:
        """Return the body of a successful download, or None for a non-200 answer."""
        ...


class RandomImageSource(Protocol):
    async def fetch(self, width: int, height: int) -> Optional[bytes]:
        ...
