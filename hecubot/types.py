"""
Shared value types: commands, pending requests, inbound messages, outcome
values and the messaging interface the router talks to.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import BinaryIO, Optional, Protocol, Sequence, Union


class Command(Enum):
    """Enumeration of all supported bot commands."""

    START = auto()  # Activate the bot in a chat
    STOP = auto()  # Deactivate the bot and drop pending requests
    LIST = auto()  # Show the vocabulary
    HELP = auto()  # Show help message (works without activation)
    SAY = auto()  # Two-step: speak a sentence
    BINARY = auto()  # Two-step: read a string out in binary
    PHOTO = auto()  # Two-step: search or random photos


@dataclass(frozen=True)
class ParsedCommand:
    """Represents a parsed command with its type and the raw command token."""

    command: Command
    token: str


class RequestKind(Enum):
    SAY = "say"
    BINARY = "binary"
    PHOTO = "photo"


@dataclass(frozen=True)
class PendingRequest:
    """A two-step request waiting for the user's next message."""

    user_id: int
    kind: RequestKind

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.user_id}"


class ChatAction(Enum):
    """Progress indicators shown while a reply is being prepared."""

    TYPING = "typing"
    RECORD_AUDIO = "record_audio"
    UPLOAD_PHOTO = "upload_photo"


@dataclass(frozen=True)
class InboundMessage:
    """Platform-agnostic view of an incoming text message."""

    chat_id: int
    user_id: int
    message_id: int
    text: str
    is_private: bool


# --- Outcome values ---------------------------------------------------------


@dataclass(frozen=True)
class WordNotFound:
    word: str


@dataclass(frozen=True)
class TooLarge:
    length: int
    limit: int


@dataclass(frozen=True)
class QuotaExceeded:
    limit: int


class MalformedReason(Enum):
    UNPARSEABLE = "unparseable"
    OUT_OF_RANGE = "out_of_range"
    EMPTY_QUERY = "empty_query"


@dataclass(frozen=True)
class MalformedRequest:
    reason: MalformedReason
    detail: str = ""


# --- Photos -----------------------------------------------------------------


@dataclass
class PhotoResult:
    """A validated image stream. Delivered once, then closed."""

    content: BinaryIO
    name: str
    mime: str

    def close(self) -> None:
        self.content.close()


PhotoResults = Sequence[PhotoResult]


class Messenger(Protocol):
    """Outbound side of the chat platform."""

    async def send_text(self, chat_id: int, text: str, reply_to: Optional[int] = None) -> None:
        ...

    async def send_audio(self, chat_id: int, wav_bytes: bytes, reply_to: Optional[int] = None) -> None:
        ...

    async def send_photo(self, chat_id: int, photo: PhotoResult, reply_to: Optional[int] = None) -> None:
        ...

    async def send_photo_group(
        self, chat_id: int, photos: PhotoResults, reply_to: Optional[int] = None
    ) -> None:
        ...

    async def send_progress(self, chat_id: int, action: ChatAction) -> None:
        ...


Outcome = Union[WordNotFound, TooLarge, QuotaExceeded, MalformedRequest]


__all__ = [
    "ChatAction",
    "Command",
    "InboundMessage",
    "MalformedReason",
    "MalformedRequest",
    "Messenger",
    "Outcome",
    "ParsedCommand",
    "PendingRequest",
    "PhotoResult",
    "PhotoResults",
    "QuotaExceeded",
    "RequestKind",
    "TooLarge",
    "WordNotFound",
]
