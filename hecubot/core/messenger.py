"""
Discord implementation of the Messenger interface used by the router.
"""
from __future__ import annotations

import io
from typing import List, Optional

import aiohttp
import discord

from ..exceptions import DeliveryError
from ..types import ChatAction, PhotoResult, PhotoResults
from ..utils.logging import get_logger
from ..voice import VoiceMessagePublisher

# Discord limits
MESSAGE_CHAR_LIMIT = 2000
ATTACHMENTS_PER_MESSAGE = 10

_TRANSPORT_ERRORS = (discord.HTTPException, discord.ClientException, aiohttp.ClientError)


def split_message(text: str, limit: int = MESSAGE_CHAR_LIMIT) -> List[str]:
    """Split text into chunks Discord accepts, breaking on newlines, then spaces."""
    chunks: List[str] = []
    rest = text
    while len(rest) > limit:
        cut = rest.rfind("\n", 0, limit + 1)
        if cut <= 0:
            cut = rest.rfind(" ", 0, limit + 1)
        if cut <= 0:
            cut = limit
        chunks.append(rest[:cut])
        rest = rest[cut:].lstrip("\n ")
    if rest or not chunks:
        chunks.append(rest)
    return chunks


class DiscordMessenger:
    """Sends replies to Discord channels (guild text channels, threads and DMs)."""

    def __init__(self, client: discord.Client, publisher: Optional[VoiceMessagePublisher] = None):
        self.client = client
        self.publisher = publisher
        self.logger = get_logger(__name__)

    async def _channel(self, chat_id: int) -> discord.abc.Messageable:
        channel = self.client.get_channel(chat_id)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(chat_id)
            except _TRANSPORT_ERRORS as e:
                raise DeliveryError(f"Channel {chat_id} not reachable: {e}") from e
        return channel

    @staticmethod
    def _reference(chat_id: int, reply_to: Optional[int]) -> Optional[discord.MessageReference]:
        if reply_to is None:
            return None
        return discord.MessageReference(message_id=reply_to, channel_id=chat_id, fail_if_not_exists=False)

    async def _send(self, chat_id: int, reply_to: Optional[int] = None, **kwargs) -> None:
        channel = await self._channel(chat_id)
        reference = self._reference(chat_id, reply_to)
        if reference is not None:
            kwargs["reference"] = reference
            kwargs["mention_author"] = False
        try:
            await channel.send(**kwargs)
        except _TRANSPORT_ERRORS as e:
            raise DeliveryError(f"Failed to send message to channel {chat_id}: {e}") from e

    async def send_text(self, chat_id: int, text: str, reply_to: Optional[int] = None) -> None:
        for i, chunk in enumerate(split_message(text)):
            await self._send(chat_id, reply_to if i == 0 else None, content=chunk)

    async def send_audio(self, chat_id: int, wav_bytes: bytes, reply_to: Optional[int] = None) -> None:
        ogg_bytes: Optional[bytes] = None
        if self.publisher is not None:
            result = await self.publisher.publish(chat_id, wav_bytes, reply_to)
            if result.ok:
                return
            ogg_bytes = result.ogg_bytes
            self.logger.debug(
                "Native voice message unavailable, sending audio attachment",
                extra={"subsys": "messenger", "event": "audio.fallback", "chat_id": chat_id},
            )

        if ogg_bytes:
            file = discord.File(io.BytesIO(ogg_bytes), filename="hecu.ogg")
        else:
            file = discord.File(io.BytesIO(wav_bytes), filename="hecu.wav")
        await self._send(chat_id, reply_to, file=file)

    async def send_photo(self, chat_id: int, photo: PhotoResult, reply_to: Optional[int] = None) -> None:
        await self._send(chat_id, reply_to, file=discord.File(photo.content, filename=photo.name))

    async def send_photo_group(
        self, chat_id: int, photos: PhotoResults, reply_to: Optional[int] = None
    ) -> None:
        if len(photos) > ATTACHMENTS_PER_MESSAGE:
            raise DeliveryError(
                f"Cannot send {len(photos)} photos in one message (max {ATTACHMENTS_PER_MESSAGE})"
            )
        files = [discord.File(p.content, filename=p.name) for p in photos]
        await self._send(chat_id, reply_to, files=files)

    async def send_progress(self, chat_id: int, action: ChatAction) -> None:
        """Discord has a single typing indicator for every kind of action."""
        channel = await self._channel(chat_id)
        try:
            await channel.typing()
        except _TRANSPORT_ERRORS as e:
            raise DeliveryError(f"Failed to send {action.value} indicator to {chat_id}: {e}") from e
