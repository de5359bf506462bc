"""Discord client: builds the engines and feeds inbound messages to the router."""
from __future__ import annotations

from typing import Optional

import discord
from discord.ext import commands

from ..audio import BinaryEncoder, SentenceAssembler, WordAudioStore
from ..photos.factory import build_photo_pipeline, close_http_client
from ..router import ConversationRouter
from ..tracker import RequestTracker
from ..types import InboundMessage
from ..utils.logging import get_logger
from ..voice import VoiceMessagePublisher
from .messenger import DiscordMessenger


def to_inbound(message: discord.Message) -> InboundMessage:
    """Platform-agnostic view of a Discord message."""
    return InboundMessage(
        chat_id=message.channel.id,
        user_id=message.author.id,
        message_id=message.id,
        text=message.content or "",
        is_private=message.guild is None,
    )


class HecuBot(commands.Bot):
    """Discord bot speaking with the voice of the H.E.C.U. radio operators."""

    def __init__(self, *args, config: dict | None = None, **kwargs):
        self.config = config or {}
        if "command_prefix" not in kwargs:
            kwargs["command_prefix"] = self.config.get("COMMAND_PREFIX", "!")
        if "intents" not in kwargs:
            kwargs["intents"] = discord.Intents.none()
        kwargs.setdefault("help_command", None)

        super().__init__(*args, **kwargs)
        self.logger = get_logger(__name__)
        self.tracker = RequestTracker()
        self.router: Optional[ConversationRouter] = None

    async def setup_hook(self) -> None:
        """Load the vocabulary and wire the engines before connecting."""
        store = WordAudioStore.load(self.config["WORDS_DIR"])
        pipeline = await build_photo_pipeline(self.config)
        publisher = VoiceMessagePublisher(
            self.config.get("DISCORD_TOKEN"),
            enabled=self.config.get("VOICE_ENABLE_NATIVE", True),
            timeout_s=self.config.get("VOICE_PUBLISHER_TIMEOUT_S", 30.0),
            bitrate=self.config.get("VOICE_PUBLISHER_OPUS_BITRATE", "64k"),
        )
        self.router = ConversationRouter(
            tracker=self.tracker,
            store=store,
            assembler=SentenceAssembler(store),
            encoder=BinaryEncoder(store, self.config.get("BINARY_LENGTH_LIMIT", 2500)),
            pipeline=pipeline,
            messenger=DiscordMessenger(self, publisher),
            prefix=self.config.get("COMMAND_PREFIX", "!"),
            group_limit=self.config.get("PHOTO_GROUP_LIMIT", 10),
            default_photo_size=self.config.get("RANDOM_PHOTO_DEFAULT_SIZE", 800),
        )
        self.logger.info(
            f"✔ Router ready with {len(store)} words",
            extra={"subsys": "core", "event": "setup.done"},
        )

    async def on_ready(self) -> None:
        if self.router is not None and self.user is not None:
            self.router.bot_user_id = self.user.id
        self.logger.info(
            f"✔ Logged in as {self.user} ({len(self.guilds)} guilds)",
            extra={"subsys": "core", "event": "ready"},
        )

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or self.router is None:
            return
        if self.router.bot_user_id is None and self.user is not None:
            self.router.bot_user_id = self.user.id
        await self.router.dispatch(to_inbound(message))

    async def close(self) -> None:
        self.logger.info("Shutting down", extra={"subsys": "core", "event": "shutdown"})
        await close_http_client()
        await super().close()
