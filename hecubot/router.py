"""
Conversation router: turns inbound messages into commands or continuations
of a pending two-step request, runs the matching engine and sends the reply
through the Messenger.
"""
from __future__ import annotations

import time
from typing import Optional

import httpx

from . import messages
from .audio import BinaryEncoder, SentenceAssembler, WordAudioStore, format_word_list
from .audio.types import AssembledAudio, BinaryAudio
from .command_parser import clean_continuation, parse_command
from .exceptions import BotBaseException, DeliveryError
from .photos import PhotoRetrievalPipeline, ProgressEvent, parse_photo_request
from .photos.request import MAX_DIMENSION
from .tracker import RequestTracker
from .types import (
    ChatAction,
    Command,
    InboundMessage,
    MalformedRequest,
    Messenger,
    ParsedCommand,
    QuotaExceeded,
    RequestKind,
    TooLarge,
)
from .utils.logging import get_logger

logger = get_logger(__name__)

# Failures answered with a generic reply; anything else is a bug and propagates
INFRASTRUCTURE_ERRORS = (BotBaseException, httpx.HTTPError, OSError)

# Order in which a continuation is matched against pending requests
CONTINUATION_ORDER = (RequestKind.SAY, RequestKind.BINARY, RequestKind.PHOTO)

_REQUEST_COMMANDS = {
    Command.SAY: RequestKind.SAY,
    Command.BINARY: RequestKind.BINARY,
    Command.PHOTO: RequestKind.PHOTO,
}


class _ProgressThrottle:
    """Forwards pipeline progress as chat actions, at most once per interval."""

    def __init__(self, messenger: Messenger, chat_id: int, interval_s: float):
        self.messenger = messenger
        self.chat_id = chat_id
        self.interval_s = interval_s
        self._last: Optional[float] = None

    async def __call__(self, event: ProgressEvent) -> None:
        now = time.monotonic()
        if self._last is not None and now - self._last < self.interval_s:
            return
        self._last = now
        try:
            await self.messenger.send_progress(self.chat_id, ChatAction.UPLOAD_PHOTO)
        except DeliveryError as e:
            logger.warning(
                f"⚠ Could not send upload indicator: {e}",
                extra={"subsys": "router", "event": "progress.failed", "chat_id": self.chat_id},
            )


class ConversationRouter:
    def __init__(
        self,
        tracker: RequestTracker,
        store: WordAudioStore,
        assembler: SentenceAssembler,
        encoder: BinaryEncoder,
        pipeline: PhotoRetrievalPipeline,
        messenger: Messenger,
        *,
        prefix: str = "!",
        bot_user_id: Optional[int] = None,
        group_limit: int = 10,
        default_photo_size: int = 800,
        progress_interval_s: float = 5.0,
    ):
        self.tracker = tracker
        self.store = store
        self.assembler = assembler
        self.encoder = encoder
        self.pipeline = pipeline
        self.messenger = messenger
        self.prefix = prefix
        self.bot_user_id = bot_user_id
        self.group_limit = group_limit
        self.default_photo_size = default_photo_size
        self.progress_interval_s = progress_interval_s
        self.logger = logger

    async def dispatch(self, message: InboundMessage) -> None:
        """Handle one inbound text message."""
        parsed = parse_command(
            message.text,
            is_private=message.is_private,
            bot_user_id=self.bot_user_id,
            prefix=self.prefix,
        )
        if parsed is not None and not self.tracker.has_pending(message.chat_id, message.user_id):
            try:
                await self._execute_command(parsed, message)
            except INFRASTRUCTURE_ERRORS as e:
                self.logger.error(
                    f"✖ Error in processing \"{parsed.token}\" command: {e}",
                    extra={"subsys": "router", "event": "command.failed",
                           "chat_id": message.chat_id, "user_id": message.user_id,
                           "msg_id": message.message_id},
                )
            return

        if not self.tracker.is_active(message.chat_id):
            return

        for kind in CONTINUATION_ORDER:
            if self.tracker.consume(message.chat_id, message.user_id, kind):
                await self._run_continuation(kind, message)
                return

    # --- Commands -----------------------------------------------------------

    async def _execute_command(self, parsed: ParsedCommand, message: InboundMessage) -> None:
        chat_id = message.chat_id
        command = parsed.command

        if command is Command.START:
            if self.tracker.activate(chat_id):
                await self._reply(message, messages.HI)
        elif command is Command.STOP:
            if self.tracker.deactivate(chat_id):
                await self._reply(message, messages.BYE)
        elif command is Command.HELP:
            await self.messenger.send_text(
                chat_id, messages.help_text(self.group_limit), reply_to=message.message_id
            )
        elif command is Command.LIST:
            if self.tracker.is_active(chat_id):
                await self.messenger.send_progress(chat_id, ChatAction.TYPING)
                await self.messenger.send_text(
                    chat_id,
                    messages.word_list(format_word_list(self.store.words())),
                    reply_to=message.message_id,
                )
        else:
            kind = _REQUEST_COMMANDS[command]
            if self.tracker.begin_request(chat_id, message.user_id, kind):
                await self.messenger.send_text(
                    chat_id, self._prompt_for(kind), reply_to=message.message_id
                )

    def _prompt_for(self, kind: RequestKind) -> str:
        if kind is RequestKind.SAY:
            return messages.SAY_PROMPT
        if kind is RequestKind.BINARY:
            return messages.BINARY_PROMPT
        return messages.photo_prompt(self.group_limit)

    # --- Continuations ------------------------------------------------------

    async def _run_continuation(self, kind: RequestKind, message: InboundMessage) -> None:
        text = clean_continuation(message.text, self.bot_user_id, self.prefix)
        try:
            if kind is RequestKind.SAY:
                await self._handle_say(text, message)
            elif kind is RequestKind.BINARY:
                await self._handle_binary(text, message)
            else:
                await self._handle_photo(text, message)
        except INFRASTRUCTURE_ERRORS as e:
            self.logger.error(
                f"✖ Error in processing \"{kind.value}\" request: {e}",
                exc_info=True,
                extra={"subsys": "router", "event": "request.failed",
                       "chat_id": message.chat_id, "user_id": message.user_id,
                       "msg_id": message.message_id, "detail": {"kind": kind.value}},
            )
            await self._reply_failure(message)

    async def _reply(self, message: InboundMessage, text: str) -> None:
        await self.messenger.send_progress(message.chat_id, ChatAction.TYPING)
        await self.messenger.send_text(message.chat_id, text, reply_to=message.message_id)

    async def _reply_failure(self, message: InboundMessage) -> None:
        try:
            await self.messenger.send_text(
                message.chat_id, messages.FAILURE, reply_to=message.message_id
            )
        except INFRASTRUCTURE_ERRORS as e:
            self.logger.warning(
                f"⚠ Could not deliver failure reply: {e}",
                extra={"subsys": "router", "event": "reply.failed", "chat_id": message.chat_id},
            )

    async def _handle_say(self, text: str, message: InboundMessage) -> None:
        await self.messenger.send_progress(message.chat_id, ChatAction.RECORD_AUDIO)
        result = self.assembler.assemble(text.split())

        if result is None:
            self.logger.debug("Empty sentence, nothing to say",
                              extra={"subsys": "router", "chat_id": message.chat_id})
            return
        if not isinstance(result, AssembledAudio):
            await self._reply(message, messages.word_not_found(result.word))
            return

        await self.messenger.send_audio(message.chat_id, result.to_wav(), reply_to=message.message_id)
        self.logger.info(
            f"✔ Sent sentence audio ({len(result.segments)} segments, {result.duration_s:.1f}s)",
            extra={"subsys": "router", "event": "say.sent", "chat_id": message.chat_id,
                   "user_id": message.user_id, "msg_id": message.message_id},
        )

    async def _handle_binary(self, text: str, message: InboundMessage) -> None:
        await self.messenger.send_progress(message.chat_id, ChatAction.RECORD_AUDIO)
        result = self.encoder.encode(text)

        if result is None:
            return
        if isinstance(result, TooLarge):
            await self._reply(message, messages.TOO_LARGE)
            return
        if not isinstance(result, BinaryAudio):
            await self._reply(message, messages.word_not_found(result.word))
            return

        await self.messenger.send_audio(
            message.chat_id, result.audio.to_wav(), reply_to=message.message_id
        )
        await self.messenger.send_text(message.chat_id, result.bits, reply_to=message.message_id)
        self.logger.info(
            f"✔ Sent binary audio ({len(result.audio.segments)} digits)",
            extra={"subsys": "router", "event": "binary.sent", "chat_id": message.chat_id,
                   "user_id": message.user_id, "msg_id": message.message_id},
        )

    async def _handle_photo(self, text: str, message: InboundMessage) -> None:
        request = parse_photo_request(text, self.group_limit, self.default_photo_size)
        if isinstance(request, MalformedRequest):
            await self._reply(
                message, messages.malformed_photo(request.reason, self.group_limit, MAX_DIMENSION)
            )
            return

        progress = _ProgressThrottle(self.messenger, message.chat_id, self.progress_interval_s)
        result = await self.pipeline.fetch(request.mode, request.count, progress)
        if isinstance(result, QuotaExceeded):
            await self._reply(message, messages.quota_exceeded(result.limit))
            return

        try:
            if len(result) == 1:
                await self.messenger.send_photo(message.chat_id, result[0], reply_to=message.message_id)
            else:
                await self.messenger.send_photo_group(message.chat_id, result, reply_to=message.message_id)
        finally:
            for photo in result:
                photo.close()

        self.logger.info(
            f"✔ Sent {len(result)} photos",
            extra={"subsys": "router", "event": "photo.sent", "chat_id": message.chat_id,
                   "user_id": message.user_id, "msg_id": message.message_id},
        )
