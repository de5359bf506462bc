from __future__ import annotations

import asyncio
import io
import json
import shutil
import time
import wave
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from ..exceptions import DeliveryError, TranscodeError
from ..retry_utils import DELIVERY_RETRY_CONFIG, retry_async
from ..utils.logging import get_logger
from ..utils.opus import transcode_to_ogg_opus
from ..utils.waveform import compute_waveform_b64

DISCORD_API_BASE = "https://discord.com/api/v10"
IS_VOICE_MESSAGE_FLAG = 8192  # Discord message flags: IS_VOICE_MESSAGE
USER_AGENT = "HecuBotVoicePublisher/1.0"
VOICE_MSG_FORBIDDEN_CODE = 50173  # Discord API error code: voice messages disallowed in channel
BLOCK_TTL_SECONDS = 15 * 60
VOICE_FILENAME = "voice-message.ogg"

# Failures after which the caller falls back to a plain attachment
_PUBLISH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, DeliveryError, OSError, wave.Error, EOFError)


@dataclass
class VoicePublishResult:
    ok: bool
    message_id: Optional[int] = None
    ogg_bytes: Optional[bytes] = None


def build_voice_message_payload(
    uploaded_filename: str,
    duration_secs: float,
    waveform_b64: str,
    reply_to: Optional[int] = None,
) -> Dict[str, Any]:
    """Body of the message-create call that turns an uploaded Ogg file into a voice message."""
    payload: Dict[str, Any] = {
        "flags": IS_VOICE_MESSAGE_FLAG,
        "attachments": [
            {
                "id": "0",
                "filename": VOICE_FILENAME,
                "uploaded_filename": uploaded_filename,
                "duration_secs": float(round(duration_secs, 3)),
                "waveform": waveform_b64,
            }
        ],
    }
    if reply_to:
        payload["message_reference"] = {
            "message_id": str(reply_to),
            "fail_if_not_exists": False,
        }
    return payload


def is_voice_forbidden(error: BaseException) -> bool:
    """True when Discord rejected the voice message because the channel disallows them."""
    if not isinstance(error, aiohttp.ClientResponseError) or error.status != 400:
        return False
    text = error.message or ""
    try:
        return int(json.loads(text).get("code", 0)) == VOICE_MSG_FORBIDDEN_CODE
    except (ValueError, AttributeError, TypeError):
        return str(VOICE_MSG_FORBIDDEN_CODE) in text


async def _raise_for_status(resp: aiohttp.ClientResponse) -> None:
    if resp.status < 400:
        return
    text = await resp.text()
    err = aiohttp.ClientResponseError(
        request_info=resp.request_info,
        history=resp.history,
        status=resp.status,
        message=text,
    )
    retry_after = resp.headers.get("Retry-After")
    if retry_after is not None:
        try:
            err.retry_after_seconds = float(retry_after)
        except ValueError:
            pass
    raise err


class VoiceMessagePublisher:
    """
    Publish Discord-native voice messages: attachments.create, upload of the
    Ogg/Opus file to the signed URL, then message create with the voice flag.
    Channels that refuse voice messages are skipped for a while.
    """

    def __init__(
        self,
        token: Optional[str],
        *,
        enabled: bool = True,
        timeout_s: float = 30.0,
        bitrate: str = "64k",
        api_base: str = DISCORD_API_BASE,
    ):
        self.token = token
        self.enabled = enabled
        self.timeout = aiohttp.ClientTimeout(total=timeout_s)
        self.bitrate = bitrate
        self.api_base = api_base.rstrip("/")
        self.logger = get_logger(__name__)
        self._blocked_channels: Dict[int, float] = {}
        self._tools_checked = False
        self._tools_ok = False

    def _check_tools(self) -> bool:
        """Look for ffmpeg once and cache the answer."""
        if not self._tools_checked:
            self._tools_checked = True
            self._tools_ok = shutil.which("ffmpeg") is not None
            if not self._tools_ok:
                self.logger.warning("⚠ ffmpeg not found; native voice messages disabled for this run")
        return self._tools_ok

    def is_blocked(self, channel_id: int) -> bool:
        expires = self._blocked_channels.get(channel_id)
        if expires is None:
            return False
        if expires <= time.monotonic():
            self._blocked_channels.pop(channel_id, None)
            return False
        return True

    def block(self, channel_id: int) -> None:
        self._blocked_channels[channel_id] = time.monotonic() + BLOCK_TTL_SECONDS

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bot {self.token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def _attachments_create(
        self, session: aiohttp.ClientSession, channel_id: int, file_size: int
    ) -> Dict[str, Any]:
        url = f"{self.api_base}/channels/{channel_id}/attachments"
        payload = {"files": [{"filename": VOICE_FILENAME, "file_size": file_size, "id": "0"}]}

        async def _attachments_create_call():
            async with session.post(url, headers=self._auth_headers(), json=payload) as resp:
                await _raise_for_status(resp)
                return await resp.json()

        return await retry_async(_attachments_create_call, DELIVERY_RETRY_CONFIG)

    async def _upload_file(self, session: aiohttp.ClientSession, upload_url: str, ogg_bytes: bytes) -> None:
        # The upload URL is a signed CDN URL: no bot Authorization header
        async def _upload_call():
            async with session.put(
                upload_url, headers={"Content-Type": "audio/ogg"}, data=ogg_bytes
            ) as resp:
                await _raise_for_status(resp)

        await retry_async(_upload_call, DELIVERY_RETRY_CONFIG)

    async def _post_voice_message(
        self, session: aiohttp.ClientSession, channel_id: int, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        url = f"{self.api_base}/channels/{channel_id}/messages"

        async def _message_create_call():
            async with session.post(url, headers=self._auth_headers(), json=payload) as resp:
                await _raise_for_status(resp)
                return await resp.json()

        return await retry_async(_message_create_call, DELIVERY_RETRY_CONFIG)

    async def publish(
        self, channel_id: int, wav_bytes: bytes, reply_to: Optional[int] = None
    ) -> VoicePublishResult:
        """
        Publish WAV audio as a voice message in a channel.

        Never raises for transport or transcoding problems: the result says
        whether it worked and carries the Ogg bytes (when available) so the
        caller can fall back to a plain attachment.
        """
        if not self.enabled or not self.token:
            return VoicePublishResult(ok=False)
        if self.is_blocked(channel_id):
            self.logger.info(f"Skipping native voice in blocked channel {channel_id}")
            return VoicePublishResult(ok=False)
        if not self._check_tools():
            return VoicePublishResult(ok=False)

        ogg_bytes: Optional[bytes] = None
        try:
            with wave.open(io.BytesIO(wav_bytes), "rb") as wf:
                nchannels, sampwidth, framerate = wf.getnchannels(), wf.getsampwidth(), wf.getframerate()
                frames = wf.readframes(wf.getnframes())
            duration = len(frames) / float(nchannels * sampwidth * framerate) if framerate else 0.0
            waveform_b64 = compute_waveform_b64(frames, nchannels, sampwidth)
            ogg_bytes = await transcode_to_ogg_opus(wav_bytes, bitrate=self.bitrate)

            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                meta = await self._attachments_create(session, channel_id, len(ogg_bytes))
                attach = (meta or {}).get("attachments", [{}])[0]
                upload_url = attach.get("upload_url")
                upload_filename = attach.get("upload_filename") or attach.get("uploaded_filename")
                if not upload_url or not upload_filename:
                    raise DeliveryError(f"attachments.create missing fields: {attach}")

                await self._upload_file(session, upload_url, ogg_bytes)
                payload = build_voice_message_payload(upload_filename, duration, waveform_b64, reply_to)
                msg_json = await self._post_voice_message(session, channel_id, payload)
        except _PUBLISH_ERRORS as e:
            if is_voice_forbidden(e):
                self.block(channel_id)
                self.logger.info(
                    f"Voice messages not allowed in channel {channel_id}; blocked for {BLOCK_TTL_SECONDS}s",
                    extra={"subsys": "voice", "event": "voice.blocked_channel", "chat_id": channel_id},
                )
            else:
                level = self.logger.warning if isinstance(e, TranscodeError) else self.logger.error
                level(
                    f"✖ Native voice publish failed: {e}",
                    extra={"subsys": "voice", "event": "voice.publish_failed", "chat_id": channel_id},
                )
            return VoicePublishResult(ok=False, ogg_bytes=ogg_bytes)

        created_id = msg_json.get("id") if isinstance(msg_json, dict) else None
        self.logger.info(
            f"✔ Voice message published ({duration:.1f}s)",
            extra={"subsys": "voice", "event": "voice.published", "chat_id": channel_id},
        )
        return VoicePublishResult(
            ok=True,
            message_id=int(created_id) if isinstance(created_id, (str, int)) else None,
            ogg_bytes=ogg_bytes,
        )
