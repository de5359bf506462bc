from __future__ import annotations

import asyncio

from ..exceptions import TranscodeError


async def transcode_to_ogg_opus(
    wav_bytes: bytes,
    *,
    bitrate: str = "64k",
    vbr: str = "on",
    compression_level: int = 10,
) -> bytes:
    """
    Transcode WAV bytes to Ogg Opus (48 kHz mono) through ffmpeg pipes.

    Raises TranscodeError if ffmpeg fails, OSError if it cannot be started.
    """
    if not wav_bytes:
        raise TranscodeError("Empty WAV input")

    cmd = [
        "ffmpeg",
        "-hide_banner",
        "-loglevel",
        "error",
        "-f",
        "wav",
        "-i",
        "pipe:0",
        "-ac",
        "1",  # mono
        "-ar",
        "48000",
        "-c:a",
        "libopus",
        "-b:a",
        bitrate,
        "-vbr",
        vbr,
        "-compression_level",
        str(compression_level),
        "-f",
        "ogg",
        "pipe:1",
    ]

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate(wav_bytes)

    if proc.returncode != 0 or not stdout:
        raise TranscodeError(
            f"ffmpeg opus transcode failed (code={proc.returncode}). "
            f"stderr={stderr.decode(errors='ignore')[:4000]}"
        )
    return stdout
