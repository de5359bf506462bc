"""Audio value types shared by the word store, the assembler and the binary encoder."""
from __future__ import annotations

import io
import wave
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AudioParams:
    """PCM layout of a WAV stream. Clips can only be joined when these match."""

    nchannels: int
    sampwidth: int
    framerate: int

    @property
    def frame_size(self) -> int:
        return self.nchannels * self.sampwidth


@dataclass(frozen=True)
class AudioClip:
    """One recorded vocabulary word, decoded once at load time."""

    word: str
    params: AudioParams
    frames: bytes

    @classmethod
    def from_wav_bytes(cls, word: str, data: bytes) -> "AudioClip":
        """Decode a RIFF/WAVE file. Raises wave.Error or EOFError on bad input."""
        with wave.open(io.BytesIO(data), "rb") as wf:
            params = AudioParams(wf.getnchannels(), wf.getsampwidth(), wf.getframerate())
            frames = wf.readframes(wf.getnframes())
        return cls(word=word, params=params, frames=frames)

    @property
    def nframes(self) -> int:
        return len(self.frames) // self.params.frame_size

    @property
    def duration_s(self) -> float:
        return self.nframes / float(self.params.framerate)


@dataclass(frozen=True)
class AssembledAudio:
    """Ordered concatenation of clips sharing one format."""

    params: AudioParams
    frames: bytes
    segments: Tuple[str, ...]

    @property
    def nframes(self) -> int:
        return len(self.frames) // self.params.frame_size

    @property
    def duration_s(self) -> float:
        return self.nframes / float(self.params.framerate)

    def to_wav(self) -> bytes:
        """Render a complete WAV file."""
        buf = io.BytesIO()
        with wave.open(buf, "wb") as wf:
            wf.setnchannels(self.params.nchannels)
            wf.setsampwidth(self.params.sampwidth)
            wf.setframerate(self.params.framerate)
            wf.writeframes(self.frames)
        return buf.getvalue()


@dataclass(frozen=True)
class BinaryAudio:
    """A string's binary representation together with its spoken digits."""

    bits: str
    audio: AssembledAudio
