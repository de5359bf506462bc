"""
Shared fixtures: WAV word clips written with the ``wave`` module and images
generated with Pillow.
"""
import io
import wave
from pathlib import Path
from typing import Iterable

import pytest
from PIL import Image

from hecubot.audio import WordAudioStore

FRAMERATE = 8000


def wav_bytes(samples: Iterable[int] = (1, 2, 3, 4), framerate: int = FRAMERATE, nchannels: int = 1) -> bytes:
    """16-bit little-endian PCM WAV with the given sample values."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(nchannels)
        wf.setsampwidth(2)
        wf.setframerate(framerate)
        wf.writeframes(b"".join(int(s).to_bytes(2, "little", signed=True) for s in samples))
    return buf.getvalue()


def image_bytes(fmt: str = "PNG", size=(4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


# Each clip gets distinct samples so concatenation order is observable
DEFAULT_CLIPS = {
    "hello.wav": (10, 11),
    "world.wav": (20, 21),
    "heavy.wav": (30, 31),
    "heavy!.wav": (40, 41),
    "HEV.wav": (50, 51),
    "_comma.wav": (60,),
    "_period.wav": (70,),
    "zero!.wav": (0,),
    "one!.wav": (1,),
}


def write_clips(directory: Path, clips=None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name, samples in (clips or DEFAULT_CLIPS).items():
        (directory / name).write_bytes(wav_bytes(samples))
    return directory


def pcm(*samples: int) -> bytes:
    return b"".join(int(s).to_bytes(2, "little", signed=True) for s in samples)


@pytest.fixture
def words_dir(tmp_path) -> Path:
    return write_clips(tmp_path / "words")


@pytest.fixture
def store(words_dir) -> WordAudioStore:
    return WordAudioStore.load(words_dir)


@pytest.fixture
def make_wav():
    return wav_bytes


@pytest.fixture
def make_image():
    return image_bytes


@pytest.fixture
def make_pcm():
    return pcm
