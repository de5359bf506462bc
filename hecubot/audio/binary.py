"""Reads a string out loud as its UTF-8 bits using the ZERO/ONE recordings."""
from __future__ import annotations

from typing import List, Tuple, Union

from ..types import TooLarge, WordNotFound
from ..utils.logging import get_logger
from .assembler import concatenate
from .store import WordAudioStore
from .types import AudioClip, BinaryAudio

logger = get_logger(__name__)

DEFAULT_LENGTH_LIMIT = 2500

_DIGIT_WORDS = {"0": "ZERO", "1": "ONE"}


def to_binary(text: str) -> str:
    """UTF-8 bytes of ``text`` as 8-digit groups separated by single spaces."""
    return " ".join(format(byte, "08b") for byte in text.encode("utf-8"))


class BinaryEncoder:
    def __init__(self, store: WordAudioStore, length_limit: int = DEFAULT_LENGTH_LIMIT):
        self.store = store
        self.length_limit = length_limit

    def encode(self, text: str) -> Union[BinaryAudio, TooLarge, WordNotFound, None]:
        if not text:
            return None

        bits = to_binary(text)
        if len(bits) > self.length_limit:
            logger.info(
                f"Binary representation too large ({len(bits)} > {self.length_limit})",
                extra={"subsys": "audio", "event": "binary.too_large"},
            )
            return TooLarge(len(bits), self.length_limit)

        clips = {}
        for digit, word in _DIGIT_WORDS.items():
            if digit in bits:
                clip = self.store.resolve(word)
                if clip is None:
                    return WordNotFound(word)
                clips[digit] = clip

        segments: List[Tuple[str, AudioClip]] = [
            (clips[ch].word, clips[ch]) for ch in bits if ch != " "
        ]
        return BinaryAudio(bits=bits, audio=concatenate(segments))
