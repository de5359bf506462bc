"""
Vocabulary of recorded words.

Clip file names encode the word: ``heavy!.wav`` is the emphatic form and is
stored as ``HEAVY``; ``heavy.wav`` is stored as ``heavy``. Punctuation clips
are ``_comma.wav`` and ``_period.wav``.
"""
from __future__ import annotations

import wave
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..exceptions import ConfigurationError
from ..utils.logging import get_logger
from .types import AudioClip

logger = get_logger(__name__)

COMMA = "_comma"
PERIOD = "_period"

_LIST_COLUMNS = 5
_LIST_SEPARATOR = "    "
_DISPLAY_NAMES = {COMMA: ",", PERIOD: "."}


def word_from_filename(filename: str) -> str:
    """Map a clip file name to its vocabulary key."""
    mark = filename.find("!")
    if mark != -1:
        return filename[:mark].upper()
    dot = filename.find(".")
    return filename[:dot] if dot != -1 else filename


def is_upper_word(word: str) -> bool:
    """True when every letter is upper case. Non-letters are ignored."""
    return all(ch.isupper() for ch in word if ch.isalpha())


class WordAudioStore:
    """Immutable mapping from vocabulary word to decoded audio clip."""

    def __init__(self, clips: Mapping[str, AudioClip]):
        self._clips: Dict[str, AudioClip] = dict(clips)

    @classmethod
    def load(cls, directory: Path) -> "WordAudioStore":
        """Load every ``*.wav`` clip in a directory.

        Files that cannot be read or decoded are logged and skipped; the word
        simply stays unresolvable.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigurationError(f"Words directory not found: {directory}")

        clips: Dict[str, AudioClip] = {}
        for path in sorted(directory.iterdir()):
            if not path.is_file() or path.suffix.lower() != ".wav":
                continue
            word = word_from_filename(path.name)
            try:
                clips[word] = AudioClip.from_wav_bytes(word, path.read_bytes())
            except (OSError, wave.Error, EOFError) as e:
                logger.error(
                    f"✖ Error loading word audio file {path.name}: {e}",
                    extra={"subsys": "audio", "event": "store.load_failed",
                           "detail": {"file": str(path)}},
                )

        logger.info(
            f"✔ Loaded {len(clips)} word clips from {directory}",
            extra={"subsys": "audio", "event": "store.loaded"},
        )
        return cls(clips)

    def resolve(self, word: str) -> Optional[AudioClip]:
        """Find a clip, tolerating case mistakes.

        Upper-case queries prefer the emphatic recording and fall back to the
        ordinary one; everything else tries the reverse order.
        """
        if is_upper_word(word):
            return self._clips.get(word) or self._clips.get(word.lower())
        return self._clips.get(word.lower()) or self._clips.get(word.upper())

    def words(self) -> List[str]:
        return list(self._clips)

    def __contains__(self, word: object) -> bool:
        return word in self._clips

    def __len__(self) -> int:
        return len(self._clips)


def format_word_list(words: Iterable[str]) -> str:
    """Render the vocabulary five words per row, sorted case-insensitively."""
    names = [_DISPLAY_NAMES.get(w, w) for w in sorted(words, key=str.lower)]
    rows = [
        _LIST_SEPARATOR.join(names[i:i + _LIST_COLUMNS])
        for i in range(0, len(names), _LIST_COLUMNS)
    ]
    return "\n".join(rows)
