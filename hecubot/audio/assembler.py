"""Sentence to audio: resolves each token and joins the clips into one WAV stream."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..exceptions import AudioFormatError
from ..types import WordNotFound
from ..utils.logging import get_logger
from .store import COMMA, PERIOD, WordAudioStore
from .types import AssembledAudio, AudioClip

logger = get_logger(__name__)

_PUNCTUATION = {",": COMMA, ".": PERIOD}


def concatenate(segments: Sequence[Tuple[str, AudioClip]]) -> AssembledAudio:
    """Join labelled clips in order. Every clip must share one PCM layout."""
    if not segments:
        raise ValueError("Nothing to concatenate")
    params = segments[0][1].params
    for _, clip in segments:
        if clip.params != params:
            raise AudioFormatError(
                f"Clip '{clip.word}' has format {clip.params}, expected {params}"
            )
    return AssembledAudio(
        params=params,
        frames=b"".join(clip.frames for _, clip in segments),
        segments=tuple(label for label, _ in segments),
    )


def split_punctuation(token: str) -> Tuple[str, Optional[str]]:
    """Strip one trailing comma or period, returning the word and the punctuation key."""
    if token and token[-1] in _PUNCTUATION:
        return token[:-1], _PUNCTUATION[token[-1]]
    return token, None


class SentenceAssembler:
    def __init__(self, store: WordAudioStore):
        self.store = store

    def assemble(self, tokens: Iterable[str]) -> Union[AssembledAudio, WordNotFound, None]:
        """Build the spoken sentence, or report the first word that has no recording."""
        segments: List[Tuple[str, AudioClip]] = []
        for token in tokens:
            word, punctuation = split_punctuation(token)
            if word:
                clip = self.store.resolve(word)
                if clip is None:
                    logger.debug(
                        f"Word not found: {word}",
                        extra={"subsys": "audio", "event": "assemble.word_not_found"},
                    )
                    return WordNotFound(word)
                segments.append((clip.word, clip))
            if punctuation:
                clip = self.store.resolve(punctuation)
                if clip is None:
                    return WordNotFound(token[-1])
                segments.append((punctuation.lstrip("_"), clip))

        if not segments:
            return None
        return concatenate(segments)
