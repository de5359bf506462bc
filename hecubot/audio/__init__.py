"""Word-clip audio engine."""
from .assembler import SentenceAssembler, concatenate
from .binary import BinaryEncoder, to_binary
from .store import WordAudioStore, format_word_list
from .types import AssembledAudio, AudioClip, AudioParams, BinaryAudio

__all__ = [
    "AssembledAudio",
    "AudioClip",
    "AudioParams",
    "BinaryAudio",
    "BinaryEncoder",
    "SentenceAssembler",
    "WordAudioStore",
    "concatenate",
    "format_word_list",
    "to_binary",
]
