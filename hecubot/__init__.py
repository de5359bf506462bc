"""
HECU Bot Package

A Discord bot that speaks with the voice of the H.E.C.U. radio operators:
- Sentence synthesis from a fixed vocabulary of recorded word clips
- Binary read-out of arbitrary text
- Image search and random images with a daily search quota
- Two-step conversations tracked per chat and per user
"""

# Package metadata
__title__ = "HECU Bot"
__version__ = "1.0.0"
__description__ = "Discord bot that says quotes with the voice of H.E.C.U. from Half-Life"
__license__ = "MIT"

# Avoid importing discord at package import time to keep tests lightweight
__all__ = []


def __getattr__(name: str):
    """Lazy loader for the Discord client.

    Accessing hecubot.HecuBot imports it on demand, otherwise importing
    submodules like hecubot.audio.* won't pull the Discord runtime.
    """
    if name == "HecuBot":
        from .core.bot import HecuBot as _HecuBot
        return _HecuBot
    raise AttributeError(name)
