"""
Custom exceptions for the bot, providing a structured error hierarchy.

Recoverable, user-facing conditions (unknown word, input too large, quota
exhausted, malformed photo request) are not exceptions: they are outcome
values defined in `hecubot.types`.
"""


class BotBaseException(Exception):
    """Base exception for all custom exceptions in this bot."""

    pass


class ConfigurationError(BotBaseException):
    """Raised for errors in bot configuration, like missing keys or invalid values."""

    pass


class APIError(BotBaseException):
    """Raised for errors related to external API interactions (image search, random images)."""

    pass


class PhotoSourceExhausted(APIError):
    """Raised when the image sources stop yielding acceptable images."""

    def __init__(self, requested: int, obtained: int, detail: str = ""):
        self.requested = requested
        self.obtained = obtained
        message = f"Image source exhausted: {obtained}/{requested} photos obtained"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class DeliveryError(BotBaseException):
    """Raised when a reply cannot be delivered to the chat platform."""

    pass


class TranscodeError(DeliveryError):
    """Raised when ffmpeg cannot turn a WAV stream into Ogg/Opus."""

    pass


class AudioFormatError(BotBaseException):
    """Raised when word clips cannot be concatenated because their formats differ."""

    pass
