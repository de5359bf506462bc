"""Discord-native voice message delivery."""
from .publisher import VoiceMessagePublisher, VoicePublishResult

__all__ = ["VoiceMessagePublisher", "VoicePublishResult"]
