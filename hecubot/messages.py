"""User-facing reply texts."""
from .types import MalformedReason

HI = "HECU unit online. Awaiting orders."
BYE = "HECU unit pulling out. Over and out."

LIST_HEADER = "🎙 Available words:"

SAY_PROMPT = "🎙 What should I say? Send me a sentence made of known words (see !list)."
BINARY_PROMPT = "💾 Send me the text to read out in binary."
PHOTO_PROMPT = (
    "📷 What should I look for? Send a search query, optionally followed by //N "
    "to get N photos (1-{limit}).\n"
    "Send random, random-W or random-W-H for random photos."
)

HELP = (
    "HECU bot commands:\n"
    "!start - activate the bot in this chat\n"
    "!stop - deactivate the bot in this chat\n"
    "!list - list the words I know\n"
    "!say - speak a sentence made of known words\n"
    "!binary - read a text out in binary\n"
    "!photo - search photos, or get random ones (up to {limit} at once)\n"
    "!help - show this message\n"
    "In a server channel, mention me before the command: @HecuBot !say"
)

WORD_NOT_FOUND = 'Word "{word}" not found'
TOO_LARGE = "String too large for binary request"
QUOTA_EXCEEDED = "Daily photo search limit reached ({limit}). Try again tomorrow, or ask for random photos."
PHOTO_LIMIT = "You can ask for 1 to {limit} photos at once."
PHOTO_MALFORMED = (
    "Malformed photo request. Use <query>//N with N between 1 and {limit}, "
    "or random-W-H with sizes up to {max_size}."
)
PHOTO_EMPTY_QUERY = "The search query is empty."
FAILURE = "⚠ Something went wrong while processing your request. Please try again."


def photo_prompt(limit: int) -> str:
    return PHOTO_PROMPT.format(limit=limit)


def help_text(limit: int) -> str:
    return HELP.format(limit=limit)


def word_list(formatted_words: str) -> str:
    return f"{LIST_HEADER}\n{formatted_words}"


def word_not_found(word: str) -> str:
    return WORD_NOT_FOUND.format(word=word)


def quota_exceeded(limit: int) -> str:
    return QUOTA_EXCEEDED.format(limit=limit)


def malformed_photo(reason: MalformedReason, limit: int, max_size: int) -> str:
    if reason is MalformedReason.OUT_OF_RANGE:
        return PHOTO_LIMIT.format(limit=limit)
    if reason is MalformedReason.EMPTY_QUERY:
        return PHOTO_EMPTY_QUERY
    return PHOTO_MALFORMED.format(limit=limit, max_size=max_size)
