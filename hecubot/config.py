"""Configuration loading and environment setup."""
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path.cwd() / ".env", verbose=False)

# Also try loading from the project root in case we're running from a subdirectory
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env", verbose=False)

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:10.0) Gecko/20100101 Firefox/79.0"

REQUIRED_VARS = ("DISCORD_TOKEN",)


def _clean_env_value(value: str) -> str:
    """Clean environment variable value by removing inline comments."""
    if not value:
        return value
    return value.split("#")[0].strip()


def _safe_int(value: str, default: str, var_name: str) -> int:
    """Safely convert environment variable to int, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) if value else default
        return int(clean_value)
    except (ValueError, AttributeError):
        logger.warning(f"⚠ Invalid {var_name} value '{value}', using default {default}")
        return int(default)


def _safe_float(value: str, default: str, var_name: str) -> float:
    """Safely convert environment variable to float, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) if value else default
        return float(clean_value)
    except (ValueError, AttributeError):
        logger.warning(f"⚠ Invalid {var_name} value '{value}', using default {default}")
        return float(default)


def _safe_bool(value: str, default: bool) -> bool:
    if not value:
        return default
    return _clean_env_value(value).lower() in {"1", "true", "yes", "on"}


def validate_required_env() -> None:
    """Validate that all required environment variables are present."""
    missing_vars = [var for var in REQUIRED_VARS if not os.getenv(var)]
    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )


def load_config() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    return {
        # DISCORD BOT SETTINGS
        "DISCORD_TOKEN": os.getenv("DISCORD_TOKEN"),
        "COMMAND_PREFIX": _clean_env_value(os.getenv("COMMAND_PREFIX", "!")) or "!",

        # VOCABULARY
        "WORDS_DIR": Path(_clean_env_value(os.getenv("WORDS_DIR", "resources/words"))),
        "BINARY_LENGTH_LIMIT": _safe_int(os.getenv("BINARY_LENGTH_LIMIT"), "2500", "BINARY_LENGTH_LIMIT"),

        # IMAGE SEARCH (Google Custom Search JSON API)
        "GOOGLE_API_KEY": os.getenv("GOOGLE_API_KEY"),
        "GOOGLE_SEARCH_ENGINE_ID": os.getenv("GOOGLE_SEARCH_ENGINE_ID"),
        "GOOGLE_SEARCH_ENDPOINT": _clean_env_value(
            os.getenv("GOOGLE_SEARCH_ENDPOINT", "https://www.googleapis.com/customsearch/v1")
        ),
        "RANDOM_IMAGE_ENDPOINT": _clean_env_value(
            os.getenv("RANDOM_IMAGE_ENDPOINT", "https://picsum.photos")
        ),

        # PHOTO LIMITS
        # Discord accepts at most 10 attachments per message
        "PHOTO_GROUP_LIMIT": _safe_int(os.getenv("PHOTO_GROUP_LIMIT"), "10", "PHOTO_GROUP_LIMIT"),
        "RANDOM_PHOTO_DEFAULT_SIZE": _safe_int(
            os.getenv("RANDOM_PHOTO_DEFAULT_SIZE"), "800", "RANDOM_PHOTO_DEFAULT_SIZE"
        ),
        # Free tier of the Custom Search API is 100 queries per day
        "MAX_PHOTO_REQUESTS": _safe_int(os.getenv("MAX_PHOTO_REQUESTS"), "100", "MAX_PHOTO_REQUESTS"),
        "SEARCH_MAX_START": _safe_int(os.getenv("SEARCH_MAX_START"), "90", "SEARCH_MAX_START"),
        "SEARCH_PAGE_SIZE": _safe_int(os.getenv("SEARCH_PAGE_SIZE"), "10", "SEARCH_PAGE_SIZE"),
        "PHOTO_MAX_IDLE_BATCHES": _safe_int(
            os.getenv("PHOTO_MAX_IDLE_BATCHES"), "10", "PHOTO_MAX_IDLE_BATCHES"
        ),
        "PHOTO_MAX_RANDOM_ATTEMPTS": _safe_int(
            os.getenv("PHOTO_MAX_RANDOM_ATTEMPTS"), "30", "PHOTO_MAX_RANDOM_ATTEMPTS"
        ),

        # HTTP CLIENT
        "HTTP_TIMEOUT_S": _safe_float(os.getenv("HTTP_TIMEOUT_S"), "15.0", "HTTP_TIMEOUT_S"),
        "HTTP_USER_AGENT": os.getenv("HTTP_USER_AGENT", DEFAULT_USER_AGENT),
        "HTTP_POOL_MAX_CONNECTIONS": _safe_int(
            os.getenv("HTTP_POOL_MAX_CONNECTIONS"), "10", "HTTP_POOL_MAX_CONNECTIONS"
        ),

        # VOICE MESSAGES
        "VOICE_ENABLE_NATIVE": _safe_bool(os.getenv("VOICE_ENABLE_NATIVE"), True),
        "VOICE_PUBLISHER_TIMEOUT_S": _safe_float(
            os.getenv("VOICE_PUBLISHER_TIMEOUT_S"), "30.0", "VOICE_PUBLISHER_TIMEOUT_S"
        ),
        "VOICE_PUBLISHER_OPUS_BITRATE": _clean_env_value(
            os.getenv("VOICE_PUBLISHER_OPUS_BITRATE", "64k")
        ) or "64k",

        # LOGGING
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
    }


def validate_config(config: Dict[str, Any]) -> None:
    """Check value ranges that would otherwise fail deep inside a request."""
    if not config.get("DISCORD_TOKEN"):
        raise ConfigurationError("DISCORD_TOKEN not found in environment.")
    for key in ("PHOTO_GROUP_LIMIT", "MAX_PHOTO_REQUESTS", "SEARCH_MAX_START", "SEARCH_PAGE_SIZE"):
        if config[key] < 1:
            raise ConfigurationError(f"{key} must be positive, got {config[key]}")
    if config["PHOTO_GROUP_LIMIT"] > 10:
        raise ConfigurationError("PHOTO_GROUP_LIMIT cannot exceed Discord's 10 attachments per message")
    if config["SEARCH_PAGE_SIZE"] > 10:
        raise ConfigurationError("SEARCH_PAGE_SIZE cannot exceed the 10 results Custom Search returns per call")
    words_dir: Path = config["WORDS_DIR"]
    if not words_dir.is_dir():
        raise ConfigurationError(f"WORDS_DIR not found: {words_dir}")
    if not config.get("GOOGLE_API_KEY") or not config.get("GOOGLE_SEARCH_ENGINE_ID"):
        logger.warning("⚠ GOOGLE_API_KEY/GOOGLE_SEARCH_ENGINE_ID not set; photo searches will fail")
