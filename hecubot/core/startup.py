"""
Bot startup and pre-flight check logic.
"""
import hashlib
import shutil

import discord

from ..config import validate_config
from ..utils.logging import get_logger


def create_bot_intents() -> discord.Intents:
    """Create Discord intents: guild and DM messages with their content."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    return intents


def run_pre_flight_checks(config: dict) -> None:
    """Runs all mandatory startup checks. Raises ConfigurationError on fatal problems."""
    logger = get_logger(__name__)
    logger.info("--- Running Pre-Flight Checklist ---")

    # 1. Configuration values, token and words directory
    validate_config(config)
    token_hash = hashlib.sha256(config["DISCORD_TOKEN"].encode()).hexdigest()[:12]
    logger.info(f"Token hash={token_hash} validated")
    logger.info(f"Words directory: {config['WORDS_DIR']}")

    # 2. Intents
    intents = create_bot_intents()
    if not intents.message_content:
        logger.critical("Required intent 'message_content' is disabled. Commands will not be seen.")

    # 3. ffmpeg for native voice messages
    if config.get("VOICE_ENABLE_NATIVE") and shutil.which("ffmpeg") is None:
        logger.warning("⚠ ffmpeg not found: audio will be sent as plain WAV attachments")

    logger.info(f"Discord.py Version: {discord.__version__}")
    logger.info("--- Pre-Flight Checklist Complete ---")
