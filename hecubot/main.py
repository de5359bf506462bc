"""
Bot entry point - BOOTSTRAP ONLY
This module contains no business logic, only orchestration.
"""
import asyncio
import os
import sys
from typing import NoReturn

import aiohttp
import discord

from .config import load_config
from .core.bot import HecuBot
from .core.cli import parse_arguments, show_version_info, validate_configuration_only
from .core.startup import create_bot_intents, run_pre_flight_checks
from .exceptions import ConfigurationError
from .utils.logging import get_logger, init_logging, shutdown_logging_and_exit

MAX_CONNECT_RETRIES = 3
CONNECT_BASE_DELAY_S = 5


async def main() -> NoReturn:
    """Parse the CLI, validate configuration and run the bot until it disconnects."""
    args = parse_arguments()
    if args.debug:
        os.environ['LOG_LEVEL'] = 'DEBUG'

    init_logging()
    logger = get_logger(__name__)

    if args.version:
        show_version_info()
        shutdown_logging_and_exit(0)

    if args.config_check:
        validate_configuration_only()
        shutdown_logging_and_exit(0)

    try:
        config = load_config()
        run_pre_flight_checks(config)
    except ConfigurationError as e:
        logger.critical(f"Configuration error during bot startup: {e}")
        shutdown_logging_and_exit(1)

    bot = HecuBot(
        config=config,
        command_prefix=config["COMMAND_PREFIX"],
        intents=create_bot_intents(),
        help_command=None,
    )

    async with bot:
        for attempt in range(MAX_CONNECT_RETRIES):
            try:
                logger.info(f"Connecting to Discord... (Attempt {attempt + 1}/{MAX_CONNECT_RETRIES})")
                await bot.start(config["DISCORD_TOKEN"])
                break
            except discord.LoginFailure:
                logger.error("Failed to log in. Please check your Discord token.")
                shutdown_logging_and_exit(1)
            except (discord.HTTPException, aiohttp.ClientConnectorError):
                if attempt == MAX_CONNECT_RETRIES - 1:
                    logger.error("Could not connect to Discord, giving up.")
                    shutdown_logging_and_exit(1)
                delay = CONNECT_BASE_DELAY_S * (2 ** attempt)
                logger.warning(f"Connection failed, retrying in {delay}s...")
                await asyncio.sleep(delay)

    logger.info("Bot disconnected.")
    shutdown_logging_and_exit(0)


def run_bot() -> None:
    """Entry point for running the bot with proper error handling."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot shutdown requested by user.")
        shutdown_logging_and_exit(0)
    except ConfigurationError as e:
        print(f"FATAL CONFIGURATION ERROR: {e}", file=sys.stderr)
        shutdown_logging_and_exit(1)


if __name__ == "__main__":
    run_bot()
