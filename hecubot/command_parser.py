"""
Parses raw message text to identify commands, enforcing the context rules
for guild channels vs. DMs.

In a DM a bare ``!say`` is a command. In a guild channel the command must be
addressed to the bot (``@HecuBot !say``) so several bots can share a channel.
The whole message must be the command; anything else is a continuation.
"""
import re
from typing import Optional

from .types import Command, ParsedCommand
from .utils.logging import get_logger

logger = get_logger(__name__)

# Maps the command name (without prefix) to the Command enum
COMMAND_MAP = {
    "start": Command.START,
    "stop": Command.STOP,
    "list": Command.LIST,
    "help": Command.HELP,
    "say": Command.SAY,
    "binary": Command.BINARY,
    "photo": Command.PHOTO,
}


def _mention_pattern(bot_user_id: Optional[int]) -> Optional[re.Pattern]:
    if bot_user_id is None:
        return None
    return re.compile(fr'^<@!?{bot_user_id}>\s*')


def parse_command(
    text: str, *, is_private: bool, bot_user_id: Optional[int], prefix: str = "!"
) -> Optional[ParsedCommand]:
    """
    Parse a message into a command.

    Args:
        text: The raw message content.
        is_private: Whether the message was sent in a DM.
        bot_user_id: The bot's user id, used to strip a leading mention.
        prefix: The command prefix character(s).

    Returns:
        A ParsedCommand when the whole message is a known command valid in
        this context, otherwise None.
    """
    content = text.strip()

    mention = _mention_pattern(bot_user_id)
    addressed = False
    if mention is not None:
        content, n = mention.subn('', content)
        addressed = n > 0

    if not is_private and not addressed:
        return None

    if not content.startswith(prefix):
        return None

    token = content[len(prefix):]
    command = COMMAND_MAP.get(token)
    if command:
        logger.debug(f"Parsed command: {command.name}",
                     extra={'subsys': 'parser', 'event': 'command.found'})
        return ParsedCommand(command=command, token=token)

    logger.debug(f"Ignoring unknown command: {content[:50]}",
                 extra={'subsys': 'parser', 'event': 'command.unknown'})
    return None


def clean_continuation(text: str, bot_user_id: Optional[int], prefix: str = "!") -> str:
    """Strip a leading bot mention and one leading prefix from a continuation message."""
    content = text.strip()
    mention = _mention_pattern(bot_user_id)
    if mention is not None:
        content = mention.sub('', content)
    if prefix and content.startswith(prefix):
        content = content[len(prefix):]
    return content
