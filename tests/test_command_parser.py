import pytest

from hecubot.command_parser import clean_continuation, parse_command
from hecubot.types import Command, ParsedCommand

BOT_ID = 1234567890


def parse(text, is_private):
    return parse_command(text, is_private=is_private, bot_user_id=BOT_ID, prefix="!")


@pytest.mark.parametrize(
    "text, command",
    [
        ("!start", Command.START),
        ("!stop", Command.STOP),
        ("!list", Command.LIST),
        ("!help", Command.HELP),
        ("!say", Command.SAY),
        ("!binary", Command.BINARY),
        ("!photo", Command.PHOTO),
    ],
)
def test_dm_commands(text, command):
    assert parse(text, is_private=True) == ParsedCommand(command, text[1:])


def test_dm_command_with_mention():
    assert parse(f"<@{BOT_ID}> !say", is_private=True).command == Command.SAY


def test_guild_command_requires_mention():
    assert parse("!say", is_private=False) is None


@pytest.mark.parametrize("mention", [f"<@{BOT_ID}>", f"<@!{BOT_ID}>"])
def test_guild_command_with_mention(mention):
    assert parse(f"{mention} !photo", is_private=False).command == Command.PHOTO


def test_guild_mention_of_someone_else_is_ignored():
    assert parse("<@42> !say", is_private=False) is None


def test_whole_message_must_be_the_command():
    assert parse("!say hello", is_private=True) is None
    assert parse("say", is_private=True) is None


def test_unknown_command():
    assert parse("!dance", is_private=True) is None


def test_commands_are_case_sensitive():
    assert parse("!SAY", is_private=True) is None


def test_clean_continuation_strips_mention_and_prefix():
    assert clean_continuation(f"<@{BOT_ID}> hello world", BOT_ID) == "hello world"
    assert clean_continuation("!say", BOT_ID) == "say"
    assert clean_continuation("  HEV mark  ", BOT_ID) == "HEV mark"


def test_clean_continuation_strips_only_one_prefix():
    assert clean_continuation("!!x", BOT_ID) == "!x"
