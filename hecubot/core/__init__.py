"""Discord-facing side of the bot: client, messenger, startup and CLI."""
