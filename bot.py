import logging

import nextcord
from nextcord.ext import commands

from utils.config import load_settings

log = logging.getLogger("rimbot")

initial_extensions = [
    "cogs.skillcheck",
    "cogs.players",
]


def build_bot(settings) -> commands.Bot:
    # Enable the necessary intents
    intents = nextcord.Intents.default()
    intents.message_content = True  # skill checks are read from plain messages

    bot = commands.Bot(command_prefix=settings.command_prefix, intents=intents)

    @bot.event
    async def on_ready():
        log.info("Logged in as %s", bot.user)

    @bot.event
    async def on_command_error(ctx, error):
        # "!r spell" is a skill check, not a bot command
        if isinstance(error, commands.CommandNotFound):
            return
        log.error("command %r failed: %s", ctx.message.content, error)

    for ext in initial_extensions:
        try:
            bot.load_extension(ext)
            log.info("Loaded: %s", ext)
        except Exception:
            log.exception("Failed to load %s", ext)

    return bot


def main():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.token:
        raise RuntimeError("DISCORD_TOKEN missing. Put it in a .env file next to bot.py.")

    bot = build_bot(settings)
    bot.run(settings.token)


if __name__ == "__main__":
    main()
