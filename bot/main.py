# bot/main.py
import asyncio
import logging
import sys

import discord
from discord.ext import commands

from bot.config import MissingTokenError, Settings, load_settings
from bot.loader import load_all
from bot.logging_config import configure_logging

log = logging.getLogger("bot")


def build_bot(settings: Settings) -> commands.Bot:
    # voice states + members are needed to see who is in a call and who holds the role
    intents = discord.Intents.default()
    intents.guilds = True
    intents.members = True
    intents.voice_states = True

    bot = commands.Bot(
        command_prefix=commands.when_mentioned,
        intents=intents,
        help_command=None,
    )

    @bot.event
    async def setup_hook():
        await load_all(bot, settings)
        log.info("setup_hook: cogs loaded")

    return bot


async def run(settings: Settings) -> None:
    log.info("starting (env=%s, role=%r, sync every %ss)", settings.env, settings.role_name, settings.sync_interval_seconds)
    bot = build_bot(settings)
    async with bot:
        await bot.start(settings.token)


def cli() -> int:
    try:
        settings = load_settings()
    except MissingTokenError as err:
        configure_logging(None)
        log.error("bad DISCORD_TOKEN: %s", err)
        return 1

    configure_logging(settings)

    try:
        asyncio.run(run(settings))
    except (discord.ClientException, discord.HTTPException, discord.GatewayNotFound, OSError) as err:
        # LoginFailure / PrivilegedIntentsRequired are ClientExceptions
        log.error("could not connect to gateway: %s", err)
        return 1
    except KeyboardInterrupt:
        log.info("received keyboard interrupt, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(cli())
