# bot/loader.py
from __future__ import annotations

import logging

from bot.cogs.voice_roles import VoiceRolesCog
from bot.core.state import GuildLocks
from bot.services.platform import DiscordPlatform

log = logging.getLogger(__name__)


async def load_all(bot, settings, platform=None, locks=None):
    log.info("Starting loader...")

    # attach shared deps (so any cog can grab them if needed)
    bot.settings = settings
    bot.platform = platform if platform is not None else DiscordPlatform(bot)
    bot.voice_locks = locks if locks is not None else GuildLocks()

    # ---------------- VOICE ROLES ----------------
    await bot.add_cog(
        VoiceRolesCog(
            bot,
            settings,
            platform=bot.platform,
            locks=bot.voice_locks,
        )
    )
    log.info("VoiceRolesCog loaded (role=%r)", settings.role_name)

    log.info("Loaded cogs: %s", ", ".join(bot.cogs.keys()))
