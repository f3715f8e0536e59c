# bot/cogs/voice_roles.py
from __future__ import annotations

import logging

import discord
from discord.ext import commands, tasks

from bot.core.errors import VoiceRoleError
from bot.core.reconcile import SyncResult, sync_voice_roles
from bot.core.state import GuildLocks
from bot.core.voice_events import toggle_voice_role
from bot.services.platform import DiscordPlatform, Platform

log = logging.getLogger(__name__)


def voice_transition(before: discord.VoiceState, after: discord.VoiceState) -> bool | None:
    """
    True  -> joined voice (no channel -> channel)
    False -> left voice (channel -> no channel)
    None  -> anything else (moves, mute/deaf/stream changes)
    """
    if before.channel is None and after.channel is not None:
        return True
    if before.channel is not None and after.channel is None:
        return False
    return None


class VoiceRolesCog(commands.Cog):
    """
    Keeps the managed role in sync with voice presence:
    - join voice => role added, leave voice => role removed
    - every guild gets its own sync loop once it is available, which
      corrects anything the events missed (restarts, dropped events)
    - both paths hold the guild's lock, so they never interleave
    """

    def __init__(
        self,
        bot: commands.Bot,
        settings,
        platform: Platform | None = None,
        locks: GuildLocks | None = None,
    ):
        self.bot = bot
        self.settings = settings
        self.platform = platform if platform is not None else DiscordPlatform(bot)
        self.locks = locks if locks is not None else GuildLocks()

        # guild_id -> running sync loop
        self._loops: dict[int, tasks.Loop] = {}

    def cog_unload(self):
        for loop in self._loops.values():
            loop.cancel()
        self._loops.clear()

    # ---------------- sync loops ----------------

    def start_sync(self, guild_id: int) -> None:
        current = self._loops.get(guild_id)
        if current is not None and current.is_running():
            return

        async def _tick():
            await self.sync_guild(guild_id)

        async def _on_error(error: BaseException):
            log.error(
                "voice role sync loop crashed",
                exc_info=(type(error), error, error.__traceback__),
                extra={"guild_id": guild_id},
            )

        loop = tasks.loop(seconds=self.settings.sync_interval_seconds)(_tick)
        loop.before_loop(self.bot.wait_until_ready)
        loop.error(_on_error)
        self._loops[guild_id] = loop
        loop.start()
        log.info(
            "voice role sync started (every %ss)",
            self.settings.sync_interval_seconds,
            extra={"guild_id": guild_id},
        )

    def stop_sync(self, guild_id: int) -> None:
        loop = self._loops.pop(guild_id, None)
        if loop is not None:
            loop.cancel()

    async def sync_guild(self, guild_id: int) -> SyncResult | None:
        try:
            return await sync_voice_roles(self.platform, self.locks, guild_id, self.settings.role_name)
        except VoiceRoleError as err:
            log.error("failed to sync voice roles: %s", err, extra={"guild_id": guild_id})
            return None
        except Exception:
            # keep the loop alive; the next tick retries
            log.exception("failed to sync voice roles", extra={"guild_id": guild_id})
            return None

    # ---------------- gateway events ----------------

    @commands.Cog.listener()
    async def on_ready(self):
        log.info("received ready event from gateway")

    @commands.Cog.listener()
    async def on_guild_available(self, guild: discord.Guild):
        self.start_sync(guild.id)

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild):
        self.start_sync(guild.id)

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild):
        self.stop_sync(guild.id)

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ):
        joined = voice_transition(before, after)
        if joined is None:
            return

        guild_id = member.guild.id
        try:
            await toggle_voice_role(
                self.platform,
                self.locks,
                guild_id,
                member.id,
                joined,
                self.settings.role_name,
            )
        except VoiceRoleError as err:
            log.error(
                "failed to toggle voice role: %s",
                err,
                extra={"guild_id": guild_id, "member_id": member.id, "enable": joined},
            )
