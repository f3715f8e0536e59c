# bot/services/platform.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

import discord

from bot.core.roles import RoleInfo

AUDIT_REASON = "voice role sync"


class Platform(Protocol):
    """Chat platform operations the voice role core needs."""

    async def get_roles(self, guild_id: int) -> list[RoleInfo]: ...

    async def get_members_with_role(self, guild_id: int, role: RoleInfo) -> list[int]: ...

    async def get_voice_channel_occupants(self, guild_id: int) -> dict[int, list[int]]: ...

    async def add_member_role(self, guild_id: int, member_id: int, role_id: int) -> None: ...

    async def remove_member_role(self, guild_id: int, member_id: int, role_id: int) -> None: ...


@runtime_checkable
class NameCache(Protocol):
    """Local-cache name lookups; None means "not cached", never an error."""

    def role_name(self, guild_id: int, role_id: int) -> str | None: ...

    def member_name(self, guild_id: int, member_id: int) -> str | None: ...


class DiscordPlatform:
    """
    Platform + NameCache on top of a discord.py client.

    - roles come from REST (fresh every call)
    - role holders come from the member cache after chunking the guild
    - voice occupants come from cached voice states (voice + stage channels)
    - role edits go straight to the REST routes, no member object needed
    """

    def __init__(self, bot: discord.Client):
        self.bot = bot

    def _guild(self, guild_id: int) -> discord.Guild:
        guild = self.bot.get_guild(guild_id)
        if guild is None:
            raise discord.ClientException(f"guild {guild_id} is not available")
        return guild

    # ---------------- Platform ----------------

    async def get_roles(self, guild_id: int) -> list[RoleInfo]:
        roles = await self._guild(guild_id).fetch_roles()
        return [RoleInfo(id=r.id, name=r.name) for r in roles]

    async def get_members_with_role(self, guild_id: int, role: RoleInfo) -> list[int]:
        guild = self._guild(guild_id)
        if not guild.chunked:
            await guild.chunk(cache=True)
        return [m.id for m in guild.members if m.get_role(role.id) is not None]

    async def get_voice_channel_occupants(self, guild_id: int) -> dict[int, list[int]]:
        guild = self._guild(guild_id)
        occupants: dict[int, list[int]] = {}
        for ch in (*guild.voice_channels, *guild.stage_channels):
            occupants[ch.id] = list(ch.voice_states.keys())
        return occupants

    async def add_member_role(self, guild_id: int, member_id: int, role_id: int) -> None:
        await self.bot.http.add_role(guild_id, member_id, role_id, reason=AUDIT_REASON)

    async def remove_member_role(self, guild_id: int, member_id: int, role_id: int) -> None:
        await self.bot.http.remove_role(guild_id, member_id, role_id, reason=AUDIT_REASON)

    # ---------------- NameCache ----------------

    def role_name(self, guild_id: int, role_id: int) -> str | None:
        guild = self.bot.get_guild(guild_id)
        role = guild.get_role(role_id) if guild else None
        return role.name if role else None

    def member_name(self, guild_id: int, member_id: int) -> str | None:
        guild = self.bot.get_guild(guild_id)
        member = guild.get_member(member_id) if guild else None
        return member.name if member else None
