# bot/core/voice_events.py
from __future__ import annotations

from typing import TYPE_CHECKING

from bot.core.roles import find_role, toggle_role
from bot.core.state import GuildLocks

if TYPE_CHECKING:
    from bot.services.platform import Platform


async def toggle_voice_role(
    platform: Platform,
    locks: GuildLocks,
    guild_id: int,
    member_id: int,
    joined: bool,
    role_name: str = "voice",
) -> None:
    """
    Join -> add the managed role, leave -> remove it.
    Raises VoiceRoleError subclasses; the caller decides how to report them.
    """
    async with locks.hold(guild_id):
        role = await find_role(platform, guild_id, role_name)
        await toggle_role(platform, guild_id, member_id, role.id, joined)
