# bot/core/reconcile.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bot.core.errors import MembershipQueryFailed, RoleToggleFailed
from bot.core.idset import IdSet
from bot.core.roles import RoleInfo, find_role, member_list, toggle_role
from bot.core.state import GuildLocks

if TYPE_CHECKING:
    from bot.services.platform import Platform

log = logging.getLogger(__name__)


@dataclass
class SyncResult:
    guild_id: int
    role: RoleInfo
    to_add: IdSet[int]
    to_remove: IdSet[int]
    failures: list[RoleToggleFailed] = field(default_factory=list)

    @property
    def toggled(self) -> int:
        return len(self.to_add) + len(self.to_remove) - len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


def plan_sync(role_members: IdSet[int], call_members: IdSet[int]) -> tuple[IdSet[int], IdSet[int]]:
    """
    Returns (to_add, to_remove):
      to_add    = in a call, no role
      to_remove = has role, not in a call
    """
    return call_members.diff(role_members), role_members.diff(call_members)


async def members_with_role(platform: Platform, guild_id: int, role: RoleInfo) -> IdSet[int]:
    try:
        ids = await platform.get_members_with_role(guild_id, role)
    except Exception as err:
        raise MembershipQueryFailed(guild_id, role.name, err) from err
    return IdSet.of(ids)


async def members_in_call(platform: Platform, guild_id: int) -> IdSet[int]:
    occupants = await platform.get_voice_channel_occupants(guild_id)
    members: IdSet[int] = IdSet()
    for ids in occupants.values():
        members.union(ids)
    return members


async def sync_voice_roles(
    platform: Platform,
    locks: GuildLocks,
    guild_id: int,
    role_name: str = "voice",
) -> SyncResult:
    """
    One reconciliation pass for a guild.

    Role lookup / membership errors abort the pass before any toggle and are
    raised. Toggle failures are logged, collected on the result, and the rest
    of the pass still runs.
    """
    log.info("sync voice roles tick", extra={"guild_id": guild_id})

    async with locks.hold(guild_id):
        role = await find_role(platform, guild_id, role_name)

        role_members = await members_with_role(platform, guild_id, role)
        log.info(
            "got role members: %s",
            member_list(platform, guild_id, role_members),
            extra={"guild_id": guild_id},
        )

        call_members = await members_in_call(platform, guild_id)
        log.info(
            "got call members: %s",
            member_list(platform, guild_id, call_members),
            extra={"guild_id": guild_id},
        )

        to_add, to_remove = plan_sync(role_members, call_members)
        result = SyncResult(guild_id=guild_id, role=role, to_add=to_add, to_remove=to_remove)

        for uid in to_remove:
            await _apply(platform, result, uid, enable=False)
        for uid in to_add:
            await _apply(platform, result, uid, enable=True)

    log.info(
        "voice role sync done add=%d remove=%d failures=%d",
        len(to_add),
        len(to_remove),
        len(result.failures),
        extra={
            "guild_id": guild_id,
            "to_add": len(to_add),
            "to_remove": len(to_remove),
            "failures": len(result.failures),
        },
    )
    return result


async def _apply(platform: Platform, result: SyncResult, member_id: int, enable: bool) -> None:
    try:
        await toggle_role(platform, result.guild_id, member_id, result.role.id, enable)
    except RoleToggleFailed as err:
        result.failures.append(err)
        log.error(
            "could not %s role: %s",
            err.action,
            err,
            extra={"guild_id": result.guild_id, "member_id": member_id, "enable": enable},
        )
