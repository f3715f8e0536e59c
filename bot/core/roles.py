# bot/core/roles.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from bot.core.errors import RoleLookupFailed, RoleNotFound, RoleToggleFailed

if TYPE_CHECKING:
    from bot.services.platform import Platform

log = logging.getLogger(__name__)

UNKNOWN = "<unknown>"
NONE = "<none>"


@dataclass(frozen=True)
class RoleInfo:
    id: int
    name: str


async def find_role(platform: Platform, guild_id: int, name: str) -> RoleInfo:
    """
    Fresh lookup every call (no caching). Exact, case-sensitive name match;
    with duplicate names the first role in platform order wins.
    """
    try:
        roles = await platform.get_roles(guild_id)
    except Exception as err:
        raise RoleLookupFailed(guild_id, err) from err

    for role in roles:
        if role.name == name:
            return role
    raise RoleNotFound(guild_id, name)


# ---------------- display names (best effort) ----------------

def _names(platform):
    from bot.services.platform import NameCache

    return platform if isinstance(platform, NameCache) else None


def _safe(lookup, *args) -> str:
    try:
        name = lookup(*args)
    except Exception:
        log.debug("name lookup failed", exc_info=True)
        return UNKNOWN
    return name if name else UNKNOWN


def role_display(platform, guild_id: int, role_id: int) -> str:
    names = _names(platform)
    return _safe(names.role_name, guild_id, role_id) if names else UNKNOWN


def member_display(platform, guild_id: int, member_id: int) -> str:
    names = _names(platform)
    return _safe(names.member_name, guild_id, member_id) if names else UNKNOWN


def member_list(platform, guild_id: int, members: Iterable[int]) -> str:
    shown = [member_display(platform, guild_id, uid) for uid in members]
    return ", ".join(shown) if shown else NONE


# ---------------- toggle ----------------

async def toggle_role(
    platform: Platform,
    guild_id: int,
    member_id: int,
    role_id: int,
    enable: bool,
) -> None:
    role_name = role_display(platform, guild_id, role_id)
    user_name = member_display(platform, guild_id, member_id)

    op = platform.add_member_role if enable else platform.remove_member_role
    try:
        await op(guild_id, member_id, role_id)
    except Exception as err:
        raise RoleToggleFailed(role_name, member_id, enable, err) from err

    log.info(
        "role toggle role=%s user=%s enable=%s",
        role_name,
        user_name,
        enable,
        extra={
            "guild_id": guild_id,
            "member_id": member_id,
            "role": role_name,
            "user": user_name,
            "enable": enable,
        },
    )
