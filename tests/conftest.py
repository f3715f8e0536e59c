"""Shared fixtures: an in-memory platform that records role edits."""

from __future__ import annotations

import asyncio

import pytest

from bot.core.roles import RoleInfo
from bot.core.state import GuildLocks

GUILD_ID = 42
VOICE_ROLE = RoleInfo(id=900, name="voice")


class FakePlatform:
    """Platform + NameCache backed by plain dicts.

    ``holders`` is mutated by add/remove so consecutive sync passes see the
    effect of earlier ones.
    """

    def __init__(
        self,
        roles: list[RoleInfo] | None = None,
        holders: set[int] | None = None,
        channels: dict[int, list[int]] | None = None,
        names: dict[int, str] | None = None,
    ):
        self.roles = list(roles) if roles is not None else [VOICE_ROLE]
        self.holders = set(holders or ())
        self.channels = dict(channels or {})
        self.names = dict(names or {})

        self.roles_error: Exception | None = None
        self.members_error: Exception | None = None
        self.fail_for: set[int] = set()

        self.added: list[int] = []
        self.removed: list[int] = []
        self.calls: list[tuple[str, int]] = []

    async def get_roles(self, guild_id):
        self.calls.append(("get_roles", guild_id))
        if self.roles_error:
            raise self.roles_error
        return list(self.roles)

    async def get_members_with_role(self, guild_id, role):
        if self.members_error:
            raise self.members_error
        return list(self.holders)

    async def get_voice_channel_occupants(self, guild_id):
        return {cid: list(ids) for cid, ids in self.channels.items()}

    async def add_member_role(self, guild_id, member_id, role_id):
        self.calls.append(("add", member_id))
        if member_id in self.fail_for:
            raise RuntimeError(f"boom {member_id}")
        self.added.append(member_id)
        self.holders.add(member_id)

    async def remove_member_role(self, guild_id, member_id, role_id):
        self.calls.append(("remove", member_id))
        if member_id in self.fail_for:
            raise RuntimeError(f"boom {member_id}")
        self.removed.append(member_id)
        self.holders.discard(member_id)

    def role_name(self, guild_id, role_id):
        for r in self.roles:
            if r.id == role_id:
                return r.name
        return None

    def member_name(self, guild_id, member_id):
        return self.names.get(member_id)


class BarePlatform:
    """Platform without any name cache."""

    def __init__(self):
        self.added: list[int] = []

    async def get_roles(self, guild_id):
        return [VOICE_ROLE]

    async def get_members_with_role(self, guild_id, role):
        return []

    async def get_voice_channel_occupants(self, guild_id):
        return {}

    async def add_member_role(self, guild_id, member_id, role_id):
        self.added.append(member_id)

    async def remove_member_role(self, guild_id, member_id, role_id):
        pass


class SlowPlatform(FakePlatform):
    """Yields to the event loop inside every role edit."""

    async def add_member_role(self, guild_id, member_id, role_id):
        await asyncio.sleep(0.01)
        await super().add_member_role(guild_id, member_id, role_id)

    async def remove_member_role(self, guild_id, member_id, role_id):
        await asyncio.sleep(0.01)
        await super().remove_member_role(guild_id, member_id, role_id)


@pytest.fixture()
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture()
def locks() -> GuildLocks:
    return GuildLocks()
