"""Tests for role lookup and the single-member toggle."""

from __future__ import annotations

import logging

import pytest

from bot.core.errors import RoleLookupFailed, RoleNotFound, RoleToggleFailed
from bot.core.roles import RoleInfo, find_role, member_list, toggle_role
from conftest import GUILD_ID, VOICE_ROLE, BarePlatform, FakePlatform


class TestFindRole:
    @pytest.mark.asyncio
    async def test_query_error_is_wrapped(self) -> None:
        platform = FakePlatform()
        platform.roles_error = RuntimeError("boom")

        with pytest.raises(RoleLookupFailed) as exc:
            await find_role(platform, GUILD_ID, "voice")

        assert str(exc.value) == "could not get roles: boom"
        assert isinstance(exc.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_no_roles(self) -> None:
        platform = FakePlatform(roles=[])
        with pytest.raises(RoleNotFound) as exc:
            await find_role(platform, GUILD_ID, "voice")
        assert str(exc.value) == "could not find role 'voice'"

    @pytest.mark.asyncio
    async def test_role_not_found(self) -> None:
        platform = FakePlatform(roles=[RoleInfo(1, "notvoice"), RoleInfo(2, "")])
        with pytest.raises(RoleNotFound):
            await find_role(platform, GUILD_ID, "voice")

    @pytest.mark.asyncio
    async def test_role_found(self) -> None:
        platform = FakePlatform(roles=[RoleInfo(1, "notvoice"), RoleInfo(2, "voice")])
        assert await find_role(platform, GUILD_ID, "voice") == RoleInfo(2, "voice")

    @pytest.mark.asyncio
    async def test_match_is_case_sensitive(self) -> None:
        platform = FakePlatform(roles=[RoleInfo(1, "Voice"), RoleInfo(2, "VOICE")])
        with pytest.raises(RoleNotFound):
            await find_role(platform, GUILD_ID, "voice")

    @pytest.mark.asyncio
    async def test_duplicates_resolve_to_first(self) -> None:
        platform = FakePlatform(roles=[RoleInfo(5, "voice"), RoleInfo(6, "voice")])
        assert (await find_role(platform, GUILD_ID, "voice")).id == 5

    @pytest.mark.asyncio
    async def test_every_call_queries_again(self) -> None:
        platform = FakePlatform()
        await find_role(platform, GUILD_ID, "voice")
        platform.roles = [RoleInfo(77, "voice")]
        assert (await find_role(platform, GUILD_ID, "voice")).id == 77
        assert platform.calls.count(("get_roles", GUILD_ID)) == 2


class TestToggleRole:
    @pytest.mark.asyncio
    async def test_enable_adds(self, platform: FakePlatform) -> None:
        await toggle_role(platform, GUILD_ID, 1, VOICE_ROLE.id, True)
        assert platform.added == [1]
        assert platform.removed == []

    @pytest.mark.asyncio
    async def test_disable_removes(self, platform: FakePlatform) -> None:
        platform.holders = {1}
        await toggle_role(platform, GUILD_ID, 1, VOICE_ROLE.id, False)
        assert platform.removed == [1]
        assert platform.added == []

    @pytest.mark.asyncio
    async def test_failure_is_wrapped_with_direction(self, platform: FakePlatform) -> None:
        platform.fail_for = {3}

        with pytest.raises(RoleToggleFailed) as exc:
            await toggle_role(platform, GUILD_ID, 3, VOICE_ROLE.id, False)

        err = exc.value
        assert err.enable is False
        assert err.action == "remove"
        assert err.member_id == 3
        assert "boom 3" in str(err)
        assert isinstance(err.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_success_logs_resolved_names(self, caplog: pytest.LogCaptureFixture) -> None:
        platform = FakePlatform(names={1: "milk"})
        with caplog.at_level(logging.INFO, logger="bot.core.roles"):
            await toggle_role(platform, GUILD_ID, 1, VOICE_ROLE.id, True)

        record = next(r for r in caplog.records if r.getMessage().startswith("role toggle"))
        assert record.role == "voice"
        assert record.user == "milk"
        assert record.enable is True

    @pytest.mark.asyncio
    async def test_unknown_names_fall_back(self, caplog: pytest.LogCaptureFixture) -> None:
        platform = FakePlatform(names={})
        with caplog.at_level(logging.INFO, logger="bot.core.roles"):
            await toggle_role(platform, GUILD_ID, 1, 12345, True)

        record = next(r for r in caplog.records if r.getMessage().startswith("role toggle"))
        assert record.role == "<unknown>"
        assert record.user == "<unknown>"

    @pytest.mark.asyncio
    async def test_name_cache_errors_never_fail_the_toggle(self) -> None:
        platform = FakePlatform()

        def broken(*_):
            raise KeyError("cache gone")

        platform.member_name = broken
        await toggle_role(platform, GUILD_ID, 1, VOICE_ROLE.id, True)
        assert platform.added == [1]

    @pytest.mark.asyncio
    async def test_platform_without_name_cache(self, caplog: pytest.LogCaptureFixture) -> None:
        platform = BarePlatform()
        with caplog.at_level(logging.INFO, logger="bot.core.roles"):
            await toggle_role(platform, GUILD_ID, 9, VOICE_ROLE.id, True)

        assert platform.added == [9]
        record = next(r for r in caplog.records if r.getMessage().startswith("role toggle"))
        assert record.user == "<unknown>"


class TestMemberList:
    def test_empty(self, platform: FakePlatform) -> None:
        assert member_list(platform, GUILD_ID, []) == "<none>"

    def test_names_and_unknowns(self) -> None:
        platform = FakePlatform(names={1: "a"})
        assert member_list(platform, GUILD_ID, [1, 2]) == "a, <unknown>"
