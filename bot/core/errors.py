# bot/core/errors.py
from __future__ import annotations


class VoiceRoleError(Exception):
    """Base for every failure the voice role core reports."""


class RoleLookupFailed(VoiceRoleError):
    def __init__(self, guild_id: int, cause: BaseException):
        super().__init__(f"could not get roles: {cause}")
        self.guild_id = guild_id
        self.cause = cause


class RoleNotFound(VoiceRoleError):
    def __init__(self, guild_id: int, name: str):
        super().__init__(f"could not find role {name!r}")
        self.guild_id = guild_id
        self.name = name


class MembershipQueryFailed(VoiceRoleError):
    def __init__(self, guild_id: int, role_name: str, cause: BaseException):
        super().__init__(f"could not get members with role {role_name!r}: {cause}")
        self.guild_id = guild_id
        self.role_name = role_name
        self.cause = cause


class RoleToggleFailed(VoiceRoleError):
    def __init__(self, role_name: str, member_id: int, enable: bool, cause: BaseException):
        self.role_name = role_name
        self.member_id = member_id
        self.enable = enable
        self.cause = cause
        super().__init__(
            f"failed to {self.action} role {role_name!r} for member {member_id}: {cause}"
        )

    @property
    def action(self) -> str:
        return "add" if self.enable else "remove"
