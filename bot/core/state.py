# bot/core/state.py
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class GuildLocks:
    """
    Runtime-only guard for voice role changes.

    One asyncio.Lock per guild:
    - every join/leave toggle and every sync pass holds its guild's lock
      for its whole duration
    - unrelated guilds never wait on each other
    """

    def __init__(self):
        # guild_id -> lock (created on first use, never dropped)
        self._locks: dict[int, asyncio.Lock] = {}

    def get(self, guild_id: int) -> asyncio.Lock:
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = self._locks[guild_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, guild_id: int) -> AsyncIterator[None]:
        async with self.get(guild_id):
            yield

    def locked(self, guild_id: int) -> bool:
        lock = self._locks.get(guild_id)
        return lock is not None and lock.locked()
