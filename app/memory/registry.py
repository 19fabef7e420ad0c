from __future__ import annotations

import asyncio
from collections import defaultdict

from app.database.repository import StateRepository
from app.memory.user_memory import UserMemory


class UserMemoryRegistry:
    """Process-wide cache of one UserMemory per user id.

    Managers are loaded on first access and reused until the process exits.
    Each user id also gets its own lock; callers hold it around a full
    read-modify-write turn so concurrent connections for the same user
    apply their changes one after another.
    """

    def __init__(self, store: StateRepository, max_messages: int = 20, max_decisions: int = 50):
        self._store = store
        self._max_messages = max_messages
        self._max_decisions = max_decisions
        self._memories: dict[str, UserMemory] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get(self, user_id: str) -> UserMemory:
        """Return the loaded manager for user_id, creating it if needed."""
        memory = self._memories.get(user_id)
        if memory is None:
            memory = UserMemory(
                user_id,
                self._store,
                max_messages=self._max_messages,
                max_decisions=self._max_decisions,
            )
            self._memories[user_id] = memory
        await memory.load()
        return memory

    def lock(self, user_id: str) -> asyncio.Lock:
        return self._locks[user_id]

    def __len__(self) -> int:
        return len(self._memories)
