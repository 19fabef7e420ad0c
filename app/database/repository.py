from __future__ import annotations

import sqlite3

import aiosqlite

from app.exceptions import StorageReadError, StorageWriteError


class StateRepository:
    """Key/value store holding one serialized state blob per user id."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def get(self, user_id: str) -> str | None:
        try:
            cursor = await self._conn.execute(
                "SELECT state FROM user_state WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
        except (sqlite3.Error, ValueError) as e:
            raise StorageReadError(user_id, str(e)) from e
        return row[0] if row else None

    async def put(self, user_id: str, state: str) -> None:
        try:
            await self._conn.execute(
                "INSERT INTO user_state (user_id, state) VALUES (?, ?) "
                "ON CONFLICT(user_id) DO UPDATE SET "
                "state = excluded.state, updated_at = datetime('now')",
                (user_id, state),
            )
            await self._conn.commit()
        except (sqlite3.Error, ValueError) as e:
            raise StorageWriteError(user_id, str(e)) from e
