"""RecordStore — aiosqlite persistence for users and their threads."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import aiosqlite

from relay.config import settings
from relay.store.models import Thread, User, utc_now

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_CREATE_USERS = """
CREATE TABLE IF NOT EXISTS users (
    user_id    INTEGER PRIMARY KEY,
    first_name TEXT NOT NULL DEFAULT '',
    last_name  TEXT,
    username   TEXT,
    updated_at TEXT NOT NULL
)
"""

_CREATE_THREADS = """
CREATE TABLE IF NOT EXISTS threads (
    thread_id   INTEGER PRIMARY KEY,
    group_id    INTEGER NOT NULL,
    user_id     INTEGER NOT NULL,
    title       TEXT NOT NULL,
    is_archived INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)
"""

# One active thread per user; archived threads are kept for history.
_CREATE_ACTIVE_INDEX = """
CREATE UNIQUE INDEX IF NOT EXISTS threads_active_user
    ON threads (user_id) WHERE is_archived = 0
"""

_THREAD_COLUMNS = "thread_id, group_id, user_id, title, is_archived, created_at, updated_at"


class RecordStore:
    """Persists users and user-to-thread mappings in SQLite.

    Singleton accessed via ``RecordStore.get()``.  Pass an explicit *db_path*
    for test isolation (e.g. ``tmp_path / "test.db"``).

    Every write is a single-row ``INSERT ... ON CONFLICT DO UPDATE`` that
    only touches the writer's own columns, so concurrent handlers never
    overwrite each other's fields.  Database errors are never swallowed.
    """

    _instance: RecordStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path
        self._initialised = False
        self._init_lock = asyncio.Lock()

    @classmethod
    def get(cls) -> RecordStore:
        """Return the shared RecordStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    # -- Internal helpers ------------------------------------------------------

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(self._db_path))
        await db.execute("PRAGMA busy_timeout=5000")
        if not self._initialised:
            async with self._init_lock:
                if not self._initialised:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.execute(_CREATE_USERS)
                    await db.execute(_CREATE_THREADS)
                    await db.execute(_CREATE_ACTIVE_INDEX)
                    await db.commit()
                    self._initialised = True
        return db

    @staticmethod
    async def _fetch_thread(db: aiosqlite.Connection, where: str, params: tuple) -> Thread | None:
        cursor = await db.execute(
            f"SELECT {_THREAD_COLUMNS} FROM threads WHERE {where}",  # noqa: S608
            params,
        )
        row = await cursor.fetchone()
        return Thread.from_row(row) if row else None

    # -- Users -----------------------------------------------------------------

    async def get_user(self, user_id: int) -> User | None:
        """Fetch a user by id, or None if never seen."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT user_id, first_name, last_name, username, updated_at "
                "FROM users WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
            return User.from_row(row) if row else None
        finally:
            await db.close()

    async def upsert_user(self, profile: User) -> User:
        """Insert or merge a user's profile fields and bump ``updated_at``."""
        now = utc_now()
        db = await self._connect()
        try:
            await db.execute(
                """
                INSERT INTO users (user_id, first_name, last_name, username, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id) DO UPDATE SET
                    first_name = excluded.first_name,
                    last_name  = excluded.last_name,
                    username   = excluded.username,
                    updated_at = excluded.updated_at
                """,
                (profile.user_id, profile.first_name, profile.last_name, profile.username, now),
            )
            await db.commit()
        finally:
            await db.close()
        return User(
            user_id=profile.user_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            username=profile.username,
            updated_at=now,
        )

    # -- Threads ---------------------------------------------------------------

    async def get_thread_by_user(self, user_id: int) -> Thread | None:
        """Return the user's active (non-archived) thread, or None."""
        db = await self._connect()
        try:
            return await self._fetch_thread(
                db, "user_id = ? AND is_archived = 0", (user_id,)
            )
        finally:
            await db.close()

    async def get_thread_by_id(self, thread_id: int) -> Thread | None:
        """Return any thread by id, archived or not."""
        db = await self._connect()
        try:
            return await self._fetch_thread(db, "thread_id = ?", (thread_id,))
        finally:
            await db.close()

    async def save_thread(self, thread: Thread) -> Thread:
        """Insert a thread, or merge ``title`` into an existing one.

        ``created_at`` is set on insert and preserved on update; ``updated_at``
        is always refreshed.  ``is_archived`` is only ever changed by
        :meth:`archive_thread`.  Returns the stored record.
        """
        now = utc_now()
        db = await self._connect()
        try:
            await db.execute(
                f"""
                INSERT INTO threads ({_THREAD_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (thread_id) DO UPDATE SET
                    title      = excluded.title,
                    updated_at = excluded.updated_at
                """,  # noqa: S608
                (
                    thread.thread_id,
                    thread.group_id,
                    thread.user_id,
                    thread.title,
                    int(thread.is_archived),
                    thread.created_at or now,
                    now,
                ),
            )
            await db.commit()
            saved = await self._fetch_thread(db, "thread_id = ?", (thread.thread_id,))
        finally:
            await db.close()
        logger.debug("Saved thread %s for user %s", thread.thread_id, thread.user_id)
        return saved

    async def rename_thread(self, thread_id: int, title: str) -> bool:
        """Set a thread's title. Returns True if a row was updated."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "UPDATE threads SET title = ?, updated_at = ? WHERE thread_id = ?",
                (title, utc_now(), thread_id),
            )
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()

    async def archive_thread(self, thread_id: int) -> bool:
        """Mark a thread archived. Returns True if a row was updated."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "UPDATE threads SET is_archived = 1, updated_at = ? WHERE thread_id = ?",
                (utc_now(), thread_id),
            )
            await db.commit()
            updated = cursor.rowcount > 0
            if updated:
                logger.info("Archived thread: %s", thread_id)
            return updated
        finally:
            await db.close()
