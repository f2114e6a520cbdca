"""ThreadResolver — find a user's thread or open exactly one new one."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from relay.config import settings
from relay.delivery.actions import Action
from relay.delivery.errors import DeliveryError
from relay.store.models import Thread

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from relay.delivery.gateway import DeliveryGateway
    from relay.store.models import User
    from relay.store.store import RecordStore

logger = logging.getLogger(__name__)


class ThreadCreationError(Exception):
    """The forum topic for a user could not be opened."""

    def __init__(self, user_id: int, cause: DeliveryError) -> None:
        super().__init__(f"Could not create thread for user {user_id}: {cause.description}")
        self.user_id = user_id
        self.cause = cause


class KeyedLock:
    """One ``asyncio.Lock`` per key, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @contextlib.asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def thread_title(user: User, max_length: int) -> str:
    """Display name for a user's topic: ``First Last @username (id)``."""
    parts = [user.full_name]
    if user.username:
        parts.append(f"@{user.username}")
    parts.append(f"({user.user_id})")
    return " ".join(part for part in parts if part)[:max_length]


class ThreadResolver:
    """Maps users to forum topics in the configured group.

    Thread creation is serialized per user: concurrent first messages from
    the same user wait on one lock, and whoever enters second finds the
    thread the first one stored.
    """

    def __init__(
        self,
        store: RecordStore,
        gateway: DeliveryGateway,
        *,
        group_id: int | None = None,
        title_max_length: int | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._group_id = group_id or settings.group_id
        self._title_max_length = title_max_length or settings.title_max_length
        self._locks = KeyedLock()

    async def resolve_or_create(self, user: User) -> Thread:
        """Return the user's active thread, opening a new topic if there is none.

        Raises:
            ThreadCreationError: the topic could not be created; nothing was stored.
        """
        thread = await self._store.get_thread_by_user(user.user_id)
        if thread is not None:
            return thread

        async with self._locks.hold(user.user_id):
            # Another event may have created it while we waited.
            thread = await self._store.get_thread_by_user(user.user_id)
            if thread is not None:
                return thread

            title = thread_title(user, self._title_max_length)
            try:
                result = await self._gateway.deliver(Action.create_thread(self._group_id, title))
            except DeliveryError as exc:
                logger.error("Failed to create topic for user %s: %s", user.user_id, exc.description)
                raise ThreadCreationError(user.user_id, exc) from exc

            thread = await self._store.save_thread(
                Thread(
                    thread_id=result.thread_id,
                    group_id=self._group_id,
                    user_id=user.user_id,
                    title=title,
                )
            )
            logger.info("Created thread %s for user %s", thread.thread_id, user.user_id)
            return thread
