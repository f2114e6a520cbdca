"""User and Thread record models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


def utc_now() -> str:
    """Current time as an ISO 8601 UTC string."""
    return datetime.now(UTC).isoformat()


@dataclass
class User:
    """A platform user mirrored from the last private message they sent.

    Attributes:
        user_id: Telegram user id (stable, externally assigned).
        first_name: Display first name.
        last_name: Optional last name.
        username: Optional ``@username`` without the ``@``.
        updated_at: ISO 8601 timestamp of the last message seen.
    """

    user_id: int
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None
    updated_at: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``users`` column order."""
        return (
            self.user_id,
            self.first_name,
            self.last_name,
            self.username,
            self.updated_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> User:
        """Deserialize from a SQLite row tuple."""
        return cls(
            user_id=row[0],
            first_name=row[1] or "",
            last_name=row[2],
            username=row[3],
            updated_at=row[4],
        )


@dataclass
class Thread:
    """Routing record binding one user to one forum topic in the group.

    Attributes:
        thread_id: Forum topic id (``message_thread_id``) assigned by Telegram.
        group_id: The supergroup the topic lives in.
        user_id: Owner of the thread.
        title: Topic display name, bounded in length.
        is_archived: Closed threads stop relaying staff replies.
        created_at: ISO 8601 timestamp, set once on insert.
        updated_at: ISO 8601 timestamp of the last save.
    """

    thread_id: int
    group_id: int
    user_id: int
    title: str
    is_archived: bool = False
    created_at: str = ""
    updated_at: str = ""

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``threads`` column order."""
        return (
            self.thread_id,
            self.group_id,
            self.user_id,
            self.title,
            int(self.is_archived),
            self.created_at,
            self.updated_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> Thread:
        """Deserialize from a SQLite row tuple."""
        return cls(
            thread_id=row[0],
            group_id=row[1],
            user_id=row[2],
            title=row[3],
            is_archived=bool(row[4]),
            created_at=row[5],
            updated_at=row[6],
        )
