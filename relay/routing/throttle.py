"""Once-per-day gate for user card announcements."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def _utc_today() -> date:
    return datetime.now(UTC).date()


class CardThrottle:
    """Remembers which users were announced on the current UTC date.

    Only today's user ids are kept; the set is dropped when the date rolls
    over.  Process-local and never persisted: a restart forgets everything,
    which at worst repeats one card per user.
    """

    def __init__(self, today: Callable[[], date] = _utc_today) -> None:
        self._today = today
        self._day: date | None = None
        self._sent_today: set[int] = set()

    def should_send(self, user_id: int) -> bool:
        """Return True (and record it) if no card went out for *user_id* today."""
        today = self._today()
        if today != self._day:
            self._day = today
            self._sent_today = set()
        if user_id in self._sent_today:
            return False
        self._sent_today.add(user_id)
        return True

    def __len__(self) -> int:
        return len(self._sent_today)
