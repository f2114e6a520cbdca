"""Persistence for users and their forum threads."""

from relay.store.models import Thread, User
from relay.store.store import RecordStore

__all__ = [
    "RecordStore",
    "Thread",
    "User",
]
