"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from relay.delivery.actions import ActionKind, DeliveryResult
from relay.store.store import RecordStore


@pytest.fixture
def store(tmp_path: Path) -> RecordStore:
    """Create a RecordStore backed by a temp database."""
    return RecordStore(db_path=tmp_path / "test.db")


@pytest.fixture
def gateway() -> AsyncMock:
    """Mock DeliveryGateway that succeeds and hands out topic ids from 100."""
    gw = AsyncMock()
    next_thread = iter(range(100, 10_000))

    async def _deliver(action):
        if action.kind is ActionKind.CREATE_THREAD:
            return DeliveryResult(thread_id=next(next_thread))
        return DeliveryResult(message_id=1)

    gw.deliver = AsyncMock(side_effect=_deliver)
    return gw

