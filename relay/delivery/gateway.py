"""DeliveryGateway — Telegram Bot API calls with bounded exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from telegram.error import TelegramError

from relay.config import settings
from relay.delivery.actions import MEDIA_FIELDS, Action, ActionKind, DeliveryResult
from relay.delivery.errors import RateLimitedError, classify_error

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import telegram

logger = logging.getLogger(__name__)


class DeliveryGateway:
    """Performs outbound actions against the Bot API.

    Transient failures (flood control, 5xx, dropped connections) are retried
    up to *max_retries* extra times with delays of *base_delay*, then
    multiplied by *multiplier* per retry.  Anything else is raised on the
    first attempt.  The last error is raised once the budget is spent.
    """

    def __init__(
        self,
        bot: telegram.Bot,
        *,
        max_retries: int | None = None,
        base_delay: float | None = None,
        multiplier: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._bot = bot
        self._max_retries = settings.max_retries if max_retries is None else max_retries
        self._base_delay = settings.retry_base_delay if base_delay is None else base_delay
        self._multiplier = settings.retry_multiplier if multiplier is None else multiplier
        self._sleep = sleep

    async def deliver(self, action: Action) -> DeliveryResult:
        """Perform *action*, retrying transient failures.

        Raises:
            DeliveryError: the classified transport failure.
        """
        delay = self._base_delay
        attempt = 0
        while True:
            try:
                return await self._perform(action)
            except TelegramError as exc:
                error = classify_error(exc)
                if not error.transient or attempt >= self._max_retries:
                    raise error from exc
                wait = delay
                if isinstance(error, RateLimitedError):
                    wait = max(delay, error.retry_after)
                logger.warning(
                    "Telegram API error on %s: %s. Retrying in %.1fs (%d/%d)",
                    action.kind,
                    error.description,
                    wait,
                    attempt + 1,
                    self._max_retries,
                )
            await self._sleep(wait)
            delay *= self._multiplier
            attempt += 1

    async def _perform(self, action: Action) -> DeliveryResult:
        """Single Bot API call for *action*, no retries."""
        bot = self._bot
        kind = action.kind

        if kind is ActionKind.SEND_TEXT:
            msg = await bot.send_message(
                chat_id=action.chat_id,
                text=action.text,
                message_thread_id=action.thread_id,
            )
            return DeliveryResult(message_id=msg.message_id)

        if kind in MEDIA_FIELDS:
            kwargs: dict[str, Any] = {
                "chat_id": action.chat_id,
                MEDIA_FIELDS[kind]: action.file_id,
                "message_thread_id": action.thread_id,
            }
            if kind is not ActionKind.SEND_STICKER:
                kwargs["caption"] = action.caption
            msg = await getattr(bot, kind.value)(**kwargs)
            return DeliveryResult(message_id=msg.message_id)

        if kind is ActionKind.COPY:
            copied = await bot.copy_message(
                chat_id=action.chat_id,
                from_chat_id=action.from_chat_id,
                message_id=action.message_id,
                message_thread_id=action.thread_id,
            )
            return DeliveryResult(message_id=copied.message_id)

        if kind is ActionKind.CREATE_THREAD:
            topic = await bot.create_forum_topic(chat_id=action.chat_id, name=action.title)
            return DeliveryResult(thread_id=topic.message_thread_id)

        if kind is ActionKind.RENAME_THREAD:
            await bot.edit_forum_topic(
                chat_id=action.chat_id,
                message_thread_id=action.thread_id,
                name=action.title,
            )
            return DeliveryResult(thread_id=action.thread_id)

        raise ValueError(f"Unsupported action: {kind}")
