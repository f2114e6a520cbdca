"""Delivery failure taxonomy and classification of Telegram API errors."""

from __future__ import annotations

from datetime import timedelta

from telegram.error import (
    BadRequest,
    Forbidden,
    NetworkError,
    RetryAfter,
    TelegramError,
    TimedOut,
)


class DeliveryError(Exception):
    """A transport call that did not succeed.

    Attributes:
        code: HTTP-like status code when the transport reports one.
        description: Human-readable reason from the transport.
        transient: Whether retrying the same call may succeed.
    """

    transient = False

    def __init__(self, description: str, *, code: int | None = None) -> None:
        super().__init__(description)
        self.description = description
        self.code = code


class TransientDeliveryError(DeliveryError):
    """Server-side unavailability or a dropped connection."""

    transient = True


class RateLimitedError(TransientDeliveryError):
    """Flood control (HTTP 429)."""

    def __init__(self, description: str, *, retry_after: float = 0.0) -> None:
        super().__init__(description, code=429)
        self.retry_after = retry_after


class PermanentDeliveryError(DeliveryError):
    """A failure that retrying will not fix."""


class RecipientUnreachableError(PermanentDeliveryError):
    """The bot may not message this chat (blocked, or never started)."""

    def __init__(self, description: str) -> None:
        super().__init__(description, code=403)


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def classify_error(exc: TelegramError) -> DeliveryError:
    """Map a python-telegram-bot exception onto the delivery taxonomy.

    Only flood control and server/connection failures are transient.
    ``TimedOut`` is treated as permanent because the request may already
    have been applied; resending could duplicate the message.
    """
    if isinstance(exc, RetryAfter):
        return RateLimitedError(exc.message, retry_after=_seconds(exc.retry_after))
    if isinstance(exc, Forbidden):
        return RecipientUnreachableError(exc.message)
    if isinstance(exc, BadRequest):
        return PermanentDeliveryError(exc.message, code=400)
    if isinstance(exc, TimedOut):
        return PermanentDeliveryError(exc.message)
    if isinstance(exc, NetworkError):
        return TransientDeliveryError(exc.message)
    return PermanentDeliveryError(exc.message)
