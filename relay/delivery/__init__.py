"""Outbound delivery — actions, retry policy, and failure taxonomy."""

from relay.delivery.actions import Action, ActionKind, DeliveryResult
from relay.delivery.errors import (
    DeliveryError,
    PermanentDeliveryError,
    RateLimitedError,
    RecipientUnreachableError,
    TransientDeliveryError,
    classify_error,
)
from relay.delivery.gateway import DeliveryGateway

__all__ = [
    "Action",
    "ActionKind",
    "DeliveryError",
    "DeliveryGateway",
    "DeliveryResult",
    "PermanentDeliveryError",
    "RateLimitedError",
    "RecipientUnreachableError",
    "TransientDeliveryError",
    "classify_error",
]
