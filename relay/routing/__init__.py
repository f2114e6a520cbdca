"""Thread routing — inbound events, resolver, and the relay state machine."""

from relay.routing.events import InboundEvent
from relay.routing.resolver import ThreadCreationError, ThreadResolver
from relay.routing.router import RelayRouter, RouteOutcome
from relay.routing.throttle import CardThrottle

__all__ = [
    "CardThrottle",
    "InboundEvent",
    "RelayRouter",
    "RouteOutcome",
    "ThreadCreationError",
    "ThreadResolver",
]
