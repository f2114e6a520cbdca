"""Telegram application factory."""

from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from relay.config import settings
from relay.delivery.gateway import DeliveryGateway
from relay.routing.events import InboundEvent
from relay.routing.resolver import ThreadResolver
from relay.routing.router import RelayRouter
from relay.routing.throttle import CardThrottle
from relay.store.store import RecordStore

logger = logging.getLogger(__name__)

ROUTER_KEY = "router"


async def handle_update(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Hand every new message to the relay router."""
    event = InboundEvent.from_update(update)
    if event is None:
        return
    router: RelayRouter = context.bot_data[ROUTER_KEY]
    outcome = await router.handle(event)
    logger.debug(
        "Update %s from chat %s: %s", update.update_id, event.chat.id, outcome
    )


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log failures that escaped the router (store errors, bugs)."""
    update_id = update.update_id if isinstance(update, Update) else None
    logger.error("Failed to process update %s", update_id, exc_info=context.error)


def build_router(app: Application, store: RecordStore | None = None) -> RelayRouter:
    """Wire store, gateway, resolver and throttle into a router."""
    store = store or RecordStore.get()
    gateway = DeliveryGateway(app.bot)
    resolver = ThreadResolver(store, gateway)
    return RelayRouter(store, gateway, resolver, CardThrottle())


def create_app() -> Application:
    """Build and configure the Telegram application."""
    app = Application.builder().token(settings.telegram_bot_token).concurrent_updates(True).build()

    app.bot_data[ROUTER_KEY] = build_router(app)
    logger.info(
        "Relay initialized: group=%s, admins=%s", settings.group_id, settings.get_admin_ids()
    )

    app.add_handler(MessageHandler(filters.UpdateType.MESSAGE, handle_update))
    app.add_error_handler(handle_error)

    return app
