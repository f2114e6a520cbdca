"""Relay bot entry point."""

import asyncio
import contextlib
import logging
import sys
from typing import Any

from telegram import Update
from telegram.ext import Application

from relay.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def run_webhook(app: Application) -> None:
    """Serve updates pushed by Telegram until cancelled."""
    from relay.webhooks.server import WebhookServer

    async def _enqueue(payload: dict[str, Any]) -> None:
        await app.update_queue.put(Update.de_json(payload, app.bot))

    async with app:
        await app.start()
        server = WebhookServer(_enqueue)
        await server.start()
        try:
            await app.bot.set_webhook(
                url=settings.webhook_url,
                secret_token=settings.webhook_secret,
                allowed_updates=[Update.MESSAGE],
            )
            logger.info("Webhook set to %s", settings.webhook_url)
            await asyncio.Event().wait()
        finally:
            await server.stop()
            await app.stop()


def main() -> None:
    """Check configuration and start the relay in webhook or polling mode."""
    missing = settings.missing_required()
    if missing:
        logger.error("Missing required configuration: %s", ", ".join(missing))
        sys.exit(1)

    from relay.bot.app import create_app

    app = create_app()
    if settings.app_base_url:
        logger.info("Starting relay for group %s in webhook mode...", settings.group_id)
        with contextlib.suppress(KeyboardInterrupt):
            asyncio.run(run_webhook(app))
    else:
        logger.info("Starting relay for group %s in polling mode...", settings.group_id)
        app.run_polling(allowed_updates=[Update.MESSAGE])


if __name__ == "__main__":
    main()
