"""Lightweight async HTTP server that receives Telegram webhook updates.

Uses aiohttp's AppRunner/TCPSite for non-blocking start/stop inside the
same event loop as the Telegram application.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from relay.config import settings

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

# Callback signature: async (payload: dict) -> None
UpdateHandler = Callable[[dict[str, Any]], Awaitable[None]]

_ON_UPDATE = web.AppKey("on_update", UpdateHandler)
_TASKS = web.AppKey("tasks", set)


async def _handle_update(request: web.Request) -> web.Response:
    """POST <webhook_path> — validate the secret and queue the update."""
    secret = request.headers.get(SECRET_HEADER, "")
    if not settings.webhook_secret or secret != settings.webhook_secret:
        logger.warning("Invalid webhook secret token")
        return web.json_response({"error": "forbidden"}, status=403)

    try:
        payload: dict[str, Any] = await request.json()
    except ValueError:
        logger.warning("Webhook bad request: invalid JSON")
        return web.json_response({"error": "invalid JSON"}, status=400)

    # Fire-and-forget: Telegram only needs a fast 200.
    tasks: set[asyncio.Task] = request.app[_TASKS]
    task = asyncio.create_task(_run_handler(request.app[_ON_UPDATE], payload))
    tasks.add(task)
    task.add_done_callback(tasks.discard)

    return web.json_response({"ok": True})


async def _run_handler(handler: UpdateHandler, payload: dict[str, Any]) -> None:
    """Execute the update handler with error logging."""
    try:
        await handler(payload)
    except Exception:
        logger.exception("Update handler failed: update_id=%s", payload.get("update_id"))


async def _health(request: web.Request) -> web.Response:
    """GET /healthz — basic liveness check."""
    return web.json_response({"status": "ok"})


def _create_web_app(on_update: UpdateHandler) -> web.Application:
    """Build the aiohttp Application with routes."""
    app = web.Application()
    app[_ON_UPDATE] = on_update
    app[_TASKS] = set()
    app.router.add_get("/healthz", _health)
    app.router.add_post(settings.webhook_path, _handle_update)
    return app


class WebhookServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(self, on_update: UpdateHandler, port: int | None = None) -> None:
        self.port = port or settings.webhook_port
        self._on_update = on_update
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start listening for Telegram updates."""
        if not settings.webhook_secret:
            logger.warning("WEBHOOK_SECRET empty — webhook server disabled")
            return

        app = _create_web_app(self._on_update)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, "0.0.0.0", self.port)  # noqa: S104
        await site.start()
        logger.info("Webhook server listening on port %d (%s)", self.port, settings.webhook_path)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Webhook server stopped")
