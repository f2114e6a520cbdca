"""RelayRouter — decides what every inbound message turns into."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from relay.config import settings
from relay.delivery.actions import Action
from relay.delivery.errors import DeliveryError, RecipientUnreachableError
from relay.routing.commands import THREAD_COMMANDS, Command, CommandName, parse_command
from relay.routing.content import extract_content
from relay.routing.resolver import ThreadCreationError

if TYPE_CHECKING:
    from relay.delivery.gateway import DeliveryGateway
    from relay.routing.events import InboundEvent, Message
    from relay.routing.resolver import ThreadResolver
    from relay.routing.throttle import CardThrottle
    from relay.store.models import Thread, User
    from relay.store.store import RecordStore

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "👋 Welcome!\n\n"
    "I'll put you in touch with our support team. Just send me a message "
    "and I'll pass it on to our staff.\n\n"
    "Supported message types:\n"
    "- Text\n- Photos\n- Documents\n- Audio\n- Video\n- Voice messages\n- Stickers"
)
FORWARD_FAILED_TEXT = "❌ Could not forward a message from user {user_id}"
USER_UNREACHABLE_TEXT = (
    "⚠️ The bot can't message this user. Ask the client to send /start to the bot."
)
THREAD_CLOSED_TEXT = "Thread closed."


class RouteOutcome(StrEnum):
    FORWARDED = "forwarded"
    FORWARDED_FALLBACK = "forwarded_fallback"
    RELAYED = "relayed"
    COMMAND = "command"
    GREETED = "greeted"
    IGNORED = "ignored"
    FAILED = "failed"


def user_card(user: User) -> str:
    """One-line identity card posted into a user's thread."""
    username = f"@{user.username}" if user.username else "-"
    return f"👤 {user.full_name} | {username} | id={user.user_id}"


class RelayRouter:
    """Routes private messages into threads and thread replies back to users.

    Holds no state between events beyond the injected card throttle; all
    mappings live in the store.  Store errors propagate to the caller.
    """

    def __init__(
        self,
        store: RecordStore,
        gateway: DeliveryGateway,
        resolver: ThreadResolver,
        throttle: CardThrottle,
        *,
        group_id: int | None = None,
        admin_ids: set[int] | None = None,
        title_max_length: int | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._resolver = resolver
        self._throttle = throttle
        self._group_id = group_id or settings.group_id
        self._admin_ids = settings.get_admin_ids() if admin_ids is None else admin_ids
        self._title_max_length = title_max_length or settings.title_max_length

    async def handle(self, event: InboundEvent) -> RouteOutcome:
        """Process one inbound message."""
        if event.chat.is_private:
            return await self._handle_private(event)
        if event.chat.id == self._group_id:
            return await self._handle_group(event)
        return RouteOutcome.IGNORED

    # -- user -> thread --------------------------------------------------------

    async def _handle_private(self, event: InboundEvent) -> RouteOutcome:
        user = await self._store.upsert_user(event.from_user.to_user())
        message = event.message

        command = parse_command(message.text)
        if command is not None and command.name is CommandName.START:
            await self._send_best_effort(Action.send_text(event.chat.id, WELCOME_TEXT))
            return RouteOutcome.GREETED

        try:
            thread = await self._resolver.resolve_or_create(user)
        except ThreadCreationError:
            return RouteOutcome.FAILED

        if self._throttle.should_send(user.user_id):
            await self._post_in_thread(thread, user_card(user))

        try:
            await self._gateway.deliver(
                Action.copy(
                    self._group_id,
                    from_chat_id=event.chat.id,
                    message_id=message.message_id,
                    thread_id=thread.thread_id,
                )
            )
            return RouteOutcome.FORWARDED
        except DeliveryError as exc:
            logger.warning(
                "Failed to copy message %s from user %s: %s",
                message.message_id,
                user.user_id,
                exc.description,
            )

        try:
            sent = await self._resend(message, self._group_id, thread.thread_id)
        except DeliveryError as exc:
            logger.error("Fallback send failed for user %s: %s", user.user_id, exc.description)
            sent = False
        if sent:
            return RouteOutcome.FORWARDED_FALLBACK

        await self._post_in_thread(thread, FORWARD_FAILED_TEXT.format(user_id=user.user_id))
        return RouteOutcome.FAILED

    # -- thread -> user --------------------------------------------------------

    async def _handle_group(self, event: InboundEvent) -> RouteOutcome:
        message = event.message
        if not message.is_topic_message or message.message_thread_id is None:
            return RouteOutcome.IGNORED
        if event.from_user.is_bot:
            return RouteOutcome.IGNORED

        command = parse_command(message.text)
        if command is not None and command.name in THREAD_COMMANDS:
            return await self._handle_command(event, command)

        thread = await self._store.get_thread_by_id(message.message_thread_id)
        if thread is None or thread.is_archived:
            return RouteOutcome.IGNORED

        try:
            sent = await self._resend(message, thread.user_id)
        except RecipientUnreachableError:
            logger.warning("User %s is unreachable from thread %s", thread.user_id, thread.thread_id)
            await self._post_in_thread(thread, USER_UNREACHABLE_TEXT)
            return RouteOutcome.FAILED
        except DeliveryError as exc:
            logger.error("Failed to send message to user %s: %s", thread.user_id, exc.description)
            return RouteOutcome.FAILED
        return RouteOutcome.RELAYED if sent else RouteOutcome.IGNORED

    # -- admin commands --------------------------------------------------------

    async def _handle_command(self, event: InboundEvent, command: Command) -> RouteOutcome:
        if event.from_user.id not in self._admin_ids:
            logger.debug("Ignoring /%s from non-admin %s", command.name, event.from_user.id)
            return RouteOutcome.IGNORED

        thread = await self._store.get_thread_by_id(event.message.message_thread_id)
        if thread is None:
            return RouteOutcome.IGNORED

        if command.name is CommandName.IDENTIFY:
            await self._post_in_thread(thread, f"👤 id={thread.user_id}")
            return RouteOutcome.COMMAND

        if command.name is CommandName.RENAME:
            return await self._rename(thread, command.args)

        await self._store.archive_thread(thread.thread_id)
        await self._post_in_thread(thread, THREAD_CLOSED_TEXT)
        return RouteOutcome.COMMAND

    async def _rename(self, thread: Thread, new_title: str) -> RouteOutcome:
        title = new_title.strip()[: self._title_max_length]
        if not title:
            return RouteOutcome.IGNORED
        try:
            await self._gateway.deliver(
                Action.rename_thread(self._group_id, thread.thread_id, title)
            )
        except DeliveryError as exc:
            logger.error("Failed to rename topic %s: %s", thread.thread_id, exc.description)
            return RouteOutcome.FAILED
        await self._store.rename_thread(thread.thread_id, title)
        logger.info("Renamed thread %s to %r", thread.thread_id, title)
        return RouteOutcome.COMMAND

    # -- helpers ---------------------------------------------------------------

    async def _resend(self, message: Message, chat_id: int, thread_id: int | None = None) -> bool:
        """Send the message's content explicitly, by type.

        Returns False when the message has nothing the cascade can resend.
        """
        content = extract_content(message)
        if content is None:
            logger.warning("Message %s has no resendable content", message.message_id)
            return False
        await self._gateway.deliver(content.to_action(chat_id, thread_id))
        return True

    async def _post_in_thread(self, thread: Thread, text: str) -> None:
        await self._send_best_effort(Action.send_text(self._group_id, text, thread.thread_id))

    async def _send_best_effort(self, action: Action) -> None:
        try:
            await self._gateway.deliver(action)
        except DeliveryError as exc:
            logger.warning("Best-effort send to %s failed: %s", action.chat_id, exc.description)
