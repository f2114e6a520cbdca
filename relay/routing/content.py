"""Message content as a tagged union, plus the fallback cascade order."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from relay.delivery.actions import Action, ActionKind

if TYPE_CHECKING:
    from relay.routing.events import Message


class ContentKind(StrEnum):
    TEXT = "text"
    PHOTO = "photo"
    DOCUMENT = "document"
    AUDIO = "audio"
    VIDEO = "video"
    VOICE = "voice"
    STICKER = "sticker"


# First match wins when a message is resent field by field.
CASCADE_ORDER: tuple[ContentKind, ...] = (
    ContentKind.TEXT,
    ContentKind.PHOTO,
    ContentKind.DOCUMENT,
    ContentKind.AUDIO,
    ContentKind.VIDEO,
    ContentKind.VOICE,
    ContentKind.STICKER,
)

_ACTION_KINDS: dict[ContentKind, ActionKind] = {
    ContentKind.TEXT: ActionKind.SEND_TEXT,
    ContentKind.PHOTO: ActionKind.SEND_PHOTO,
    ContentKind.DOCUMENT: ActionKind.SEND_DOCUMENT,
    ContentKind.AUDIO: ActionKind.SEND_AUDIO,
    ContentKind.VIDEO: ActionKind.SEND_VIDEO,
    ContentKind.VOICE: ActionKind.SEND_VOICE,
    ContentKind.STICKER: ActionKind.SEND_STICKER,
}


@dataclass(frozen=True)
class MessageContent:
    """The one piece of a message the cascade will resend.

    ``value`` is the text for TEXT and the file id for every media kind.
    Stickers never carry a caption.
    """

    kind: ContentKind
    value: str
    caption: str | None = None

    def to_action(self, chat_id: int, thread_id: int | None = None) -> Action:
        """Build the type-specific send for this content."""
        if self.kind is ContentKind.TEXT:
            return Action.send_text(chat_id, self.value, thread_id=thread_id)
        return Action.send_media(
            _ACTION_KINDS[self.kind],
            chat_id,
            self.value,
            caption=self.caption,
            thread_id=thread_id,
        )


def _value_for(message: Message, kind: ContentKind) -> str | None:
    if kind is ContentKind.TEXT:
        return message.text or None
    if kind is ContentKind.PHOTO:
        # Telegram lists sizes smallest first.
        return message.photo[-1].file_id if message.photo else None
    ref = getattr(message, kind.value)
    return ref.file_id if ref is not None else None


def extract_content(message: Message) -> MessageContent | None:
    """Pick the highest-priority content in *message*, or None if unsupported."""
    for kind in CASCADE_ORDER:
        value = _value_for(message, kind)
        if value is None:
            continue
        caption = None if kind in (ContentKind.TEXT, ContentKind.STICKER) else message.caption
        return MessageContent(kind=kind, value=value, caption=caption)
    return None
