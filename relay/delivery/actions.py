"""Outbound actions the gateway knows how to perform."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ActionKind(StrEnum):
    SEND_TEXT = "send_text"
    SEND_PHOTO = "send_photo"
    SEND_DOCUMENT = "send_document"
    SEND_AUDIO = "send_audio"
    SEND_VIDEO = "send_video"
    SEND_VOICE = "send_voice"
    SEND_STICKER = "send_sticker"
    COPY = "copy_verbatim"
    CREATE_THREAD = "create_thread"
    RENAME_THREAD = "rename_thread"


# Media sends: Bot method keyword that carries the file id.
MEDIA_FIELDS: dict[ActionKind, str] = {
    ActionKind.SEND_PHOTO: "photo",
    ActionKind.SEND_DOCUMENT: "document",
    ActionKind.SEND_AUDIO: "audio",
    ActionKind.SEND_VIDEO: "video",
    ActionKind.SEND_VOICE: "voice",
    ActionKind.SEND_STICKER: "sticker",
}


@dataclass(frozen=True)
class Action:
    """A single transport call.

    Use the constructors below rather than filling fields by hand; each
    kind only reads the fields it needs.
    """

    kind: ActionKind
    chat_id: int
    thread_id: int | None = None
    text: str | None = None
    file_id: str | None = None
    caption: str | None = None
    from_chat_id: int | None = None
    message_id: int | None = None
    title: str | None = None

    @classmethod
    def send_text(cls, chat_id: int, text: str, thread_id: int | None = None) -> Action:
        return cls(ActionKind.SEND_TEXT, chat_id, thread_id=thread_id, text=text)

    @classmethod
    def send_media(
        cls,
        kind: ActionKind,
        chat_id: int,
        file_id: str,
        *,
        caption: str | None = None,
        thread_id: int | None = None,
    ) -> Action:
        if kind not in MEDIA_FIELDS:
            raise ValueError(f"Not a media action: {kind}")
        if kind is ActionKind.SEND_STICKER:
            caption = None
        return cls(kind, chat_id, thread_id=thread_id, file_id=file_id, caption=caption)

    @classmethod
    def copy(
        cls, chat_id: int, from_chat_id: int, message_id: int, thread_id: int | None = None
    ) -> Action:
        return cls(
            ActionKind.COPY,
            chat_id,
            thread_id=thread_id,
            from_chat_id=from_chat_id,
            message_id=message_id,
        )

    @classmethod
    def create_thread(cls, chat_id: int, title: str) -> Action:
        return cls(ActionKind.CREATE_THREAD, chat_id, title=title)

    @classmethod
    def rename_thread(cls, chat_id: int, thread_id: int, title: str) -> Action:
        return cls(ActionKind.RENAME_THREAD, chat_id, thread_id=thread_id, title=title)


@dataclass(frozen=True)
class DeliveryResult:
    """What the transport handed back for a successful action."""

    message_id: int | None = None
    thread_id: int | None = None
