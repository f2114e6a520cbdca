"""Inbound event models validated from Telegram update payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from relay.store.models import User

if TYPE_CHECKING:
    from telegram import Update


class FileRef(BaseModel):
    """Any Telegram file object; only the id is needed to resend it."""

    file_id: str


class Chat(BaseModel):
    id: int
    type: str

    @property
    def is_private(self) -> bool:
        return self.type == "private"


class Sender(BaseModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None

    def to_user(self) -> User:
        return User(
            user_id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            username=self.username,
        )


class Message(BaseModel):
    message_id: int
    message_thread_id: int | None = None
    is_topic_message: bool = False
    text: str | None = None
    caption: str | None = None
    photo: list[FileRef] | None = None
    document: FileRef | None = None
    audio: FileRef | None = None
    video: FileRef | None = None
    voice: FileRef | None = None
    sticker: FileRef | None = None


class InboundEvent(BaseModel):
    """A new message as seen by the router: where, from whom, and what."""

    model_config = ConfigDict(populate_by_name=True)

    chat: Chat
    from_user: Sender = Field(alias="from")
    message: Message

    @classmethod
    def from_update(cls, update: Update) -> InboundEvent | None:
        """Build an event from a python-telegram-bot ``Update``.

        Returns None for updates that carry no new message or no sender
        (edits, channel posts, callback queries, ...).
        """
        msg = update.message
        if msg is None or msg.from_user is None:
            return None
        return cls.model_validate(
            {
                "chat": msg.chat.to_dict(),
                "from": msg.from_user.to_dict(),
                "message": msg.to_dict(),
            }
        )
