"""Tests for InboundEvent parsing from payloads and telegram Updates."""

from datetime import UTC, datetime

from telegram import Chat, Message, PhotoSize, Update, User

from relay.routing.events import InboundEvent


def _update(chat: Chat, **message_fields) -> Update:
    message = Message(
        message_id=5,
        date=datetime(2025, 3, 1, tzinfo=UTC),
        chat=chat,
        from_user=User(id=1, is_bot=False, first_name="Alice", username="alice"),
        **message_fields,
    )
    return Update(update_id=1, message=message)


def test_from_payload_uses_from_alias() -> None:
    event = InboundEvent.model_validate(
        {
            "chat": {"id": 1, "type": "private"},
            "from": {"id": 1, "is_bot": False, "first_name": "Alice"},
            "message": {"message_id": 5, "text": "hi"},
        }
    )
    assert event.from_user.id == 1
    assert event.chat.is_private is True
    assert event.message.text == "hi"
    assert event.message.is_topic_message is False


def test_from_update_private_text() -> None:
    event = InboundEvent.from_update(_update(Chat(id=1, type=Chat.PRIVATE), text="hello"))

    assert event is not None
    assert event.chat.id == 1
    assert event.chat.is_private is True
    assert event.from_user.username == "alice"
    assert event.message.message_id == 5
    assert event.message.text == "hello"


def test_from_update_topic_photo() -> None:
    photos = (
        PhotoSize(file_id="small", file_unique_id="s", width=90, height=90),
        PhotoSize(file_id="large", file_unique_id="l", width=1280, height=1280),
    )
    event = InboundEvent.from_update(
        _update(
            Chat(id=-100123, type=Chat.SUPERGROUP),
            photo=photos,
            caption="look",
            message_thread_id=77,
            is_topic_message=True,
        )
    )

    assert event.chat.is_private is False
    assert event.message.message_thread_id == 77
    assert event.message.is_topic_message is True
    assert [p.file_id for p in event.message.photo] == ["small", "large"]
    assert event.message.caption == "look"


def test_from_update_without_message_is_none() -> None:
    assert InboundEvent.from_update(Update(update_id=2)) is None


def test_sender_to_user() -> None:
    event = InboundEvent.from_update(_update(Chat(id=1, type=Chat.PRIVATE), text="x"))
    user = event.from_user.to_user()
    assert user.user_id == 1
    assert user.first_name == "Alice"
    assert user.last_name is None
    assert user.username == "alice"
