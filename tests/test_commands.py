"""Tests for bot command parsing."""

from relay.routing.commands import Command, CommandName, parse_command


def test_plain_text_is_not_a_command() -> None:
    assert parse_command("hello") is None
    assert parse_command("") is None
    assert parse_command(None) is None
    assert parse_command("/") is None


def test_id_and_identify() -> None:
    assert parse_command("/id") == Command(CommandName.IDENTIFY)
    assert parse_command("/identify") == Command(CommandName.IDENTIFY)


def test_rename_with_args() -> None:
    assert parse_command("/rename  VIP client  ") == Command(CommandName.RENAME, "VIP client")


def test_rename_without_args() -> None:
    assert parse_command("/rename") == Command(CommandName.RENAME, "")


def test_bot_suffix_is_stripped() -> None:
    assert parse_command("/close@SupportRelayBot") == Command(CommandName.CLOSE)


def test_start() -> None:
    assert parse_command("/start") == Command(CommandName.START)


def test_unknown_command_is_none() -> None:
    assert parse_command("/help") is None
