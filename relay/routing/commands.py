"""Bot command parsing for private chats and thread management."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class CommandName(StrEnum):
    START = "start"
    IDENTIFY = "identify"
    RENAME = "rename"
    CLOSE = "close"


_ALIASES: dict[str, CommandName] = {
    "start": CommandName.START,
    "id": CommandName.IDENTIFY,
    "identify": CommandName.IDENTIFY,
    "rename": CommandName.RENAME,
    "close": CommandName.CLOSE,
}

THREAD_COMMANDS = frozenset({CommandName.IDENTIFY, CommandName.RENAME, CommandName.CLOSE})


@dataclass(frozen=True)
class Command:
    name: CommandName
    args: str = ""


def parse_command(text: str | None) -> Command | None:
    """Parse ``/name[@bot] args`` into a Command.

    Returns None for plain text and for commands this bot does not handle,
    so those are relayed like any other message.
    """
    if not text or not text.startswith("/"):
        return None
    parts = text[1:].split(maxsplit=1)
    if not parts:
        return None
    name = parts[0].split("@", 1)[0].lower()
    command = _ALIASES.get(name)
    if command is None:
        return None
    args = parts[1].strip() if len(parts) > 1 else ""
    return Command(name=command, args=args)
