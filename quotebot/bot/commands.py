from __future__ import annotations

"""Inbound text -> Command.

Parsing is a pure function of the text, the is-command flag and the router's
fixed configuration: no state is consulted or updated.
"""
import enum
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from quotebot.core.errors import (
    EmptyInput,
    OverlongImplicitInput,
    UnknownCommand,
)

COMMAND_PREFIX = "/"
USERNAME_SEPARATOR = "@"

# Un-prefixed messages longer than this are ordinary chat, not ticker lookups.
IMPLICIT_QUOTE_MAX_TOKENS = 2


class HandlerKind(str, enum.Enum):
    START = "start"
    HELP = "help"
    SOURCE = "source"
    QUOTE = "quote"
    CONVERT = "convert"
    CEX = "cex"
    JSE = "jse"


DEFAULT_COMMANDS: Mapping[str, HandlerKind] = {
    "start": HandlerKind.START,
    "welcome": HandlerKind.START,
    "help": HandlerKind.HELP,
    "source": HandlerKind.SOURCE,
    "about": HandlerKind.SOURCE,
    "quote": HandlerKind.QUOTE,
    "price": HandlerKind.QUOTE,
    "convert": HandlerKind.CONVERT,
    "cex": HandlerKind.CEX,
    "jse": HandlerKind.JSE,
}


@dataclass(frozen=True)
class Command:
    handler: HandlerKind
    arguments: Tuple[str, ...] = ()


def tokenize(text: str) -> list[str]:
    return text.split()


def looks_like_command(text: str) -> bool:
    """Fallback for transports without entity metadata."""
    return text.lstrip().startswith(COMMAND_PREFIX)


class CommandRouter:
    def __init__(
        self,
        bot_name: str = "",
        implicit_max_tokens: int = IMPLICIT_QUOTE_MAX_TOKENS,
        commands: Mapping[str, HandlerKind] = DEFAULT_COMMANDS,
    ):
        self._bot_name = bot_name.lstrip(USERNAME_SEPARATOR).lower()
        self._implicit_max_tokens = implicit_max_tokens
        self._commands: Dict[str, HandlerKind] = {k.lower(): v for k, v in commands.items()}

    def _command_name(self, token: str) -> str:
        name, sep, addressee = token.partition(USERNAME_SEPARATOR)
        if sep and self._bot_name and addressee.lower() != self._bot_name:
            # only our own @name is stripped; anything else fails lookup
            raise UnknownCommand(token.removeprefix(COMMAND_PREFIX).lower())
        return name.removeprefix(COMMAND_PREFIX).lower()

    def parse(self, text: str, is_command: bool) -> Command:
        tokens = tokenize(text or "")
        if not tokens:
            raise EmptyInput("empty message")

        if not is_command:
            if len(tokens) > self._implicit_max_tokens:
                raise OverlongImplicitInput(f"{len(tokens)} words in implicit quote")
            return Command(HandlerKind.QUOTE, tuple(tokens))

        name = self._command_name(tokens[0])
        handler = self._commands.get(name)
        if handler is None:
            raise UnknownCommand(name)
        return Command(handler, tuple(tokens[1:]))
