"""
Command Grammar.

Each mode has a closed set of commands. An input line is parsed once into a
ParsedCommand; anything that does not fit the grammar becomes UNKNOWN.
"""

import shlex
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar


class CellCommand(Enum):
    USERNAME = "username"
    TOKEN = "token"
    PWD = "pwd"
    LS = "ls"
    SL = "sl"
    EXTCELL = "extcell"
    RELATION = "relation"
    ROLE = "role"
    EXTROLE = "extrole"
    ACCOUNT = "account"
    RCVMESSAGE = "rcvmessage"
    SNTMESSAGE = "sntmessage"
    CD = "cd"
    MK = "mk"
    RM = "rm"
    ACL = "acl"
    HELP = "help"
    QUIT = "quit"
    UNKNOWN = "unknown"


class BoxCommand(Enum):
    PWD = "pwd"
    LS = "ls"
    SL = "sl"
    URL = "url"
    META = "meta"
    CD = "cd"
    PUT = "put"
    GET = "get"
    RM = "rm"
    HELP = "help"
    QUIT = "quit"
    UNKNOWN = "unknown"


CommandT = TypeVar("CommandT", CellCommand, BoxCommand)

ALIASES = {"?": "help", "q": "quit"}

CELL_ARGUMENT_COMMANDS = frozenset({CellCommand.CD, CellCommand.MK, CellCommand.RM})
BOX_ARGUMENT_COMMANDS = frozenset({BoxCommand.CD, BoxCommand.PUT, BoxCommand.GET, BoxCommand.RM})


@dataclass(frozen=True)
class ParsedCommand:
    """A command word resolved to its enum member, plus its single argument."""

    command: CellCommand | BoxCommand
    argument: str | None = None


def _parse(line: str, commands: type[CommandT], with_argument: frozenset) -> ParsedCommand:
    unknown = ParsedCommand(commands.UNKNOWN)
    try:
        words = shlex.split(line)
    except ValueError:
        return unknown
    if not words:
        return unknown

    word = ALIASES.get(words[0], words[0])
    try:
        command = commands(word)
    except ValueError:
        return unknown
    if command is commands.UNKNOWN:
        return unknown

    args = words[1:]
    if command in with_argument:
        return ParsedCommand(command, args[0]) if len(args) == 1 else unknown
    return ParsedCommand(command) if not args else unknown


def parse_cell_command(line: str) -> ParsedCommand:
    return _parse(line, CellCommand, CELL_ARGUMENT_COMMANDS)


def parse_box_command(line: str) -> ParsedCommand:
    return _parse(line, BoxCommand, BOX_ARGUMENT_COMMANDS)
