"""
Operator command types for SessionDriver control flow.

Commands are case-insensitive literals typed at the console. Which ones
exist depends on the variant the session was started in; in any other
variant the same word is an ordinary user turn.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Union

from intake_console.utils.conversation_modes import Mode, to_mode


class OperatorCommand(str, Enum):
    EXIT = "exit"
    CLEAR = "clear"
    SUMMARY = "summary"
    JSON = "json"


BASE_COMMANDS = frozenset({OperatorCommand.EXIT, OperatorCommand.CLEAR})

VARIANT_COMMANDS = {
    Mode.PLAIN: BASE_COMMANDS,
    Mode.STRUCTURED_JSON: BASE_COMMANDS | {OperatorCommand.JSON},
    Mode.GUIDED_INTAKE: BASE_COMMANDS | {OperatorCommand.SUMMARY},
}


def commands_for(variant: Union[Mode, str]) -> FrozenSet[OperatorCommand]:
    return VARIANT_COMMANDS[to_mode(variant)]


@dataclass(frozen=True)
class UserReply:
    """
    Free text to be sent to the gateway as a user turn.

    Attributes:
        text: Reply exactly as typed
    """
    text: str


def parse_input(raw: Optional[str], variant: Union[Mode, str]) -> Union[OperatorCommand, UserReply, None]:
    """
    Classify one line of operator input.

    Args:
        raw: Line as typed (None is treated like an empty line)
        variant: Variant the session was started in

    Returns:
        None for empty/whitespace input, an OperatorCommand if the line is a
        command available in this variant, otherwise a UserReply
    """
    if raw is None or not raw.strip():
        return None

    lowered = raw.strip().lower()
    for command in commands_for(variant):
        if lowered == command.value:
            return command
    return UserReply(text=raw)
