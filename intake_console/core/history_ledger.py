"""
History Ledger - Ordered transcript of role-tagged turns

Responsibilities:
- Store the transcript sent to the completion gateway
- Replace the leading system turn on mode switch
- Roll back the last user turn when its gateway call fails

Design principles:
- Turn[0] is always the system turn (established at construction)
- Turns are immutable; only the system turn is ever replaced
- No truncation policy: the transcript grows unbounded
- The gateway is stateless, so callers send the whole snapshot every call
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """
    One role-tagged message of the transcript.

    Attributes:
        role: Author of the message
        content: Message text
    """
    role: Role
    content: str

    def to_message(self) -> Dict[str, str]:
        """Wire representation expected by the chat-completion API"""
        return {"role": self.role.value, "content": self.content}


class HistoryLedger:
    """Mutable, ordered list of turns with a leading system turn"""

    def __init__(self, system_prompt: str) -> None:
        """
        Args:
            system_prompt: Content of Turn[0]
        """
        self._turns: List[Turn] = [Turn(Role.SYSTEM, system_prompt)]

    def __len__(self) -> int:
        return len(self._turns)

    def append_user(self, text: str) -> None:
        self._turns.append(Turn(Role.USER, text))

    def append_assistant(self, text: str) -> None:
        self._turns.append(Turn(Role.ASSISTANT, text))

    def replace_system_prompt(self, text: str) -> None:
        """
        Overwrite the content of Turn[0].

        No-op if Turn[0] is not a system turn. All other turns keep their
        content and position.
        """
        if not self._turns or self._turns[0].role != Role.SYSTEM:
            logger.warning("Transcript does not start with a system turn; prompt not replaced")
            return
        self._turns[0] = Turn(Role.SYSTEM, text)

    def rollback_last_user(self) -> None:
        """
        Remove the most recently appended turn.

        Only valid right after append_user() whose gateway call failed.
        The caller is responsible for that ordering; here we only refuse
        to drop the system turn.

        Raises:
            ValueError: If only the system turn is left
        """
        if len(self._turns) <= 1:
            raise ValueError("Nothing to roll back: transcript only holds the system turn")

        last = self._turns[-1]
        if last.role != Role.USER:
            logger.warning(f"Rolling back a {last.role.value} turn, expected a user turn")
        self._turns.pop()

    def reset(self, system_prompt: str) -> None:
        """Drop everything; transcript becomes exactly [system]"""
        self._turns = [Turn(Role.SYSTEM, system_prompt)]

    def snapshot(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def messages(self) -> List[Dict[str, str]]:
        """Full transcript as a list of wire dicts"""
        return [turn.to_message() for turn in self._turns]
