"""
Result types returned by SessionDriver.start() and SessionDriver.handle_input()

These are the ONLY return types from the driver. The console and the Flask
app render them; neither inspects the session directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from intake_console.utils.conversation_modes import Mode


class TurnKind(str, Enum):
    IGNORED = "ignored"
    EXIT = "exit"
    CLEARED = "cleared"
    SUMMARY = "summary"
    MODE_SWITCHED = "mode_switched"
    STARTED = "started"
    REPLY = "reply"
    ERROR = "error"


@dataclass(frozen=True)
class TurnResult:
    """
    Outcome of one operator input.

    Attributes:
        kind: Which transition was taken
        output: Text to display (assistant reply, notice, summary or error)
        mode: Mode active after the transition
        is_final: Assistant reply was classified as the final structured answer
        terminated: Session has ended ('exit')
        error: Error message for recoverable gateway failures
        debug: Extra information (matched categories, markers, transcript length)
    """
    kind: TurnKind
    output: str
    mode: Mode
    is_final: bool = False
    terminated: bool = False
    error: Optional[str] = None
    debug: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'output': self.output,
            'mode': self.mode.value,
            'is_final': self.is_final,
            'terminated': self.terminated,
            'error': self.error,
            'debug': self.debug,
        }
