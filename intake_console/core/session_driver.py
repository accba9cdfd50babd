"""
Session Driver - Operator command state machine

Responsibilities:
- Own the single live Session (modes, transcript, patient record)
- Route each operator input to exactly one transition
- Call the completion gateway with the full transcript
- Roll back the user turn (and response log entry) when a call fails

Design principles:
- No module-level state: everything lives on the Session object
- Synchronous per turn: one gateway call at a time, no background work
- Only GatewayError is recovered from; anything else propagates
- Thin orchestration layer (extraction and detection are pure functions)

Transitions:
    empty input -> IGNORED
    exit        -> EXIT (terminal)
    clear       -> CLEARED (fresh session; greeting in guided-intake)
    summary     -> SUMMARY (guided-intake variant, read-only)
    json        -> MODE_SWITCHED (structured-json variant, toggles prompt)
    other text  -> REPLY, or ERROR after rollback
"""

import logging
from dataclasses import dataclass, field
from typing import Union

from intake_console.commands import OperatorCommand, UserReply, parse_input
from intake_console.config import DEFAULT_MAX_TOKENS
from intake_console.core.completion_detector import is_final, matched_markers
from intake_console.core.fact_extractor import (
    PatientRecord,
    extract,
    matched_categories,
    remove_last_response,
    with_final_recommendations,
)
from intake_console.core.history_ledger import HistoryLedger
from intake_console.results import TurnKind, TurnResult
from intake_console.utils.conversation_modes import (
    GUIDED_INTAKE_GREETING,
    Mode,
    ModeRegistry,
    to_mode,
)
from intake_console.utils.display_helpers import render_record
from intake_console.utils.gigachat_client import GatewayError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    Everything that changes turn by turn.

    Attributes:
        modes: Current mode and per-mode prompts/temperatures
        ledger: Transcript sent to the gateway
        record: Patient facts (only updated in guided-intake mode)
    """
    modes: ModeRegistry
    ledger: HistoryLedger
    record: PatientRecord = field(default_factory=PatientRecord)

    @classmethod
    def create(cls, mode: Union[Mode, str]) -> "Session":
        """Fresh session whose transcript is exactly [system(prompt for mode)]"""
        modes = ModeRegistry(mode)
        ledger = HistoryLedger(modes.system_prompt_for(modes.current_mode()))
        return cls(modes=modes, ledger=ledger)

    @property
    def mode(self) -> Mode:
        return self.modes.current_mode()


class SessionDriver:
    """
    Drives one console session against a completion gateway.

    The gateway is anything with
    complete(messages, temperature, max_tokens, initial_prompt=None) -> str
    that raises GatewayError on failure.
    """

    def __init__(self, gateway, variant: Union[Mode, str] = Mode.PLAIN,
                 max_tokens: int = DEFAULT_MAX_TOKENS):
        """
        Args:
            gateway: Completion gateway (GigaChatClient or a test double)
            variant: Starting mode; also selects which commands exist
            max_tokens: Generation limit per reply

        Raises:
            TypeError: If gateway has no callable complete()
            ValueError: If variant is not a known mode
        """
        if not callable(getattr(gateway, 'complete', None)):
            raise TypeError("gateway must have callable complete() method")

        self.gateway = gateway
        self.variant = to_mode(variant)
        self.max_tokens = max_tokens
        self.session = Session.create(self.variant)

        logger.info(f"Session driver initialized (variant={self.variant.value})")

    # ========================
    # Public API
    # ========================

    def start(self) -> TurnResult:
        """
        Begin a new session in the driver's variant.

        In guided-intake mode the greeting is appended as the first
        assistant turn.
        """
        self.session = Session.create(self.variant)
        logger.info(f"Session started in {self.variant.value} mode")

        greeting = self._greet() if self.session.mode == Mode.GUIDED_INTAKE else ""
        return self._result(
            TurnKind.STARTED,
            greeting,
            debug={'transcript_length': len(self.session.ledger)}
        )

    def handle_input(self, raw: str) -> TurnResult:
        """
        Process one line of operator input.

        Args:
            raw: Line as typed by the operator

        Returns:
            TurnResult describing the transition taken
        """
        parsed = parse_input(raw, self.variant)

        if parsed is None:
            return self._result(TurnKind.IGNORED, "")

        if isinstance(parsed, UserReply):
            return self._process_reply(parsed.text)

        if parsed == OperatorCommand.EXIT:
            logger.info("Session ended by operator")
            return self._result(TurnKind.EXIT, "Session ended.", terminated=True)

        if parsed == OperatorCommand.CLEAR:
            return self._clear()

        if parsed == OperatorCommand.SUMMARY:
            return self._result(TurnKind.SUMMARY, render_record(self.session.record))

        if parsed == OperatorCommand.JSON:
            return self._toggle_json()

        raise ValueError(f"Unhandled command: {parsed!r}")

    # ========================
    # Transitions
    # ========================

    def _clear(self) -> TurnResult:
        mode = self.session.mode
        self.session = Session.create(mode)
        logger.info(f"History cleared (mode={mode.value})")

        output = "History cleared."
        if mode == Mode.GUIDED_INTAKE:
            output = f"{output}\n{self._greet()}"

        return self._result(
            TurnKind.CLEARED,
            output,
            debug={'transcript_length': len(self.session.ledger)}
        )

    def _toggle_json(self) -> TurnResult:
        modes = self.session.modes
        if modes.current_mode() == Mode.STRUCTURED_JSON:
            new_mode = Mode.PLAIN
            output = "JSON mode disabled."
        else:
            new_mode = Mode.STRUCTURED_JSON
            output = "JSON mode enabled."

        modes.set_mode(new_mode)
        self.session.ledger.replace_system_prompt(modes.system_prompt_for(new_mode))
        return self._result(TurnKind.MODE_SWITCHED, output)

    def _greet(self) -> str:
        """
        Greeting bypass: the gateway returns the initial prompt verbatim
        (no request is made) and it becomes the first assistant turn.
        """
        session = self.session
        greeting = self.gateway.complete(
            session.ledger.messages(),
            temperature=session.modes.temperature_for(session.mode),
            max_tokens=self.max_tokens,
            initial_prompt=GUIDED_INTAKE_GREETING,
        )
        session.ledger.append_assistant(greeting)
        return greeting

    def _process_reply(self, text: str) -> TurnResult:
        session = self.session
        mode = session.mode
        guided = mode == Mode.GUIDED_INTAKE
        debug = {}

        session.ledger.append_user(text)

        if guided:
            is_first_reply = not session.record.responses
            session.record = extract(session.record, text, is_first_reply)
            debug['first_reply'] = is_first_reply
            debug['categories'] = matched_categories(text)

        try:
            reply = self.gateway.complete(
                session.ledger.messages(),
                temperature=session.modes.temperature_for(mode),
                max_tokens=self.max_tokens,
            )
        except GatewayError as e:
            logger.error(f"Gateway call failed, rolling back turn: {e}")
            session.ledger.rollback_last_user()
            if guided:
                session.record = remove_last_response(session.record)
            return self._result(
                TurnKind.ERROR,
                f"Error: {e}",
                error=str(e),
                debug={'transcript_length': len(session.ledger)}
            )

        final = is_final(reply)
        session.ledger.append_assistant(reply)

        if guided and final:
            session.record = with_final_recommendations(session.record, reply)
            debug['markers'] = matched_markers(reply)
            logger.info("Final structured answer received")

        debug['transcript_length'] = len(session.ledger)
        return self._result(TurnKind.REPLY, reply, is_final=final, debug=debug)

    def _result(self, kind: TurnKind, output: str, **kwargs) -> TurnResult:
        return TurnResult(kind=kind, output=output, mode=self.session.mode, **kwargs)
