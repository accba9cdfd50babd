"""
Conversation modes for the intake console.

Invariants:
- Exactly one mode is active per session
- Each mode maps to exactly one system prompt and one temperature
- Mode changes are explicit (operator command), never implicit

Design:
- Mode is a string-based enum so it round-trips through JSON and CLI args
- ModeRegistry validates mode strings against VALID_MODES
- SessionDriver owns all mode transitions and applies them to the ledger
"""

import logging
from enum import Enum
from typing import Dict, Union

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """
    Operating mode of the assistant.

    PLAIN:
        Free-form assistant. Higher temperature.

    STRUCTURED_JSON:
        Assistant answers with a single JSON object.
        Toggled on and off with the 'json' operator command.

    GUIDED_INTAKE:
        Assistant interviews a patient one question at a time and finishes
        with a five-section structured answer. Patient replies feed the
        PatientRecord through the fact extractor.
    """
    PLAIN = "plain"
    STRUCTURED_JSON = "structured-json"
    GUIDED_INTAKE = "guided-intake"


# Single source of truth for valid mode strings
VALID_MODES = {mode.value for mode in Mode}


PLAIN_PROMPT = "You are a helpful assistant."

STRUCTURED_JSON_PROMPT = (
    "You are a helpful assistant. Always answer with exactly one valid JSON "
    "object and nothing else: no prose before or after it, no markdown code "
    "fences. Put the main answer under the key \"answer\" and add any other "
    "keys that make the answer easier to process."
)

GUIDED_INTAKE_PROMPT = (
    "You are a medical intake assistant talking to a patient. Ask one short "
    "question at a time. Find out the main complaint, the symptoms and how "
    "they developed, chronic conditions, allergies and medications the "
    "patient is taking. Do not give a conclusion until you have enough "
    "information.\n"
    "When you have enough information, answer with exactly these sections:\n"
    "1) Complaint summary\n"
    "2) Probable diagnosis\n"
    "3) Examination recommendations\n"
    "4) What to do now\n"
    "5) When to see a doctor urgently\n"
    "End the final answer with the sentence: \"This does not replace an "
    "in-person medical exam.\""
)

# First assistant turn in guided-intake mode. Returned verbatim by the
# gateway bypass, never generated.
GUIDED_INTAKE_GREETING = (
    "Hello! I am a virtual intake assistant. I will ask you a few questions "
    "about your health. Please describe what is bothering you today."
)

MODE_PROMPTS: Dict[Mode, str] = {
    Mode.PLAIN: PLAIN_PROMPT,
    Mode.STRUCTURED_JSON: STRUCTURED_JSON_PROMPT,
    Mode.GUIDED_INTAKE: GUIDED_INTAKE_PROMPT,
}

MODE_TEMPERATURES: Dict[Mode, float] = {
    Mode.PLAIN: 0.7,
    Mode.STRUCTURED_JSON: 0.3,
    Mode.GUIDED_INTAKE: 0.3,
}


def to_mode(value: Union[Mode, str]) -> Mode:
    """
    Coerce a mode or mode string to Mode.

    Raises:
        ValueError: If value is not one of VALID_MODES
    """
    if isinstance(value, Mode):
        return value
    if isinstance(value, str) and value.strip().lower() in VALID_MODES:
        return Mode(value.strip().lower())
    raise ValueError(f"Unknown mode: {value!r}. Expected one of {sorted(VALID_MODES)}")


class ModeRegistry:
    """Holds the current mode and the canonical prompt/temperature per mode"""

    def __init__(self, initial_mode: Union[Mode, str] = Mode.PLAIN) -> None:
        self._mode = to_mode(initial_mode)

    def current_mode(self) -> Mode:
        return self._mode

    def set_mode(self, mode: Union[Mode, str]) -> None:
        """
        Switch the active mode. Idempotent.

        Args:
            mode: Target mode (Mode or its string value)

        Raises:
            ValueError: If mode is unknown
        """
        new_mode = to_mode(mode)
        if new_mode != self._mode:
            logger.info(f"Mode changed: {self._mode.value} -> {new_mode.value}")
        self._mode = new_mode

    @staticmethod
    def system_prompt_for(mode: Union[Mode, str]) -> str:
        return MODE_PROMPTS[to_mode(mode)]

    @staticmethod
    def temperature_for(mode: Union[Mode, str]) -> float:
        return MODE_TEMPERATURES[to_mode(mode)]
