"""
Completion-State Detector - Is this assistant reply the final answer?

Stateless classifier over a single reply. "Final" is a property of the
reply's content, not of how many turns have passed.
"""

import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)

SECTION_HEADERS: Tuple[str, ...] = (
    'complaint summary',
    'probable diagnosis',
    'examination recommendations',
    'what to do now',
    'when to see a doctor urgently',
    # Localized equivalents
    'резюме жалоб',
    'вероятный диагноз',
    'рекомендации по обследованию',
    'что делать сейчас',
    'когда срочно обратиться к врачу',
)

ENUMERATORS: Tuple[str, ...] = ('1)', '2)', '3)', '4)', '5)')

DISCLAIMERS: Tuple[str, ...] = (
    'does not replace an in-person medical exam',
    'не заменяет очную консультацию врача',
)

FINAL_MARKERS: Tuple[str, ...] = SECTION_HEADERS + ENUMERATORS + DISCLAIMERS


def matched_markers(reply_text: str) -> List[str]:
    """All FINAL_MARKERS found in reply_text (case-insensitive)"""
    lowered = reply_text.lower()
    return [marker for marker in FINAL_MARKERS if marker in lowered]


def is_final(reply_text: str) -> bool:
    """
    True iff the reply contains at least one final-answer marker.

    Examples:
        >>> is_final("1) Complaint summary: ... This does not replace an in-person medical exam.")
        True
        >>> is_final("Can you describe the pain more precisely?")
        False
    """
    lowered = reply_text.lower()
    return any(marker in lowered for marker in FINAL_MARKERS)
