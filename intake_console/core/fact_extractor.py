"""
Fact Extractor - Keyword-based extraction of patient facts (guided-intake)

Responsibilities:
- Hold the accumulating PatientRecord
- Categorize each patient reply with a fixed keyword rule table
- Undo the raw response log entry when a turn fails

Design principles:
- Pure functions: extract() returns a new record, never mutates its input
- Explicit ordered rule table (category -> keywords), no scattered ifs
- Matching is case-insensitive substring, not tokenized
- Categories are not mutually exclusive: one reply may land in several lists

Known asymmetry:
    remove_last_response() only drops the latest `responses` entry. The
    reply stays in symptoms / chronic_conditions / allergies / medications
    and main_complaint is not cleared. Callers must tolerate this.
"""

import copy
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


# Ordered rule table. Each keyword is matched as a lowercase substring.
# English keywords first, then the localized (Russian) stems.
KEYWORD_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('chronic_conditions', (
        'chronic', 'suffer from', 'diagnosis',
        'хронич', 'страдаю', 'диагноз',
    )),
    ('allergies', (
        'allerg', 'intolerant',
        'аллерг', 'непереносим',
    )),
    ('medications', (
        'taking', 'medication', 'pill',
        'принимаю', 'лекарств', 'таблет',
    )),
)

CATEGORY_FIELDS = tuple(category for category, _ in KEYWORD_RULES)


@dataclass
class PatientRecord:
    """
    Structured facts accumulated over a guided-intake session.

    Invariant: main_complaint is set iff at least one reply was recorded,
    and it always equals the first reply verbatim.

    Attributes:
        main_complaint: First patient reply, verbatim
        symptoms: Every reply after the first
        chronic_conditions: Replies mentioning a chronic condition
        allergies: Replies mentioning an allergy or intolerance
        medications: Replies mentioning medication
        responses: (ISO timestamp, reply) log of every reply
        final_recommendations: Assistant's final structured answer
    """
    main_complaint: Optional[str] = None
    symptoms: List[str] = field(default_factory=list)
    chronic_conditions: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)
    responses: List[Tuple[str, str]] = field(default_factory=list)
    final_recommendations: Optional[str] = None

    def copy(self) -> "PatientRecord":
        return copy.deepcopy(self)

    def is_empty(self) -> bool:
        return self == PatientRecord()

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict (responses become lists of {timestamp, text})"""
        data = asdict(self)
        data['responses'] = [
            {'timestamp': timestamp, 'text': text}
            for timestamp, text in self.responses
        ]
        return data


def matched_categories(reply_text: str) -> List[str]:
    """
    Categories from KEYWORD_RULES whose keywords occur in reply_text.

    Args:
        reply_text: Raw patient reply

    Returns:
        list: Category field names, in rule-table order
    """
    lowered = reply_text.lower()
    return [
        category
        for category, keywords in KEYWORD_RULES
        if any(keyword in lowered for keyword in keywords)
    ]


def extract(
    record: PatientRecord,
    reply_text: str,
    is_first_reply: bool,
    now: Optional[datetime] = None
) -> PatientRecord:
    """
    Fold one patient reply into the record.

    Rules, all independently applicable:
    1. First reply with no main complaint yet -> main_complaint
    2-4. Keyword rule table -> chronic_conditions / allergies / medications
    5. Not the first reply -> symptoms
    6. Always -> responses log

    Args:
        record: Current record (not modified)
        reply_text: Patient reply, verbatim
        is_first_reply: Whether this is the first reply of the session
        now: Timestamp for the responses log (defaults to current UTC time)

    Returns:
        PatientRecord: Updated copy
    """
    updated = record.copy()

    if is_first_reply and updated.main_complaint is None:
        updated.main_complaint = reply_text

    categories = matched_categories(reply_text)
    for category in categories:
        getattr(updated, category).append(reply_text)

    if not is_first_reply:
        updated.symptoms.append(reply_text)

    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    updated.responses.append((timestamp, reply_text))

    logger.debug(
        f"Extracted reply #{len(updated.responses)}: first={is_first_reply}, "
        f"categories={categories}"
    )
    return updated


def remove_last_response(record: PatientRecord) -> PatientRecord:
    """
    Drop the most recent responses entry (used when the turn's gateway call failed).

    Categorized lists and main_complaint are left as they are.

    Returns:
        PatientRecord: Updated copy (unchanged copy if there is nothing to remove)
    """
    updated = record.copy()
    if updated.responses:
        updated.responses.pop()
    else:
        logger.warning("remove_last_response called on a record with no responses")
    return updated


def with_final_recommendations(record: PatientRecord, text: str) -> PatientRecord:
    updated = record.copy()
    updated.final_recommendations = text
    return updated
