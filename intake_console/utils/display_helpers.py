"""
Display Helpers - Convert session data to human-readable text

Used by the session driver (summary command) and the console
(structured-json replies).
"""

import json
import logging
from typing import List, Optional

from intake_console.core.fact_extractor import PatientRecord

logger = logging.getLogger(__name__)


# Field name mappings: record attribute -> Human Readable Label
FIELD_LABELS = {
    'main_complaint': 'Main complaint',
    'symptoms': 'Symptoms',
    'chronic_conditions': 'Chronic conditions',
    'allergies': 'Allergies',
    'medications': 'Medications',
    'final_recommendations': 'Recommendations',
}

NOT_RECORDED = '(not recorded)'


def _format_list(label: str, items: List[str]) -> List[str]:
    if not items:
        return [f"{label}: {NOT_RECORDED}"]
    lines = [f"{label}:"]
    lines.extend(f"  - {item}" for item in items)
    return lines


def render_record(record: PatientRecord) -> str:
    """
    Render a PatientRecord as a plain-text summary.

    Args:
        record: Record to render

    Returns:
        str: Multi-line summary
    """
    lines = ["=== PATIENT SUMMARY ==="]
    lines.append(f"{FIELD_LABELS['main_complaint']}: {record.main_complaint or NOT_RECORDED}")

    for attr in ('symptoms', 'chronic_conditions', 'allergies', 'medications'):
        lines.extend(_format_list(FIELD_LABELS[attr], getattr(record, attr)))

    lines.append(f"Responses recorded: {len(record.responses)}")

    if record.final_recommendations:
        lines.append(f"{FIELD_LABELS['final_recommendations']}:")
        lines.append(record.final_recommendations)
    else:
        lines.append(f"{FIELD_LABELS['final_recommendations']}: (not ready yet)")

    return "\n".join(lines)


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def format_json_reply(text: str) -> Optional[str]:
    """
    Pretty-print the JSON object contained in a structured-json reply.

    Strips markdown fences and takes the span from the first '{' to the
    last '}'. Only dict output is handled.

    Args:
        text: Raw assistant reply

    Returns:
        str: Indented JSON, or None if no JSON object could be parsed
    """
    cleaned = _strip_code_fences(text)

    first_brace = cleaned.find('{')
    last_brace = cleaned.rfind('}')
    if first_brace == -1 or last_brace < first_brace:
        logger.debug("No JSON object found in reply")
        return None

    try:
        parsed = json.loads(cleaned[first_brace:last_brace + 1])
    except json.JSONDecodeError as e:
        logger.warning(f"Reply contains malformed JSON: {e}")
        return None

    return json.dumps(parsed, indent=2, ensure_ascii=False)
