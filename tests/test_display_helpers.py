"""
Unit tests for display helpers
"""

import json

from intake_console.core.fact_extractor import PatientRecord
from intake_console.utils.display_helpers import NOT_RECORDED, format_json_reply, render_record


def test_render_empty_record():
    text = render_record(PatientRecord())
    assert f"Main complaint: {NOT_RECORDED}" in text
    assert "Allergies: (not recorded)" in text
    assert "Responses recorded: 0" in text
    assert "(not ready yet)" in text


def test_render_filled_record():
    record = PatientRecord(
        main_complaint="Headache",
        symptoms=["Worse in the morning"],
        allergies=["Allergic to aspirin"],
        responses=[("2026-01-01T00:00:00+00:00", "Headache")],
        final_recommendations="1) Complaint summary: headache",
    )
    text = render_record(record)
    assert "Main complaint: Headache" in text
    assert "  - Worse in the morning" in text
    assert "  - Allergic to aspirin" in text
    assert "Responses recorded: 1" in text
    assert text.endswith("1) Complaint summary: headache")


def test_format_json_reply_strips_fences():
    reply = '```json\n{"answer": "Paris", "confidence": 0.9}\n```'
    assert json.loads(format_json_reply(reply)) == {"answer": "Paris", "confidence": 0.9}


def test_format_json_reply_with_surrounding_prose():
    reply = 'Sure! {"answer": "42"} Hope this helps.'
    assert format_json_reply(reply) == '{\n  "answer": "42"\n}'


def test_format_json_reply_keeps_unicode():
    assert "Москва" in format_json_reply('{"answer": "Москва"}')


def test_format_json_reply_not_json():
    assert format_json_reply("Just text") is None
    assert format_json_reply("{broken: json}") is None
