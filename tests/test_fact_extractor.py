"""
Unit tests for the keyword-based Fact Extractor
"""

from datetime import datetime, timezone

from intake_console.core.fact_extractor import (
    KEYWORD_RULES,
    PatientRecord,
    extract,
    matched_categories,
    remove_last_response,
    with_final_recommendations,
)

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


def test_first_reply_with_condition_and_allergy():
    """First reply: main complaint + chronic + allergy, no symptoms"""
    reply = "I have a chronic thyroid condition and I'm allergic to penicillin"
    record = extract(PatientRecord(), reply, is_first_reply=True, now=FIXED_NOW)

    assert record.main_complaint == reply
    assert record.chronic_conditions == [reply]
    assert record.allergies == [reply]
    assert record.medications == []
    assert record.symptoms == []
    assert record.responses == [(FIXED_NOW.isoformat(), reply)]


def test_plain_follow_up_reply_is_only_a_symptom():
    first = "My back hurts"
    reply = "It started three days ago, sharp pain in the lower back"
    record = extract(PatientRecord(), first, is_first_reply=True, now=FIXED_NOW)
    record = extract(record, reply, is_first_reply=False, now=FIXED_NOW)

    assert record.main_complaint == first
    assert record.symptoms == [reply]
    assert record.chronic_conditions == []
    assert record.allergies == []
    assert record.medications == []
    assert [text for _, text in record.responses] == [first, reply]


def test_extract_is_pure():
    """Same inputs on independent copies give identical records; input untouched"""
    base = extract(PatientRecord(), "headache", is_first_reply=True, now=FIXED_NOW)
    snapshot = base.copy()

    first = extract(base.copy(), "I am taking ibuprofen pills", False, now=FIXED_NOW)
    second = extract(base.copy(), "I am taking ibuprofen pills", False, now=FIXED_NOW)

    assert first == second
    assert base == snapshot


def test_main_complaint_set_only_once():
    record = extract(PatientRecord(), "first", is_first_reply=True, now=FIXED_NOW)
    record = extract(record, "second", is_first_reply=True, now=FIXED_NOW)
    assert record.main_complaint == "first"


def test_matching_is_case_insensitive_substring():
    """Not tokenized: 'Pillow' contains 'pill'"""
    assert matched_categories("I SUFFER FROM migraines") == ['chronic_conditions']
    assert matched_categories("I sleep on a pillow") == ['medications']
    assert matched_categories("Lactose INTOLERANT") == ['allergies']


def test_categories_not_mutually_exclusive():
    reply = "Chronic asthma, allergic to dust, taking an inhaler"
    record = extract(PatientRecord(), "cough", True, now=FIXED_NOW)
    record = extract(record, reply, False, now=FIXED_NOW)

    assert record.chronic_conditions == [reply]
    assert record.allergies == [reply]
    assert record.medications == [reply]
    assert record.symptoms == [reply]


def test_localized_keywords():
    assert matched_categories("У меня аллергия на пыльцу") == ['allergies']
    assert matched_categories("Принимаю таблетки от давления") == ['medications']
    assert matched_categories("Хронический гастрит") == ['chronic_conditions']


def test_rule_table_order():
    assert [category for category, _ in KEYWORD_RULES] == [
        'chronic_conditions', 'allergies', 'medications'
    ]


def test_remove_last_response_is_asymmetric():
    """Only the response log entry goes; categorized data stays"""
    reply = "I'm allergic to penicillin"
    record = extract(PatientRecord(), reply, True, now=FIXED_NOW)

    rolled_back = remove_last_response(record)

    assert rolled_back.responses == []
    assert rolled_back.allergies == [reply]
    assert rolled_back.main_complaint == reply
    assert record.responses != []


def test_remove_last_response_on_empty_record():
    assert remove_last_response(PatientRecord()) == PatientRecord()


def test_final_recommendations():
    record = with_final_recommendations(PatientRecord(), "1) Complaint summary")
    assert record.final_recommendations == "1) Complaint summary"


def test_to_dict_and_is_empty():
    assert PatientRecord().is_empty()
    record = extract(PatientRecord(), "fever", True, now=FIXED_NOW)
    assert not record.is_empty()

    data = record.to_dict()
    assert data['main_complaint'] == "fever"
    assert data['responses'] == [{'timestamp': FIXED_NOW.isoformat(), 'text': "fever"}]
