"""
Unit tests for conversation modes and the mode registry
"""

import pytest

from intake_console.utils.conversation_modes import (
    MODE_PROMPTS,
    VALID_MODES,
    Mode,
    ModeRegistry,
    to_mode,
)


def test_valid_modes_match_enum():
    assert VALID_MODES == {'plain', 'structured-json', 'guided-intake'}


def test_temperatures():
    """Plain is warmer than the structured modes"""
    registry = ModeRegistry()
    assert registry.temperature_for(Mode.PLAIN) == 0.7
    assert registry.temperature_for(Mode.STRUCTURED_JSON) == 0.3
    assert registry.temperature_for(Mode.GUIDED_INTAKE) == 0.3


def test_each_mode_has_distinct_prompt():
    prompts = {ModeRegistry.system_prompt_for(mode) for mode in Mode}
    assert len(prompts) == 3
    assert set(MODE_PROMPTS) == set(Mode)


def test_guided_prompt_lists_final_sections():
    prompt = ModeRegistry.system_prompt_for(Mode.GUIDED_INTAKE).lower()
    for header in ('complaint summary', 'probable diagnosis', 'examination recommendations',
                   'what to do now', 'when to see a doctor urgently'):
        assert header in prompt
    assert 'does not replace an in-person medical exam' in prompt


def test_set_mode_accepts_strings_and_is_idempotent():
    registry = ModeRegistry()
    assert registry.current_mode() == Mode.PLAIN

    registry.set_mode('structured-json')
    assert registry.current_mode() == Mode.STRUCTURED_JSON

    registry.set_mode(Mode.STRUCTURED_JSON)
    assert registry.current_mode() == Mode.STRUCTURED_JSON


def test_unknown_mode_rejected():
    registry = ModeRegistry(Mode.GUIDED_INTAKE)
    with pytest.raises(ValueError, match="Unknown mode"):
        registry.set_mode('verbose')
    assert registry.current_mode() == Mode.GUIDED_INTAKE

    with pytest.raises(ValueError):
        ModeRegistry('nope')


def test_to_mode_normalizes_case():
    assert to_mode(' Guided-Intake ') == Mode.GUIDED_INTAKE
