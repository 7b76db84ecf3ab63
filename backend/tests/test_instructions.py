"""
AI Gateway — Instruction Composer Unit Tests
=============================================
"""

import pytest

from ai_gateway.schemas.requests import PreferenceProfile
from ai_gateway.services.instructions import (
    ANTI_FABRICATION_CONTRACT,
    FORMATTING_CONTRACT,
    SECTION_SEPARATOR,
    compose,
)

ROLE = "You are a patient teacher."
TASK = "Explain the given text."


class TestCompose:

    def test_sections_in_fixed_order(self):
        sections = compose(ROLE, TASK).split(SECTION_SEPARATOR)
        assert sections == [f"{ROLE} {TASK}", FORMATTING_CONTRACT, ANTI_FABRICATION_CONTRACT]

    def test_no_preferences_adds_no_tuning(self):
        assert compose(ROLE, TASK, None) == compose(ROLE, TASK, PreferenceProfile())

    def test_is_deterministic(self):
        prefs = PreferenceProfile(tone="witty", language="French")
        assert compose(ROLE, TASK, prefs) == compose(ROLE, TASK, prefs)

    @pytest.mark.parametrize("prefs", [
        PreferenceProfile(tone="formal"),
        PreferenceProfile(response_length="concise"),
        PreferenceProfile(expertise="expert"),
        PreferenceProfile(language="Vietnamese"),
        PreferenceProfile(
            tone="friendly", response_length="comprehensive", expertise="beginner", language="German"
        ),
    ])
    def test_tuning_only_appends(self, prefs):
        base = compose(ROLE, TASK).split(SECTION_SEPARATOR)
        tuned = compose(ROLE, TASK, prefs).split(SECTION_SEPARATOR)
        assert tuned[: len(base)] == base
        assert len(tuned) == len(base) + 1

    def test_only_present_fields_are_mentioned(self):
        tuning = compose(ROLE, TASK, PreferenceProfile(expertise="beginner")).split(SECTION_SEPARATOR)[-1]
        assert "beginner" in tuning
        assert "tone" not in tuning
        assert "Write the entire answer in" not in tuning

    def test_language_clause(self):
        tuning = compose(ROLE, TASK, PreferenceProfile(language="Japanese")).split(SECTION_SEPARATOR)[-1]
        assert tuning == "Write the entire answer in Japanese."

    def test_tuning_clause_order(self):
        prefs = PreferenceProfile(
            tone="casual", response_length="detailed", expertise="intermediate", language="Spanish"
        )
        tuning = compose(ROLE, TASK, prefs).split(SECTION_SEPARATOR)[-1]
        assert tuning.index("conversational") < tuning.index("detailed")
        assert tuning.index("detailed") < tuning.index("familiarity")
        assert tuning.index("familiarity") < tuning.index("Spanish")

    def test_blank_language_is_ignored(self):
        assert compose(ROLE, TASK, PreferenceProfile(language="   ")) == compose(ROLE, TASK)

    def test_empty_profile_adds_no_tuning(self):
        prefs = PreferenceProfile()
        assert prefs.is_empty()
        assert compose(ROLE, TASK, prefs) == compose(ROLE, TASK)
