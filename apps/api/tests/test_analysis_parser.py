"""
Analysis Response Parser Tests

Model output is free text. The parser must:
1. Split the three marked sections, trimming whitespace
2. Fall back to "whole text + fixed defaults" when nothing usable is marked
3. Leave missing sections empty on a partial match
4. Never raise
"""
import pytest

from services.analysis_parser import (
    DEFAULT_MOTIVATIONAL_MESSAGE,
    DEFAULT_RECOMMENDATIONS,
    ParsedAnalysis,
    parse_analysis_response,
)
from tests.gemini_helpers import STRUCTURED_RESPONSE


class TestStructuredResponse:
    def test_three_sections_extracted(self):
        parsed = parse_analysis_response(STRUCTURED_RESPONSE)

        assert parsed.analysis_text == "You handled a hard email with care today."
        assert parsed.recommendations == (
            "1. Put the phone in another room after 9pm.\n"
            "2. Write down tomorrow's worries before bed."
        )
        assert parsed.motivational_message == "Small pauses add up. Keep going!"
        assert parsed.used_fallback is False

    def test_text_before_first_marker_is_dropped(self):
        raw = "Sure! Here is your analysis.\n\n" + STRUCTURED_RESPONSE
        parsed = parse_analysis_response(raw)
        assert parsed.analysis_text == "You handled a hard email with care today."
        assert "Sure!" not in parsed.analysis_text

    def test_markers_inline_without_newlines(self):
        raw = "**ANALYSIS:** A **RECOMMENDATIONS:** B **MOTIVATIONAL MESSAGE:** C"
        parsed = parse_analysis_response(raw)
        assert (parsed.analysis_text, parsed.recommendations, parsed.motivational_message) == ("A", "B", "C")

    def test_inner_bold_text_kept(self):
        raw = (
            "**ANALYSIS:**\nYou were **really** present today.\n"
            "**RECOMMENDATIONS:**\n- Keep a **short** list\n"
            "**MOTIVATIONAL MESSAGE:**\nOnward."
        )
        parsed = parse_analysis_response(raw)
        assert parsed.analysis_text == "You were **really** present today."
        assert parsed.recommendations == "- Keep a **short** list"


class TestFallback:
    def test_no_markers_uses_whole_text(self):
        raw = "You had a balanced day. Try to sleep earlier."
        parsed = parse_analysis_response(raw)

        assert parsed.analysis_text == raw
        assert parsed.recommendations == DEFAULT_RECOMMENDATIONS
        assert parsed.motivational_message == DEFAULT_MOTIVATIONAL_MESSAGE
        assert parsed.used_fallback is True

    def test_defaults_are_non_empty(self):
        assert DEFAULT_RECOMMENDATIONS.strip()
        assert DEFAULT_MOTIVATIONAL_MESSAGE.strip()

    def test_markers_with_no_content_fall_back(self):
        raw = "**ANALYSIS:**\n\n**RECOMMENDATIONS:**\n**MOTIVATIONAL MESSAGE:**   "
        parsed = parse_analysis_response(raw)
        assert parsed.used_fallback is True
        assert parsed.analysis_text == raw
        assert parsed.recommendations == DEFAULT_RECOMMENDATIONS

    @pytest.mark.parametrize("raw", [None, "", 42])
    def test_never_raises_on_odd_input(self, raw):
        parsed = parse_analysis_response(raw)
        assert isinstance(parsed, ParsedAnalysis)
        assert parsed.used_fallback is True
        assert parsed.recommendations == DEFAULT_RECOMMENDATIONS


class TestPartialMatch:
    def test_only_analysis_marker(self):
        parsed = parse_analysis_response("**ANALYSIS:**\nGood focus today.")
        assert parsed.analysis_text == "Good focus today."
        assert parsed.recommendations == ""
        assert parsed.motivational_message == ""
        assert parsed.used_fallback is False

    def test_missing_recommendations(self):
        raw = "**ANALYSIS:**\nSteady.\n**MOTIVATIONAL MESSAGE:**\nYou got this."
        parsed = parse_analysis_response(raw)
        assert parsed.analysis_text == "Steady."
        assert parsed.recommendations == ""
        assert parsed.motivational_message == "You got this."

    def test_only_motivational_marker(self):
        parsed = parse_analysis_response("Preamble\n**MOTIVATIONAL MESSAGE:**\nKeep at it.")
        assert parsed.analysis_text == ""
        assert parsed.motivational_message == "Keep at it."
        assert parsed.used_fallback is False


def test_to_fields_matches_columns():
    fields = parse_analysis_response(STRUCTURED_RESPONSE).to_fields()
    assert set(fields) == {"analysis_text", "recommendations", "motivational_message"}
