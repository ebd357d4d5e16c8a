"""
Analysis Response Parser

Splits free-text model output into the three sections requested by
services.reflection_prompt:

    **ANALYSIS:**               -> analysis_text
    **RECOMMENDATIONS:**        -> recommendations
    **MOTIVATIONAL MESSAGE:**   -> motivational_message

A section runs from its marker to the next later marker that is present, or
to the end of the text. Content is whitespace-trimmed.

Fallback policy:
    - No marker at all (or markers with nothing after them): the whole raw
      text becomes analysis_text and the other two fields get fixed
      encouragement strings. A stored analysis is never three empty strings.
    - Some markers: matched sections keep their content, missing ones stay "".

parse_analysis_response never raises.
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from services.reflection_prompt import (
    ANALYSIS_MARKER,
    MOTIVATIONAL_MARKER,
    RECOMMENDATIONS_MARKER,
)

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATIONS = "Continue your journey of self-reflection and growth."
DEFAULT_MOTIVATIONAL_MESSAGE = "Keep up the great work on your path to self-awareness!"

_ANALYSIS = re.escape(ANALYSIS_MARKER)
_RECOMMENDATIONS = re.escape(RECOMMENDATIONS_MARKER)
_MOTIVATIONAL = re.escape(MOTIVATIONAL_MARKER)

_ANALYSIS_RE = re.compile(
    rf"{_ANALYSIS}(.*?)(?={_RECOMMENDATIONS}|{_MOTIVATIONAL}|\Z)", re.DOTALL
)
_RECOMMENDATIONS_RE = re.compile(
    rf"{_RECOMMENDATIONS}(.*?)(?={_MOTIVATIONAL}|\Z)", re.DOTALL
)
_MOTIVATIONAL_RE = re.compile(rf"{_MOTIVATIONAL}(.*)\Z", re.DOTALL)


@dataclass
class ParsedAnalysis:
    analysis_text: str = ""
    recommendations: str = ""
    motivational_message: str = ""
    used_fallback: bool = False

    def to_fields(self) -> Dict[str, str]:
        """Column values for an ai_analysis row."""
        fields = asdict(self)
        fields.pop("used_fallback")
        return fields


def parse_analysis_response(raw: Optional[str]) -> ParsedAnalysis:
    """Extract the three sections from raw model output."""
    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))

    analysis_match = _ANALYSIS_RE.search(text)
    recommendations_match = _RECOMMENDATIONS_RE.search(text)
    motivational_match = _MOTIVATIONAL_RE.search(text)

    parsed = ParsedAnalysis(
        analysis_text=analysis_match.group(1).strip() if analysis_match else "",
        recommendations=recommendations_match.group(1).strip() if recommendations_match else "",
        motivational_message=motivational_match.group(1).strip() if motivational_match else "",
    )

    # No marker matched, or every matched section was empty.
    if not (parsed.analysis_text or parsed.recommendations or parsed.motivational_message):
        logger.info("Model response had no usable sections; storing it as plain analysis")
        return ParsedAnalysis(
            analysis_text=text,
            recommendations=DEFAULT_RECOMMENDATIONS,
            motivational_message=DEFAULT_MOTIVATIONAL_MESSAGE,
            used_fallback=True,
        )

    return parsed
