"""
Reflection Prompt Builder

Builds the single text prompt sent to the model for one reflection:

    1. Persona / instruction preamble
    2. USER PROFILE: five background fields, "Not provided" when missing
    3. TODAY'S REFLECTION: the seven answers under fixed numbered labels
    4. RECENT PATTERNS: prior reflections (only when there are any)
    5. Output format block: the three section markers, in order

The markers in (5) are the contract with services.analysis_parser. Each one
appears exactly once in the prompt.

Pure and deterministic: same inputs, same string. No clock reads.
"""

from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

ANALYSIS_MARKER = "**ANALYSIS:**"
RECOMMENDATIONS_MARKER = "**RECOMMENDATIONS:**"
MOTIVATIONAL_MARKER = "**MOTIVATIONAL MESSAGE:**"

SECTION_MARKERS: Tuple[str, str, str] = (
    ANALYSIS_MARKER,
    RECOMMENDATIONS_MARKER,
    MOTIVATIONAL_MARKER,
)

NOT_PROVIDED = "Not provided"

PREAMBLE = (
    "You are a compassionate life coach and consciousness guide. "
    "Analyze the following daily reflection and provide personalized insights."
)

# (attribute on the profile row, label in the prompt)
PROFILE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("self_introduction", "Self Introduction"),
    ("good_qualities", "Good Qualities"),
    ("bad_qualities", "Areas for Improvement"),
    ("life_goals", "Life Goals"),
    ("challenges", "Challenges"),
)

# (attribute on the reflection row, label in the prompt), numbered 1..7
REFLECTION_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("day_summary", "Day Summary"),
    ("social_media_time", "Social Media Usage"),
    ("truthfulness_kindness", "Truthfulness & Kindness"),
    ("conscious_actions", "Conscious vs Impulsive Actions"),
    ("overthinking_stress", "Overthinking/Stress"),
    ("gratitude_expression", "Gratitude Expression"),
    ("proud_moment", "Proud Moment"),
)

# Subset repeated for each prior day
HISTORY_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("day_summary", "Summary"),
    ("social_media_time", "Social Media"),
    ("conscious_actions", "Conscious Actions"),
    ("proud_moment", "Proud Moment"),
)

OUTPUT_FORMAT = f"""Please provide a comprehensive analysis in the following format:

{ANALYSIS_MARKER}
[Provide a thoughtful analysis of today's reflection, acknowledging both positive aspects and areas of concern. Be specific and reference their actions. Consider their background from the profile and any patterns from previous days.]

{RECOMMENDATIONS_MARKER}
[Provide 3-5 specific, actionable recommendations for improvement. Consider their profile background and recent patterns. Be practical and encouraging. Format as a numbered or bulleted list.]

{MOTIVATIONAL_MARKER}
[End with an uplifting, personalized message that acknowledges their progress and encourages continued growth. Make it warm and genuine. Keep it concise but impactful.]

Keep the tone supportive, non-judgmental, and focused on growth. Be specific and avoid generic advice. Reference specific details from their reflection to show you're paying attention."""


def build_reflection_prompt(
    profile: Optional[Any],
    reflection: Any,
    recent_reflections: Sequence[Any] = (),
) -> str:
    """
    Build the analysis prompt.

    Args:
        profile: UserProfile row or None
        reflection: the reflection being analyzed
        recent_reflections: newest first, the current reflection at index 0
            (as returned by journal_store.find_recent_reflections)

    Returns:
        Prompt text
    """
    sections = [
        PREAMBLE,
        _profile_section(profile),
        _reflection_section(reflection),
    ]

    history = _history_section(recent_reflections)
    if history:
        sections.append(history)

    sections.append(OUTPUT_FORMAT)
    return "\n\n".join(sections)


def _profile_section(profile: Optional[Any]) -> str:
    lines = ["USER PROFILE (Background Context):"]
    for attr, label in PROFILE_FIELDS:
        lines.append(f"- {label}: {_or_not_provided(getattr(profile, attr, None))}")
    return "\n".join(lines)


def _reflection_section(reflection: Any) -> str:
    lines = ["TODAY'S REFLECTION:"]
    for number, (attr, label) in enumerate(REFLECTION_FIELDS, start=1):
        lines.append(f"{number}. {label}: {_or_not_provided(getattr(reflection, attr, None))}")
    return "\n".join(lines)


def _history_section(recent_reflections: Sequence[Any]) -> Optional[str]:
    """Prior days only: entry 0 is today's reflection and is already above."""
    prior: List[Any] = list(recent_reflections)[1:]
    if not prior:
        return None

    blocks = [f"RECENT PATTERNS (Last {len(prior)} days):"]
    for day_number, past in enumerate(prior, start=1):
        lines = [f"Day {day_number} ({_format_date(getattr(past, 'reflection_date', None))}):"]
        for attr, label in HISTORY_FIELDS:
            lines.append(f"- {label}: {_or_not_provided(getattr(past, attr, None))}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _or_not_provided(value: Optional[str]) -> str:
    if value is None:
        return NOT_PROVIDED
    text = str(value)
    return text if text.strip() else NOT_PROVIDED


def _format_date(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return "unknown date"
    return str(value)
