"""
Analysis Orchestrator

Turns one committed reflection into one ai_analysis row:

    1. Context:  the reflection, the user's profile (may be absent)
                 and up to ANALYSIS_HISTORY_LIMIT recent reflections, newest first
    2. Generate: build the prompt, call the model gateway
    3. Parse:    split the reply into the three sections
    4. Persist:  insert the analysis and commit

Runs inside tasks.analysis_tasks, never on the request path. A gateway
failure ends the run with status "error": nothing is written, nothing is
retried, and the reflection is untouched. The user just keeps seeing
"analysis pending".

Two runs for the same reflection may both write; readers take the newest.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.config import settings
from models import DailyReflection
from services import journal_store
from services.analysis_parser import parse_analysis_response
from services.model_gateway import ModelError, ModelGateway
from services.reflection_prompt import build_reflection_prompt

logger = logging.getLogger(__name__)


@dataclass
class AnalysisRunResult:
    """Outcome of one orchestrator run, returned by the Celery task for monitoring."""
    status: str                          # "success" | "skipped" | "error"
    user_id: str
    reflection_id: str
    reason: Optional[str] = None
    analysis_id: Optional[str] = None
    history_count: int = 0               # prior reflections included in the prompt
    used_fallback: bool = False

    def as_dict(self) -> Dict:
        return asdict(self)


def _history_with_current_first(
    reflection: DailyReflection, recent: List[DailyReflection], limit: int
) -> List[DailyReflection]:
    """The prompt builder expects the analyzed reflection at index 0."""
    others = [r for r in recent if r.id != reflection.id]
    return [reflection] + others[: max(limit - 1, 0)]


def generate_analysis_for_reflection(
    db: Session,
    user_id: UUID,
    reflection_id: UUID,
    gateway: ModelGateway,
) -> AnalysisRunResult:
    """
    Run the full pipeline for one reflection.

    ModelError is handled here. Database errors propagate to the caller,
    which owns the session.
    """
    result = AnalysisRunResult(
        status="skipped",
        user_id=str(user_id),
        reflection_id=str(reflection_id),
    )

    # Step 1: Context
    reflection = journal_store.find_reflection(db, user_id, reflection_id)
    if reflection is None:
        logger.warning(f"Analysis skipped: reflection {reflection_id} not found for user {user_id}")
        result.reason = "reflection_not_found"
        return result

    profile = journal_store.find_profile(db, user_id)
    limit = settings.ANALYSIS_HISTORY_LIMIT
    recent = _history_with_current_first(
        reflection,
        journal_store.find_recent_reflections(db, user_id, limit),
        limit,
    )
    result.history_count = len(recent) - 1

    # Step 2: Generate
    prompt = build_reflection_prompt(profile, reflection, recent)
    try:
        raw_text = gateway.generate(prompt)
    except ModelError as e:
        logger.error(
            f"Analysis generation failed for reflection {reflection_id}: {e}",
            extra={
                "extra_fields": {
                    "user_id": str(user_id),
                    "reflection_id": str(reflection_id),
                }
            },
        )
        result.status = "error"
        result.reason = "model_error"
        return result

    # Step 3: Parse
    parsed = parse_analysis_response(raw_text)
    result.used_fallback = parsed.used_fallback

    # Step 4: Persist
    analysis = journal_store.insert_analysis(db, user_id, reflection.id, parsed)
    db.commit()

    result.status = "success"
    result.analysis_id = str(analysis.id)
    logger.info(
        f"Analysis stored for reflection {reflection_id}",
        extra={"extra_fields": result.as_dict()},
    )
    return result
