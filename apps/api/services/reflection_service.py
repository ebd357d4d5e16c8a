"""
Reflection Service

Synchronous half of the reflection pipeline: validate the seven answers,
enforce one reflection per user per calendar day, and persist. Everything
here finishes before the submission response is sent; the analysis is
generated afterwards by tasks.analysis_tasks.

"Today" is the calendar date in settings.REFLECTION_TIMEZONE.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import ConflictError, require_fields
from models import DailyReflection
from services import journal_store

logger = logging.getLogger(__name__)

DUPLICATE_REFLECTION_MESSAGE = "You have already submitted a reflection for today"

# Answer column -> message when it is missing or blank, in form order.
REQUIRED_ANSWERS: Dict[str, str] = {
    "day_summary": "Day summary is required",
    "social_media_time": "Social media time is required",
    "truthfulness_kindness": "Truthfulness and kindness response is required",
    "conscious_actions": "Conscious actions response is required",
    "overthinking_stress": "Overthinking/stress response is required",
    "gratitude_expression": "Gratitude expression is required",
    "proud_moment": "Proud moment is required",
}


def reflection_today(now: Optional[datetime] = None) -> date:
    """Current calendar date in the configured reflection timezone."""
    tz = ZoneInfo(settings.REFLECTION_TIMEZONE)
    if now is None:
        return datetime.now(tz).date()
    return now.astimezone(tz).date()


def create_reflection(
    db: Session,
    user_id: UUID,
    answers: Dict[str, Optional[str]],
    reflection_date: Optional[date] = None,
) -> DailyReflection:
    """
    Validate and commit today's reflection for the user.

    Raises:
        ValidationError: an answer is missing or blank (nothing is written)
        ConflictError: the user already has a reflection for that date

    The existence check and the insert are not atomic; the unique index on
    (user_id, reflection_date) turns a lost race into ConflictError too.
    """
    require_fields(answers, REQUIRED_ANSWERS)

    reflection_date = reflection_date or reflection_today()

    if journal_store.find_reflection_by_user_and_date(db, user_id, reflection_date):
        raise ConflictError(DUPLICATE_REFLECTION_MESSAGE)

    try:
        reflection = journal_store.insert_reflection(
            db,
            user_id=user_id,
            reflection_date=reflection_date,
            answers={field: answers[field] for field in REQUIRED_ANSWERS},
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Concurrent reflection insert for user {user_id} on {reflection_date}")
        raise ConflictError(DUPLICATE_REFLECTION_MESSAGE)

    db.refresh(reflection)
    logger.info(
        f"Reflection created for user {user_id}",
        extra={
            "extra_fields": {
                "user_id": str(user_id),
                "reflection_id": str(reflection.id),
                "reflection_date": reflection_date.isoformat(),
            }
        },
    )
    return reflection


def check_today_reflection(db: Session, user_id: UUID) -> Dict[str, Optional[str]]:
    """{"exists": bool, "reflectionId": str | None} for the dashboard."""
    reflection = journal_store.find_reflection_by_user_and_date(db, user_id, reflection_today())
    return {
        "exists": reflection is not None,
        "reflectionId": str(reflection.id) if reflection else None,
    }
