"""
Daily Reflection API Router

POST /v1/reflections         submit today's seven answers (201)
GET  /v1/reflections         the user's reflections, newest date first
GET  /v1/reflections/today   {"exists": bool, "reflectionId": str | null}
GET  /v1/reflections/{id}    one reflection

Submission commits the reflection, enqueues analysis generation and returns
without waiting for it. The client polls /v1/analysis/latest afterwards.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.database import get_db
from core.exceptions import NotFoundError
from models import DailyReflection, User
from services import journal_store
from services.reflection_service import check_today_reflection, create_reflection
from tasks.analysis_tasks import enqueue_analysis_generation

router = APIRouter(prefix="/v1/reflections", tags=["reflections"])


class ReflectionCreate(BaseModel):
    """Blank or missing answers are rejected by the service, field by field."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day_summary: Optional[str] = None
    social_media_time: Optional[str] = None
    truthfulness_kindness: Optional[str] = None
    conscious_actions: Optional[str] = None
    overthinking_stress: Optional[str] = None
    gratitude_expression: Optional[str] = None
    proud_moment: Optional[str] = None


def _to_out(reflection: DailyReflection) -> dict:
    return {
        "id": str(reflection.id),
        "reflectionDate": reflection.reflection_date.isoformat(),
        "daySummary": reflection.day_summary,
        "socialMediaTime": reflection.social_media_time,
        "truthfulnessKindness": reflection.truthfulness_kindness,
        "consciousActions": reflection.conscious_actions,
        "overthinkingStress": reflection.overthinking_stress,
        "gratitudeExpression": reflection.gratitude_expression,
        "proudMoment": reflection.proud_moment,
        "createdAt": reflection.created_at,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_reflection(
    payload: ReflectionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reflection = create_reflection(db, current_user.id, payload.model_dump())

    # Best effort: a broker outage leaves the reflection without an analysis.
    enqueue_analysis_generation(current_user.id, reflection.id)

    return {
        "message": "Reflection submitted successfully",
        "reflection": _to_out(reflection),
    }


@router.get("")
def list_reflections(
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = journal_store.list_reflections(db, current_user.id, limit=limit, offset=offset)
    return {"reflections": [_to_out(r) for r in rows]}


@router.get("/today")
def today_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return check_today_reflection(db, current_user.id)


@router.get("/{reflection_id}")
def get_reflection(
    reflection_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reflection = journal_store.find_reflection(db, current_user.id, reflection_id)
    if reflection is None:
        raise NotFoundError("Reflection not found", error_code="REFLECTION_NOT_FOUND")
    return {"reflection": _to_out(reflection)}
