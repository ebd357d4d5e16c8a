"""
Analysis API Router

GET /v1/analysis/latest            newest analysis, or {"analysis": null} while pending
GET /v1/analysis/all               every analysis, newest first
GET /v1/analysis/{reflection_id}   the analysis for one reflection (404 until it exists)

Read-only: analyses are written by tasks.analysis_tasks.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.database import get_db
from core.exceptions import NotFoundError
from models import AIAnalysis, DailyReflection, User
from services import journal_store

router = APIRouter(prefix="/v1/analysis", tags=["analysis"])


def _to_out(analysis: AIAnalysis, reflection: Optional[DailyReflection] = None) -> dict:
    out = {
        "id": str(analysis.id),
        "reflectionId": str(analysis.reflection_id),
        "analysisText": analysis.analysis_text,
        "recommendations": analysis.recommendations,
        "motivationalMessage": analysis.motivational_message,
        "createdAt": analysis.created_at,
    }
    if reflection is not None:
        out["reflectionDate"] = reflection.reflection_date.isoformat()
        out["daySummary"] = reflection.day_summary
    return out


@router.get("/latest")
def latest_analysis(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = journal_store.find_latest_analysis(db, current_user.id)
    if row is None:
        return {"analysis": None}
    analysis, reflection = row
    return {"analysis": _to_out(analysis, reflection)}


@router.get("/all")
def all_analyses(
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = journal_store.list_analyses(db, current_user.id, limit=limit, offset=offset)
    return {"analyses": [_to_out(a, r) for a, r in rows]}


@router.get("/{reflection_id}")
def analysis_for_reflection(
    reflection_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Wrong id and pending analysis are different 404s.
    if journal_store.find_reflection(db, current_user.id, reflection_id) is None:
        raise NotFoundError("Reflection not found", error_code="REFLECTION_NOT_FOUND")

    analysis = journal_store.find_analysis_by_reflection(db, current_user.id, reflection_id)
    if analysis is None:
        raise NotFoundError("Analysis not found", error_code="ANALYSIS_NOT_FOUND")
    return {"analysis": _to_out(analysis)}
