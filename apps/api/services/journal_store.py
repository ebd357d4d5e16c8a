"""
Journal Store

Row-level access to reflections, profiles and analyses. Every function takes
the requesting user's id and filters on it, so there is no way to read or
attach to another user's rows through this module.

Functions add/flush but never commit; the caller owns the transaction
(routers via get_db, the analysis task via get_db_sync).
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from models import AIAnalysis, DailyReflection, UserProfile
from services.analysis_parser import ParsedAnalysis

PROFILE_COLUMNS = (
    "self_introduction",
    "good_qualities",
    "bad_qualities",
    "life_goals",
    "challenges",
    "additional_info",
)


# ---------------------------------------------------------------------------
# Reflections
# ---------------------------------------------------------------------------

def insert_reflection(
    db: Session,
    user_id: UUID,
    reflection_date: date,
    answers: Dict[str, str],
) -> DailyReflection:
    reflection = DailyReflection(
        user_id=user_id,
        reflection_date=reflection_date,
        **answers,
    )
    db.add(reflection)
    db.flush()
    return reflection


def find_reflection_by_user_and_date(
    db: Session, user_id: UUID, reflection_date: date
) -> Optional[DailyReflection]:
    return (
        db.query(DailyReflection)
        .filter(
            DailyReflection.user_id == user_id,
            DailyReflection.reflection_date == reflection_date,
        )
        .first()
    )


def find_reflection(db: Session, user_id: UUID, reflection_id: UUID) -> Optional[DailyReflection]:
    return (
        db.query(DailyReflection)
        .filter(
            DailyReflection.id == reflection_id,
            DailyReflection.user_id == user_id,
        )
        .first()
    )


def list_reflections(
    db: Session, user_id: UUID, limit: int = 30, offset: int = 0
) -> List[DailyReflection]:
    return (
        db.query(DailyReflection)
        .filter(DailyReflection.user_id == user_id)
        .order_by(desc(DailyReflection.reflection_date))
        .offset(offset)
        .limit(limit)
        .all()
    )


def find_recent_reflections(db: Session, user_id: UUID, n: int) -> List[DailyReflection]:
    """Up to n reflections, newest date first."""
    return list_reflections(db, user_id, limit=n, offset=0)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

def find_profile(db: Session, user_id: UUID) -> Optional[UserProfile]:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def upsert_profile(
    db: Session, user_id: UUID, fields: Dict[str, Optional[str]]
) -> Tuple[UserProfile, bool]:
    """
    Create the user's profile or overwrite the existing one.

    Returns (profile, created).
    """
    values = {column: fields.get(column) for column in PROFILE_COLUMNS}

    profile = find_profile(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id, **values)
        db.add(profile)
        db.flush()
        return profile, True

    for column, value in values.items():
        setattr(profile, column, value)
    db.flush()
    return profile, False


# ---------------------------------------------------------------------------
# Analyses
# ---------------------------------------------------------------------------

def insert_analysis(
    db: Session,
    user_id: UUID,
    reflection_id: UUID,
    parsed: ParsedAnalysis,
) -> AIAnalysis:
    """
    Attach an analysis to one of the user's reflections.

    Raises LookupError when the reflection does not exist for this user.
    """
    if find_reflection(db, user_id, reflection_id) is None:
        raise LookupError(f"Reflection {reflection_id} not found for user {user_id}")

    analysis = AIAnalysis(
        user_id=user_id,
        reflection_id=reflection_id,
        **parsed.to_fields(),
    )
    db.add(analysis)
    db.flush()
    return analysis


def find_latest_analysis(
    db: Session, user_id: UUID
) -> Optional[Tuple[AIAnalysis, DailyReflection]]:
    """Newest analysis for the user, with the reflection it belongs to."""
    row = (
        db.query(AIAnalysis, DailyReflection)
        .join(DailyReflection, DailyReflection.id == AIAnalysis.reflection_id)
        .filter(
            AIAnalysis.user_id == user_id,
            DailyReflection.user_id == user_id,
        )
        .order_by(desc(AIAnalysis.created_at))
        .first()
    )
    if row is None:
        return None
    analysis, reflection = row
    return analysis, reflection


def find_analysis_by_reflection(
    db: Session, user_id: UUID, reflection_id: UUID
) -> Optional[AIAnalysis]:
    # Duplicate background runs may have written twice; the newest wins.
    return (
        db.query(AIAnalysis)
        .filter(
            AIAnalysis.reflection_id == reflection_id,
            AIAnalysis.user_id == user_id,
        )
        .order_by(desc(AIAnalysis.created_at))
        .first()
    )


def list_analyses(
    db: Session, user_id: UUID, limit: int = 30, offset: int = 0
) -> List[Tuple[AIAnalysis, DailyReflection]]:
    rows = (
        db.query(AIAnalysis, DailyReflection)
        .join(DailyReflection, DailyReflection.id == AIAnalysis.reflection_id)
        .filter(
            AIAnalysis.user_id == user_id,
            DailyReflection.user_id == user_id,
        )
        .order_by(desc(AIAnalysis.created_at))
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [(analysis, reflection) for analysis, reflection in rows]
