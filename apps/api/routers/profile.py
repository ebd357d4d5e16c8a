"""
Profile API Router

POST /v1/profile   create or replace the user's background profile
GET  /v1/profile   {"profile": {...}} or {"profile": null}

The profile only feeds the analysis prompt. It is optional: reflections
can be submitted before onboarding is finished.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.database import get_db
from core.exceptions import require_fields
from models import User, UserProfile
from services import journal_store

router = APIRouter(prefix="/v1/profile", tags=["profile"])

REQUIRED_PROFILE_FIELDS = {
    "self_introduction": "Self introduction is required",
    "good_qualities": "Good qualities are required",
    "bad_qualities": "Bad qualities are required",
    "life_goals": "Life goals are required",
    "challenges": "Challenges are required",
}


class ProfileUpsert(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    self_introduction: Optional[str] = None
    good_qualities: Optional[str] = None
    bad_qualities: Optional[str] = None
    life_goals: Optional[str] = None
    challenges: Optional[str] = None
    additional_info: Optional[str] = None


def _to_out(profile: UserProfile) -> dict:
    return {
        "id": str(profile.id),
        "selfIntroduction": profile.self_introduction,
        "goodQualities": profile.good_qualities,
        "badQualities": profile.bad_qualities,
        "lifeGoals": profile.life_goals,
        "challenges": profile.challenges,
        "additionalInfo": profile.additional_info,
        "createdAt": profile.created_at,
        "updatedAt": profile.updated_at,
    }


@router.post("")
def save_profile(
    payload: ProfileUpsert,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create the profile on first call, overwrite it afterwards."""
    fields = payload.model_dump()
    require_fields(fields, REQUIRED_PROFILE_FIELDS)

    profile, _created = journal_store.upsert_profile(db, current_user.id, fields)
    db.commit()
    db.refresh(profile)

    return {
        "message": "Profile saved successfully",
        "profile": _to_out(profile),
    }


@router.get("")
def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = journal_store.find_profile(db, current_user.id)
    return {"profile": _to_out(profile) if profile else None}
