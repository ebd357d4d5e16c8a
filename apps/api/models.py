from sqlalchemy import Column, Date, DateTime, ForeignKey, Text, Index, Uuid
from sqlalchemy.orm import relationship
from core.database import Base
import uuid
from datetime import datetime, timezone


def _utcnow() -> datetime:
    # Python-side default keeps microsecond ordering on SQLite too.
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)  # Stored lower-cased
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    reflections = relationship("DailyReflection", back_populates="user", cascade="all, delete-orphan")


class UserProfile(Base):
    """
    Static background about a user, written during onboarding.

    Zero or one per user. Every field may be missing when it reaches the
    prompt builder; missing values render as "Not provided".
    """
    __tablename__ = "user_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    self_introduction = Column(Text, nullable=True)
    good_qualities = Column(Text, nullable=True)
    bad_qualities = Column(Text, nullable=True)  # "Areas for improvement"
    life_goals = Column(Text, nullable=True)
    challenges = Column(Text, nullable=True)
    additional_info = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", back_populates="profile")


class DailyReflection(Base):
    """
    One user's answers to the seven daily questions.

    At most one row per (user_id, reflection_date); the unique index backs the
    service-level existence check. Rows are never updated after insert.
    """
    __tablename__ = "daily_reflections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reflection_date = Column(Date, nullable=False)

    day_summary = Column(Text, nullable=False)
    social_media_time = Column(Text, nullable=False)
    truthfulness_kindness = Column(Text, nullable=False)
    conscious_actions = Column(Text, nullable=False)
    overthinking_stress = Column(Text, nullable=False)
    gratitude_expression = Column(Text, nullable=False)
    proud_moment = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    user = relationship("User", back_populates="reflections")
    analyses = relationship("AIAnalysis", back_populates="reflection", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("uq_daily_reflections_user_date", "user_id", "reflection_date", unique=True),
    )


class AIAnalysis(Base):
    """
    Generated feedback for one reflection.

    Written only by the background analysis task. user_id always equals the
    owning reflection's user_id; deleting the reflection deletes the analysis.
    """
    __tablename__ = "ai_analysis"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reflection_id = Column(Uuid, ForeignKey("daily_reflections.id", ondelete="CASCADE"), nullable=False)
    analysis_text = Column(Text, nullable=False, default="")
    recommendations = Column(Text, nullable=False, default="")
    motivational_message = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    reflection = relationship("DailyReflection", back_populates="analyses")

    __table_args__ = (
        Index("ix_ai_analysis_user_created", "user_id", "created_at"),
        Index("ix_ai_analysis_reflection_id", "reflection_id"),
    )
