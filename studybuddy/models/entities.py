# studybuddy/models/entities.py
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text, event,
)
from sqlalchemy.orm import relationship

from .db import Base

ASSIGNMENT_TYPES = ("homework", "project", "exam", "quiz", "presentation", "other")
PRIORITIES = ("low", "medium", "high")
DEFAULT_SUBJECT_COLOR = "#6366f1"
DEFAULT_PLAN_TITLE = "AI-Generated Study Plan"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, default="")
    instructor = Column(String(100), nullable=False, default="")
    credits = Column(Integer, nullable=False, default=0)
    color = Column(String(7), nullable=False, default=DEFAULT_SUBJECT_COLOR)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False, default="homework")
    due_date = Column(DateTime(timezone=True), index=True, nullable=False)
    priority = Column(String(10), nullable=False, default="medium")
    estimated_hours = Column(Float, nullable=False, default=2.0)
    progress = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, index=True, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    subject = relationship("Subject", lazy="joined")


@event.listens_for(Assignment, "before_insert")
@event.listens_for(Assignment, "before_update")
def _sync_completion(mapper, connection, target: Assignment) -> None:
    """Completion flag and timestamp always follow progress on write."""
    if (target.progress or 0) >= 100:
        target.is_completed = True
        if target.completed_at is None:
            target.completed_at = utcnow()
    else:
        target.is_completed = False
        target.completed_at = None


class StudyPlan(Base):
    __tablename__ = "study_plans"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String(200), nullable=False, default=DEFAULT_PLAN_TITLE)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    ai_generated_insights = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), index=True, nullable=False, default=utcnow)

    sessions = relationship(
        "StudySession",
        order_by="StudySession.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class StudySession(Base):
    __tablename__ = "study_sessions"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    plan_id = Column(Integer, ForeignKey("study_plans.id", ondelete="CASCADE"), index=True, nullable=False)
    position = Column(Integer, nullable=False)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(20), nullable=False, default="")
    end_time = Column(String(20), nullable=False, default="")
    duration = Column(Float, nullable=False)
    topic = Column(String(300), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    tips = Column(JSON, nullable=False, default=list)
    is_completed = Column(Boolean, nullable=False, default=False)

    assignment = relationship("Assignment", lazy="selectin")
    subject = relationship("Subject", lazy="selectin")
