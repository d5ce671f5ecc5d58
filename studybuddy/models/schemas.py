import datetime as dt
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .entities import DEFAULT_SUBJECT_COLOR

AssignmentType = Literal["homework", "project", "exam", "quiz", "presentation", "other"]
Priority = Literal["low", "medium", "high"]


class UserRegister(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)


class UserLogin(BaseModel):
    email: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


# ---------------------------------------------------------------------------
# Subjects
# ---------------------------------------------------------------------------

class SubjectIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field("", max_length=20)
    instructor: str = Field("", max_length=100)
    credits: int = Field(0, ge=0, le=10)
    color: str = Field(DEFAULT_SUBJECT_COLOR, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("name", "code", "instructor")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("code")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class SubjectRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    color: str


class SubjectOut(SubjectRef):
    instructor: str
    credits: int
    created_at: datetime


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------

class AssignmentIn(BaseModel):
    subject_id: int
    title: str = Field(min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    type: AssignmentType = "homework"
    due_date: datetime
    priority: Priority = "medium"
    estimated_hours: float = Field(2.0, ge=0.5, le=100)

    @field_validator("title", "description")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class ProgressIn(BaseModel):
    progress: int = Field(ge=0, le=100)


class AssignmentRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    type: str
    due_date: datetime
    priority: str
    progress: int
    is_completed: bool


class AssignmentOut(AssignmentRef):
    subject_id: int
    subject: Optional[SubjectRef] = None
    description: str
    estimated_hours: float
    completed_at: Optional[datetime] = None
    created_at: datetime


class DashboardSummary(BaseModel):
    subjects: int
    total: int
    pending: int
    completed: int
    upcoming: List[AssignmentOut]


# ---------------------------------------------------------------------------
# Study plans
# ---------------------------------------------------------------------------

class InsightsOut(BaseModel):
    summary: str = ""
    recommendations: List[str] = []
    estimatedTotalHours: Optional[float] = None
    priorityFocus: str = ""


class StudySessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assignment_id: Optional[int] = None
    subject_id: Optional[int] = None
    assignment: Optional[AssignmentRef] = None
    subject: Optional[SubjectRef] = None
    date: dt.date
    start_time: str
    end_time: str
    duration: float
    topic: str
    description: str
    tips: List[str]
    is_completed: bool


class StudyPlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start_date: date
    end_date: date
    sessions: List[StudySessionOut]
    ai_generated_insights: Optional[InsightsOut] = None
    created_at: datetime


class StudyPlanList(BaseModel):
    study_plans: List[StudyPlanOut]
    count: int
