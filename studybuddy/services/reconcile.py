"""
studybuddy/services/reconcile.py

Turns untrusted model output into a validated plan value:

- strip code fences / surrounding prose
- parse a single JSON object
- validate field by field with explicit defaults
- link each session back to a known (assignment title, subject name) pair

Sessions that do not match any known assignment are kept, just unlinked.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ValidationError, field_validator

from studybuddy.core.errors import MalformedResponse
from studybuddy.models.entities import DEFAULT_PLAN_TITLE
from studybuddy.services.prompts import PendingAssignment

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?")


def _as_text(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, (dict, list)):
        raise ValueError("expected a string")
    return str(v)


def _as_text_list(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    if not isinstance(v, list):
        raise ValueError("expected a list of strings")
    return [str(x) for x in v if x is not None and not isinstance(x, (dict, list))]


# ---------------------------------------------------------------------------
# Wire contract (what the model is asked to return)
# ---------------------------------------------------------------------------

class SessionPayload(BaseModel):
    assignmentTitle: str = ""
    subjectName: str = ""
    date: dt.date
    startTime: str = ""
    endTime: str = ""
    duration: float
    topic: str = ""
    description: str = ""
    tips: List[str] = []

    @field_validator("assignmentTitle", "subjectName", "startTime", "endTime", "topic", "description",
                     mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("tips", mode="before")
    @classmethod
    def _tips(cls, v: Any) -> List[str]:
        return _as_text_list(v)


class InsightsPayload(BaseModel):
    summary: str = ""
    recommendations: List[str] = []
    estimatedTotalHours: Optional[float] = None
    priorityFocus: str = ""

    @field_validator("summary", "priorityFocus", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("recommendations", mode="before")
    @classmethod
    def _recs(cls, v: Any) -> List[str]:
        return _as_text_list(v)

    @field_validator("estimatedTotalHours", mode="before")
    @classmethod
    def _hours(cls, v: Any) -> Any:
        try:
            return float(v)
        except (TypeError, ValueError):
            return None


class PlanPayload(BaseModel):
    title: str = DEFAULT_PLAN_TITLE
    startDate: date
    endDate: date
    sessions: List[SessionPayload] = []
    aiGeneratedInsights: Optional[InsightsPayload] = None

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return DEFAULT_PLAN_TITLE
        return v.strip()

    @field_validator("sessions", mode="before")
    @classmethod
    def _sessions(cls, v: Any) -> Any:
        return [] if v is None else v


# ---------------------------------------------------------------------------
# Reconciled values (ready to persist)
# ---------------------------------------------------------------------------

@dataclass
class ReconciledSession:
    date: date
    start_time: str
    end_time: str
    duration: float
    topic: str
    description: str = ""
    tips: List[str] = field(default_factory=list)
    assignment_id: Optional[int] = None
    subject_id: Optional[int] = None

    @property
    def linked(self) -> bool:
        return self.assignment_id is not None


@dataclass
class ReconciledPlan:
    title: str
    start_date: date
    end_date: date
    sessions: List[ReconciledSession] = field(default_factory=list)
    insights: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    """Remove markdown fences and any prose around the outermost JSON object."""
    cleaned = _FENCE_RE.sub("", text or "").strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        return cleaned
    return cleaned[start:end + 1]


def parse_plan_payload(text: str) -> PlanPayload:
    body = strip_code_fences(text)
    try:
        raw = json.loads(body)
    except json.JSONDecodeError as e:
        log.warning("[PLAN] JSON parse failed: %s; content: %.500s", e, text)
        raise MalformedResponse() from e
    if not isinstance(raw, dict):
        log.warning("[PLAN] expected a JSON object, got %s", type(raw).__name__)
        raise MalformedResponse()
    try:
        return PlanPayload.model_validate(raw)
    except ValidationError as e:
        log.warning("[PLAN] plan shape invalid: %s", e)
        raise MalformedResponse() from e


def _index_assignments(
    assignments: Sequence[PendingAssignment],
) -> Dict[Tuple[str, str], PendingAssignment]:
    index: Dict[Tuple[str, str], PendingAssignment] = {}
    for a in assignments:
        # first one in input order wins
        index.setdefault((a.title, a.subject_name), a)
    return index


def reconcile_plan(text: str, assignments: Sequence[PendingAssignment]) -> ReconciledPlan:
    payload = parse_plan_payload(text)
    index = _index_assignments(assignments)

    sessions: List[ReconciledSession] = []
    for s in payload.sessions:
        match = index.get((s.assignmentTitle, s.subjectName))
        sessions.append(ReconciledSession(
            date=s.date,
            start_time=s.startTime,
            end_time=s.endTime,
            duration=s.duration,
            topic=s.topic,
            description=s.description,
            tips=list(s.tips),
            assignment_id=match.id if match else None,
            subject_id=match.subject_id if match else None,
        ))

    linked = sum(1 for s in sessions if s.linked)
    if linked < len(sessions):
        log.info("[PLAN] %d of %d sessions did not match a known assignment",
                 len(sessions) - linked, len(sessions))

    insights = payload.aiGeneratedInsights.model_dump() if payload.aiGeneratedInsights else None
    return ReconciledPlan(
        title=payload.title,
        start_date=payload.startDate,
        end_date=payload.endDate,
        sessions=sessions,
        insights=insights,
    )
